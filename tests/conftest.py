"""
Root conftest.py for pdf-vault tests.

Fixtures are organized by layer:
- Storage and catalog fixtures (in-memory backends)
- Service and auth fixtures
- API fixtures (FastAPI app, async client, admin headers)
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from pdf_vault.api.fastapi import create_app
from pdf_vault.app.settings import AppSettings
from pdf_vault.auth.gate import AuthGate
from pdf_vault.documents.catalog import InMemoryDocumentCatalog
from pdf_vault.documents.service import DocumentService
from pdf_vault.storage.backends.memory import MemoryBlobStore

from tests.helpers import ADMIN_EMAIL, ADMIN_PASSWORD, JWT_SECRET, UPLOAD_LIMIT


def pytest_collection_modifyitems(config, items):
    """Mark tests by the folder they live in so `-m storage` etc. select them."""
    for item in items:
        norm = str(item.fspath).replace("\\", "/")
        if "/unit/storage/" in norm:
            item.add_marker(pytest.mark.storage)
        if "/unit/documents/" in norm:
            item.add_marker(pytest.mark.documents)
        if "/unit/auth/" in norm:
            item.add_marker(pytest.mark.security)
        if "/unit/api/" in norm:
            item.add_marker(pytest.mark.api)


# =============================================================================
# STORAGE / CATALOG
# =============================================================================


@pytest.fixture
def blob_store() -> MemoryBlobStore:
    return MemoryBlobStore(max_bytes=UPLOAD_LIMIT, chunk_size=1024)


@pytest.fixture
def catalog() -> InMemoryDocumentCatalog:
    return InMemoryDocumentCatalog()


# =============================================================================
# SERVICE / AUTH
# =============================================================================


@pytest.fixture
def service(blob_store, catalog) -> DocumentService:
    return DocumentService(blob_store, catalog)


@pytest.fixture
def auth_gate() -> AuthGate:
    return AuthGate(secret=JWT_SECRET, admin_email=ADMIN_EMAIL, admin_password=ADMIN_PASSWORD)


@pytest.fixture
def admin_token(auth_gate) -> str:
    return auth_gate.issue_token(ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def admin_headers(admin_token) -> dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}


# =============================================================================
# API
# =============================================================================


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(max_upload_bytes=UPLOAD_LIMIT)


@pytest.fixture
def app(app_settings, service, auth_gate):
    return create_app(app_settings=app_settings, service=service, auth_gate=auth_gate)


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
