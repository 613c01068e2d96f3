"""Small helpers shared by the unit tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import AsyncIterator

from bson import ObjectId

from pdf_vault.documents.models import Document

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct horse battery staple"
JWT_SECRET = "test-secret-0123456789abcdef0123456789abcdef"
UPLOAD_LIMIT = 256 * 1024

PDF_BYTES = b"%PDF-1.4\n" + bytes(range(256)) * 40 + b"\n%%EOF\n"


async def byte_stream(data: bytes, chunk_size: int = 1000) -> AsyncIterator[bytes]:
    for start in range(0, len(data), chunk_size):
        yield data[start:start + chunk_size]


async def failing_stream(data: bytes, exc: Exception) -> AsyncIterator[bytes]:
    yield data
    raise exc


def make_document(*, age: timedelta = timedelta(0), now: datetime | None = None, **overrides) -> Document:
    now = now or datetime.now(timezone.utc)
    fields = {
        "id": str(ObjectId()),
        "title": "Quarterly report",
        "blob_ref": str(ObjectId()),
        "filename": "report.pdf",
        "created_at": now - age,
    }
    fields.update(overrides)
    return Document(**fields)
