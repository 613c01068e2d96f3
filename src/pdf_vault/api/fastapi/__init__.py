from __future__ import annotations

import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from pdf_vault.app.core.env import get_env
from pdf_vault.app.settings import AppSettings, get_app_settings
from pdf_vault.auth.gate import AuthGate
from pdf_vault.auth.settings import get_auth_settings
from pdf_vault.db.nosql.mongo import MongoHandle
from pdf_vault.db.settings import MongoSettings, get_mongo_settings
from pdf_vault.documents.mongo import MongoDocumentCatalog
from pdf_vault.documents.service import DocumentService
from pdf_vault.storage.backends.gridfs_store import GridFSBlobStore

from .middleware.errors.catchall import CatchAllExceptionMiddleware
from .middleware.errors.handlers import register_error_handlers
from .middleware.request_size_limit import MULTIPART_OVERHEAD, RequestSizeLimitMiddleware
from .routers import register_all_routers

logger = logging.getLogger(__name__)


def _gen_operation_id_factory():
    used: dict[str, int] = defaultdict(int)

    def _gen(route: APIRoute) -> str:
        base = route.name or getattr(route.endpoint, "__name__", "op")
        tag = route.tags[0] if route.tags else ""
        candidate = base
        if used[candidate] and tag and not base.startswith(tag):
            candidate = f"{tag}_{base}"
        if used[candidate]:
            candidate = f"{candidate}_{used[candidate] + 1}"
        used[candidate] += 1
        return candidate

    return _gen


async def build_mongo_service(
    app_settings: AppSettings,
    mongo_settings: MongoSettings,
) -> tuple[MongoHandle, DocumentService]:
    """Connect to Mongo and assemble the GridFS + catalog backed service."""
    handle = MongoHandle.from_settings(mongo_settings)
    await handle.connect()
    try:
        catalog = MongoDocumentCatalog(handle.db, collection=mongo_settings.collection)
        await catalog.ensure_indexes()
        blobs = GridFSBlobStore(
            handle.db,
            bucket_name=mongo_settings.bucket_name,
            max_bytes=app_settings.max_upload_bytes,
        )
    except Exception:
        await handle.close()
        raise
    service = DocumentService(
        blobs,
        catalog,
        auto_archive_after=timedelta(days=app_settings.auto_archive_after_days),
    )
    return handle, service


def create_app(
    *,
    app_settings: Optional[AppSettings] = None,
    service: Optional[DocumentService] = None,
    auth_gate: Optional[AuthGate] = None,
    mongo_settings: Optional[MongoSettings] = None,
) -> FastAPI:
    """Build the HTTP app.

    Pass ``service`` to run against ready-made stores (tests, local demos);
    otherwise the lifespan connects to MongoDB and closes the connection on
    shutdown.
    """
    settings = app_settings or get_app_settings()
    gate = auth_gate or AuthGate.from_settings(get_auth_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        handle: MongoHandle | None = None
        if getattr(app.state, "document_service", None) is None:
            handle, app.state.document_service = await build_mongo_service(
                settings, mongo_settings or get_mongo_settings()
            )
        try:
            yield
        finally:
            if handle is not None:
                await handle.close()

    app = FastAPI(
        title=settings.name,
        version=settings.version,
        lifespan=lifespan,
        generate_unique_id_function=_gen_operation_id_factory(),
    )
    app.state.auth_gate = gate
    app.state.document_service = service

    # add_middleware wraps, so the last one added runs first
    app.add_middleware(CatchAllExceptionMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_upload_bytes + MULTIPART_OVERHEAD)
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    register_error_handlers(app)

    register_all_routers(app, base_package="pdf_vault.api.fastapi.routers")

    logger.info(f"{settings.version} version of {settings.name} initialized [env: {get_env()}]")
    return app


__all__ = ["build_mongo_service", "create_app"]
