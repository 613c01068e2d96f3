from __future__ import annotations

import logging
from typing import Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from pdf_vault.db.settings import MongoSettings

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "pdf_vault"


class MongoHandle:
    """Owns one AsyncMongoClient for the lifetime of the process.

    Built once at startup and handed to the catalog and blob store, which only
    ever see ``handle.db``. ``connect()`` must run before first use and
    ``close()`` at shutdown.
    """

    def __init__(self, url: str, *, database: Optional[str] = None, server_selection_timeout_ms: int = 5000):
        self._url = url
        self._database_name = database
        self._timeout_ms = server_selection_timeout_ms
        self._client: AsyncMongoClient | None = None
        self._db: AsyncDatabase | None = None

    @classmethod
    def from_settings(cls, settings: MongoSettings) -> "MongoHandle":
        return cls(
            settings.resolved_mongo_url,
            database=settings.database,
            server_selection_timeout_ms=settings.server_selection_timeout_ms,
        )

    @property
    def db(self) -> AsyncDatabase:
        if self._db is None:
            raise RuntimeError("Mongo not initialized. Call connect() first.")
        return self._db

    @property
    def connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        if self._client is not None:
            return
        client = AsyncMongoClient(self._url, serverSelectionTimeoutMS=self._timeout_ms, tz_aware=True)
        if self._database_name:
            db = client[self._database_name]
        else:
            db = client.get_default_database(default=DEFAULT_DATABASE)
        try:
            await client.admin.command("ping")
        except Exception:
            await client.close()
            raise
        self._client, self._db = client, db
        logger.info("Mongo connected (database=%s)", db.name)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._db = None
            logger.info("Mongo connection closed")
