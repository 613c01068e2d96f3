from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MongoSettings(BaseSettings):
    """
    MongoDB settings.

    Env support:
      - Prefer DB_* variables: DB_MONGO_URL, DB_DATABASE, DB_BUCKET_NAME, DB_COLLECTION
      - Also accepts MONGODB_URI / MONGO_URL as a fallback for convenience.
    """

    mongo_url: Optional[str] = Field(default=None)
    database: Optional[str] = Field(default=None)  # None -> database named in the URL
    bucket_name: str = Field(default="pdfs")
    collection: str = Field(default="pdfs")
    server_selection_timeout_ms: int = Field(default=5000)

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def resolved_mongo_url(self) -> str:
        url = self.mongo_url or os.getenv("MONGODB_URI") or os.getenv("MONGO_URL")
        if not url:
            raise ValueError("MONGODB_URI or DB_MONGO_URL must be set for database connectivity")
        return url


@lru_cache
def get_mongo_settings(**kwargs) -> MongoSettings:
    filtered = {k: v for k, v in kwargs.items() if v is not None}
    return MongoSettings(**filtered)
