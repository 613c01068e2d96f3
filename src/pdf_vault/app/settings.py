from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MIB = 1024 * 1024


class AppSettings(BaseSettings):
    # flat = easy env overrides
    name: str = "pdf-vault"
    version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = Field(default=5000, validation_alias=AliasChoices("APP_PORT", "PORT"))

    max_upload_bytes: int = 50 * MIB
    auto_archive_after_days: int = 30
    cors_origins: list[str] = Field(default_factory=list)

    model_config = SettingsConfigDict(
        env_prefix="APP_",            # APP_NAME, APP_MAX_UPLOAD_BYTES, ...
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache
def get_app_settings(**kwargs) -> AppSettings:
    # Only include kwargs that are not None, so defaults in AppSettings are used
    filtered_kwargs = {k: v for k, v in kwargs.items() if v is not None}
    return AppSettings(**filtered_kwargs)
