from __future__ import annotations

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    jwt_secret: SecretStr
    jwt_algorithm: str = "HS256"
    token_lifetime_seconds: int = 60 * 60 * 12

    # Single administrator account
    admin_email: str = ""
    admin_password: SecretStr = SecretStr("")

    model_config = SettingsConfigDict(env_prefix="AUTH_", env_file=".env", extra="ignore")


_settings: AuthSettings | None = None


def get_auth_settings() -> AuthSettings:
    global _settings
    if _settings is None:
        _settings = AuthSettings()
    return _settings
