from .gate import ADMIN_ROLE, AuthGate, extract_bearer_token
from .settings import AuthSettings, get_auth_settings

__all__ = [
    "ADMIN_ROLE",
    "AuthGate",
    "extract_bearer_token",
    "AuthSettings",
    "get_auth_settings",
]
