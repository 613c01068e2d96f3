from .auth import require_admin
from .services import AuthGateDep, DocumentServiceDep, get_auth_gate, get_document_service

__all__ = [
    "AuthGateDep",
    "DocumentServiceDep",
    "get_auth_gate",
    "get_document_service",
    "require_admin",
]
