from . import api, app

from .exceptions import (
    InvalidCredentialsError,
    NotFoundError,
    PayloadTooLargeError,
    PdfVaultError,
    StorageWriteError,
    Unauthorized,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    # Modules
    "app",
    "api",
    # Errors
    "PdfVaultError",
    "ValidationError",
    "Unauthorized",
    "InvalidCredentialsError",
    "NotFoundError",
    "PayloadTooLargeError",
    "StorageWriteError",
]
