"""Error taxonomy shared by the storage, catalog, service and HTTP layers.

Each error carries the HTTP status it maps to so the FastAPI handlers can
translate without a lookup table. Messages are safe to show to clients,
except for ``StorageWriteError`` whose message is logged and replaced with a
generic one.
"""

from __future__ import annotations


class PdfVaultError(Exception):
    """Base class for all pdf-vault errors."""

    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PdfVaultError):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(PdfVaultError):
    status_code = 401
    default_message = "Invalid token"


class InvalidCredentialsError(PdfVaultError):
    status_code = 401
    default_message = "Invalid credentials"


class NotFoundError(PdfVaultError):
    status_code = 404
    default_message = "Not found"


class PayloadTooLargeError(PdfVaultError):
    status_code = 413
    default_message = "Payload too large"

    def __init__(self, message: str | None = None, *, limit: int | None = None):
        if message is None and limit is not None:
            message = f"File exceeds the {limit} byte upload limit"
        super().__init__(message)
        self.limit = limit


class StorageWriteError(PdfVaultError):
    status_code = 500
    default_message = "Upload failed"


__all__ = [
    "PdfVaultError",
    "ValidationError",
    "Unauthorized",
    "InvalidCredentialsError",
    "NotFoundError",
    "PayloadTooLargeError",
    "StorageWriteError",
]
