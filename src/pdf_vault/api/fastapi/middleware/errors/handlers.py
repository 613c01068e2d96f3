from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse, PlainTextResponse, Response

from pdf_vault.exceptions import PdfVaultError

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Server error"


def plain_text_errors(request: Request) -> None:
    """Route dependency: render errors as text/plain (for binary streaming routes)."""
    request.state.plain_errors = True


def error_response(request: Request, status: int, message: str) -> Response:
    if getattr(request.state, "plain_errors", False):
        return PlainTextResponse(message, status_code=status)
    return JSONResponse({"error": message}, status_code=status)


async def _handle_app_error(request: Request, exc: PdfVaultError) -> Response:
    status = exc.status_code
    if status >= 500:
        logger.error(
            "%s on %s %s: %s",
            type(exc).__name__, request.method, request.url.path, exc.message,
            exc_info=exc,
            extra={"http_method": request.method, "path": request.url.path, "status_code": status},
        )
        return error_response(request, status, GENERIC_ERROR)
    logger.debug("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return error_response(request, status, exc.message)


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> Response:
    first = exc.errors()[0] if exc.errors() else {}
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"Invalid request: {loc} {first.get('msg', '')}".strip() if loc else "Invalid request"
    return error_response(request, 400, message)


async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> Response:
    response = error_response(request, exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PdfVaultError, _handle_app_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)  # type: ignore[arg-type]


__all__ = ["GENERIC_ERROR", "error_response", "plain_text_errors", "register_error_handlers"]
