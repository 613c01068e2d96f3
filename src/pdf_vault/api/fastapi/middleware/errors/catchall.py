from __future__ import annotations

import logging

from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .handlers import GENERIC_ERROR, error_response

logger = logging.getLogger(__name__)


class CatchAllExceptionMiddleware:
    """
    Last line of defence for exceptions no handler claimed: log with traceback,
    answer 500 with a generic body. Internal details never reach the client.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def _send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, _send)
        except Exception as exc:
            request = Request(scope, receive=receive)
            logger.error(
                f"{type(exc).__name__} on {request.url.path} (500): {exc}",
                exc_info=True,
                extra={"http_method": request.method, "path": request.url.path, "status_code": 500},
            )
            if response_started:
                # headers are gone already (e.g. mid-stream); nothing sane to send
                raise
            resp = error_response(request, 500, GENERIC_ERROR)
            await resp(scope, receive, send)
