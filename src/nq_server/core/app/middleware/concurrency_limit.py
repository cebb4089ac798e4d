"""Cap on the number of requests served at once."""

from __future__ import annotations

from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from nq_server.core.common.logging_utils import get_logger
from nq_server.core.constants.http_status_constants import (
    HTTP_503_SERVICE_UNAVAILABLE_MESSAGE,
)


class ConcurrencyLimitMiddleware:
    """Answer 503 once ``max_concurrency`` HTTP requests are in flight.

    A request counts from dispatch until its response, including a streamed
    body, has finished or been abandoned. With HTTP/2 each stream is a
    request, so the cap holds however requests are spread over connections.
    """

    def __init__(self, app: ASGIApp, max_concurrency: int) -> None:
        self.app = app
        self.max_concurrency = max_concurrency
        self.active = 0
        self.logger = get_logger("api")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        if self.active >= self.max_concurrency:
            self.logger.warning(
                "Concurrency limit reached",
                limit=self.max_concurrency,
                path=scope["path"],
            )
            response = PlainTextResponse(
                HTTP_503_SERVICE_UNAVAILABLE_MESSAGE, status_code=503
            )
            await response(scope, receive, send)
            return

        self.active += 1
        try:
            await self.app(scope, receive, send)
        finally:
            self.active -= 1
