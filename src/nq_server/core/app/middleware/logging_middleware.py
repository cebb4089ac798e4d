from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from nq_server.core.common.logging_utils import get_logger


class LoggingMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        log_requests: bool = True,
        log_responses: bool = False,
    ):
        super().__init__(app)
        self.log_requests = log_requests
        self.log_responses = log_responses
        self.logger = get_logger("api")

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if self.log_requests:
            client = request.client.host if request.client else "unknown"
            self.logger.info(
                f"{request.method} {request.url.path}", client=client
            )

        start = time.perf_counter()
        response = await call_next(request)

        if self.log_responses:
            # Streamed bodies are still in flight here; this times the headers only
            self.logger.info(
                "Response sent",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 3),
            )

        return response
