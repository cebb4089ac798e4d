from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse, PlainTextResponse, Response

from nq_server.core.common.exceptions import NetworkQualityError
from nq_server.core.transport.fastapi.response_adapters import not_found_response

logger = logging.getLogger(__name__)

# Unknown paths and known paths with another method are both "not found"
NOT_FOUND_STATUS_CODES = frozenset({404, 405})


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Answer routing misses with a plain 404 and keep other HTTP errors as-is."""
    if not isinstance(exc, StarletteHTTPException):
        raise exc
    if exc.status_code in NOT_FOUND_STATUS_CODES:
        return not_found_response()
    return PlainTextResponse(
        str(exc.detail), status_code=exc.status_code, headers=exc.headers
    )


async def network_quality_error_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Convert project errors into a JSON error envelope for that request only."""
    if not isinstance(exc, NetworkQualityError):
        raise exc
    logger.warning(
        "%s on %s %s: %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc.message,
    )
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(NetworkQualityError, network_quality_error_handler)
