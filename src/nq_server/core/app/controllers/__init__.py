"""
Controllers for the network quality API.

Routing is a flat table of literal (method, path) pairs. Any request that
does not match an entry exactly, including a known path with another method,
is answered by the not-found handler registered with the exception handlers.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, NamedTuple

from fastapi import FastAPI

from nq_server.core.app.controllers.config_controller import get_config
from nq_server.core.app.controllers.measurement_controller import (
    large_download,
    small_download,
    upload,
)
from nq_server.core.constants.api_constants import (
    CONFIG_PATH,
    LARGE_DOWNLOAD_PATH,
    SMALL_DOWNLOAD_PATH,
    UPLOAD_PATH,
)

logger = logging.getLogger(__name__)


class RouteSpec(NamedTuple):
    method: str
    path: str
    endpoint: Callable[..., Any]
    name: str


ROUTE_TABLE: tuple[RouteSpec, ...] = (
    RouteSpec("GET", CONFIG_PATH, get_config, "config"),
    RouteSpec("GET", SMALL_DOWNLOAD_PATH, small_download, "small"),
    RouteSpec("GET", LARGE_DOWNLOAD_PATH, large_download, "large"),
    RouteSpec("POST", UPLOAD_PATH, upload, "upload"),
)


def register_routes(app: FastAPI) -> None:
    """Register application routes with the FastAPI app.

    Args:
        app: The FastAPI application instance
    """
    for route in ROUTE_TABLE:
        app.add_api_route(
            route.path,
            route.endpoint,
            methods=[route.method],
            name=route.name,
            include_in_schema=False,
        )

    logger.info("Routes registered successfully")


__all__ = ["ROUTE_TABLE", "RouteSpec", "register_routes"]
