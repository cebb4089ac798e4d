"""Middleware configuration for the FastAPI application."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from nq_server.core.app.middleware.concurrency_limit import ConcurrencyLimitMiddleware
from nq_server.core.app.middleware.logging_middleware import LoggingMiddleware
from nq_server.core.config.app_config import AppConfig

logger = logging.getLogger(__name__)


def configure_middleware(app: FastAPI, config: AppConfig) -> None:
    """Configure middleware for the FastAPI application.

    Args:
        app: The FastAPI application
        config: The application configuration
    """
    if config.logging.request_logging or config.logging.response_logging:
        app.add_middleware(
            LoggingMiddleware,
            log_requests=config.logging.request_logging,
            log_responses=config.logging.response_logging,
        )
        logger.debug("Request/response logging middleware installed")

    # Added last so it wraps everything else
    if config.max_connections is not None:
        app.add_middleware(
            ConcurrencyLimitMiddleware, max_concurrency=config.max_connections
        )
        logger.debug("Concurrency limit of %d installed", config.max_connections)
