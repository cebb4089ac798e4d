"""
Application builder.

This module provides the ApplicationBuilder class that assembles the FastAPI
application from an AppConfig: routes, middleware, exception handlers and
lifespan handlers.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from nq_server import __version__
from nq_server.core.app.controllers import register_routes
from nq_server.core.app.exception_handlers import register_exception_handlers
from nq_server.core.app.middleware_config import configure_middleware
from nq_server.core.common.exceptions import InitializationError
from nq_server.core.config.app_config import AppConfig

logger = logging.getLogger(__name__)


class ApplicationBuilder:
    """
    Builder for creating the FastAPI application.

    Example:
        app = ApplicationBuilder().build(config)
    """

    def build(self, config: AppConfig) -> FastAPI:
        """
        Build the FastAPI application.

        Args:
            config: The application configuration

        Returns:
            Configured FastAPI application

        Raises:
            InitializationError: If the application cannot be assembled
        """
        logger.info("Starting application build process...")
        try:
            app = self._create_fastapi_app(config)
        except Exception as e:
            logger.error(f"Application build failed: {e}")
            raise InitializationError(
                f"Application build failed: {e}", details={"error_type": type(e).__name__}
            ) from e
        logger.info("FastAPI application created successfully")
        return app

    def _create_fastapi_app(self, config: AppConfig) -> FastAPI:
        # Routing must be literal: no documentation routes and no
        # trailing-slash redirects.
        app: FastAPI = FastAPI(
            title="Network Quality Server",
            description="Latency and throughput measurement endpoints",
            version=__version__,
            docs_url=None,
            redoc_url=None,
            openapi_url=None,
            redirect_slashes=False,
            lifespan=self._lifespan,
        )

        # Read-only for the lifetime of the process
        app.state.app_config = config
        app.state.public_endpoint = config.public_endpoint()

        configure_middleware(app, config)
        register_routes(app)
        register_exception_handlers(app)

        return app

    @staticmethod
    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Application startup complete, advertising %s",
            app.state.public_endpoint.base_url,
        )
        yield
        logger.info("Shutting down application")


def build_app(config: AppConfig | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Application configuration, defaults to loading from environment

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = AppConfig.from_env()
    return ApplicationBuilder().build(config)
