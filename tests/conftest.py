import contextlib
import logging
from collections.abc import Iterator

import pytest
import structlog
from fastapi import FastAPI
from fastapi.testclient import TestClient
from nq_server.core.app.application_builder import build_app
from nq_server.core.config.app_config import (
    ENVIRONMENT_BINDINGS,
    AppConfig,
    LoggingConfig,
    StreamingConfig,
)

# Small sizes keep the large-download tests fast: 10 full chunks plus a
# truncated 512-byte tail.
TEST_CHUNK_SIZE = 1024
TEST_LARGE_DOWNLOAD_SIZE = 10 * TEST_CHUNK_SIZE + 512


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every environment variable the configuration reads."""
    for name, _path, _transform in ENVIRONMENT_BINDINGS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        hostname="speed.example.test",
        port=8080,
        streaming=StreamingConfig(
            chunk_size=TEST_CHUNK_SIZE,
            large_download_size=TEST_LARGE_DOWNLOAD_SIZE,
        ),
        logging=LoggingConfig(request_logging=False),
    )


@pytest.fixture
def app(app_config: AppConfig) -> FastAPI:
    return build_app(app_config)


@pytest.fixture
def test_client(app: FastAPI) -> Iterator[TestClient]:
    """A TestClient running the application lifespan."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Restore root logger handlers and structlog defaults after a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    filters = list(root.filters)
    level = root.level
    try:
        yield
    finally:
        for handler in list(root.handlers):
            if handler not in handlers:
                with contextlib.suppress(Exception):
                    handler.close()
        root.handlers[:] = handlers
        root.filters[:] = filters
        root.setLevel(level)
        structlog.reset_defaults()
