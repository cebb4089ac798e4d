"""FastAPI dependencies exposing the read-only process configuration."""

from __future__ import annotations

from fastapi import Request

from nq_server.core.config.app_config import AppConfig, StreamingConfig
from nq_server.core.domain.configuration_document import PublicEndpoint


def get_app_config(request: Request) -> AppConfig:
    return request.app.state.app_config  # type: ignore[no-any-return]


def get_public_endpoint(request: Request) -> PublicEndpoint:
    return request.app.state.public_endpoint  # type: ignore[no-any-return]


def get_streaming_config(request: Request) -> StreamingConfig:
    return get_app_config(request).streaming
