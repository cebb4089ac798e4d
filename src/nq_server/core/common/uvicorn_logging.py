"""Logging configuration handed to uvicorn.

Uvicorn applies this with ``logging.config.dictConfig`` when the server is
configured. Its loggers share the application's format and environment tag.
"""

from __future__ import annotations

from typing import Any

from nq_server.core.common.logging_utils import DEFAULT_LOG_FORMAT

UVICORN_LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "env_tag": {
            "()": "nq_server.core.common.logging_utils.EnvironmentTaggingFilter",
        },
    },
    "formatters": {
        "default": {
            "()": "nq_server.core.common.logging_utils.EnvironmentTaggingFormatter",
            "fmt": DEFAULT_LOG_FORMAT,
        },
    },
    "handlers": {
        "default": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "filters": ["env_tag"],
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "uvicorn": {"handlers": ["default"], "level": "INFO", "propagate": False},
        "uvicorn.error": {"level": "INFO"},
        # Requests are already logged by the application's middleware
        "uvicorn.access": {"handlers": ["default"], "level": "WARNING", "propagate": False},
    },
}
