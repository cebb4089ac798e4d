from __future__ import annotations

import ipaddress
import logging
import os
from collections.abc import Callable, Mapping
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import ConfigDict, Field, field_validator

from nq_server.core.common.exceptions import ConfigurationError
from nq_server.core.config.parameter_resolution import (
    ParameterResolution,
    ParameterSource,
    flatten_config,
)
from nq_server.core.constants.streaming_constants import (
    CHUNK_SIZE,
    LARGE_DOWNLOAD_SIZE,
)
from nq_server.core.domain.base import DomainModel
from nq_server.core.domain.configuration_document import PublicEndpoint

logger = logging.getLogger(__name__)


def _env_to_bool(value: str) -> bool:
    """Parse an environment variable value as a boolean flag."""
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_to_optional(value: str) -> str | None:
    stripped = value.strip()
    return stripped or None


# (environment variable, dotted config path, transform)
ENVIRONMENT_BINDINGS: tuple[tuple[str, str, Callable[[str], Any] | None], ...] = (
    ("BIND_ADDR", "host", None),
    ("PORT", "port", None),
    ("HOSTNAME", "hostname", None),
    ("ASGI_SERVER", "server", lambda value: value.strip().lower()),
    ("MAX_CONNECTIONS", "max_connections", _env_to_optional),
    ("CHUNK_SIZE", "streaming.chunk_size", None),
    ("LARGE_DOWNLOAD_SIZE", "streaming.large_download_size", None),
    ("LOG_LEVEL", "logging.level", lambda value: value.strip().upper()),
    ("LOG_FILE", "logging.log_file", _env_to_optional),
    ("REQUEST_LOGGING", "logging.request_logging", _env_to_bool),
    ("RESPONSE_LOGGING", "logging.response_logging", _env_to_bool),
)


class ServerBackend(str, Enum):
    """ASGI server used as the connection acceptor."""

    HYPERCORN = "hypercorn"  # HTTP/1.1 and HTTP/2 (h2c)
    UVICORN = "uvicorn"  # HTTP/1.1 only


class LogLevel(str, Enum):
    """Log levels for configuration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(DomainModel):
    """Logging configuration."""

    model_config = ConfigDict(validate_assignment=True)

    level: LogLevel = LogLevel.INFO
    log_file: str | None = None
    request_logging: bool = True
    response_logging: bool = False


class StreamingConfig(DomainModel):
    """Sizing of the streamed large download."""

    model_config = ConfigDict(validate_assignment=True)

    chunk_size: int = Field(default=CHUNK_SIZE, gt=0)
    large_download_size: int = Field(default=LARGE_DOWNLOAD_SIZE, ge=0)


class AppConfig(DomainModel):
    """Process-wide configuration, established once at startup."""

    model_config = ConfigDict(validate_assignment=True)

    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=1, le=65535)
    hostname: str = "localhost"
    max_connections: int | None = Field(default=None, gt=0)
    server: ServerBackend = ServerBackend.HYPERCORN
    streaming: StreamingConfig = Field(default_factory=StreamingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Only IPv4 bind addresses are accepted."""
        try:
            ipaddress.IPv4Address(v)
        except ValueError as exc:
            raise ValueError(f"{v!r} is not a valid IPv4 address") from exc
        return v

    def public_endpoint(self) -> PublicEndpoint:
        """The scheme, hostname and port advertised to clients."""
        return PublicEndpoint.from_listen_port(self.hostname, self.port)

    @classmethod
    def from_env(
        cls,
        *,
        environ: Mapping[str, str] | None = None,
        resolution: ParameterResolution | None = None,
    ) -> AppConfig:
        """Create configuration from defaults overlaid with environment variables."""
        env = os.environ if environ is None else environ
        config_data = cls().model_dump()
        _merge_dicts(config_data, _collect_env_overrides(env, resolution))
        return cls.model_validate(config_data)


def _collect_env_overrides(
    env: Mapping[str, str], resolution: ParameterResolution | None = None
) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name, path, transform in ENVIRONMENT_BINDINGS:
        if name not in env:
            continue
        raw_value = env[name]
        value = transform(raw_value) if transform is not None else raw_value
        _set_by_path(overrides, path, value)
        if resolution is not None:
            resolution.record(path, value, ParameterSource.ENVIRONMENT, origin=name)
    return overrides


def _merge_dicts(d1: dict[str, Any], d2: dict[str, Any]) -> dict[str, Any]:
    for k, v in d2.items():
        if k in d1 and isinstance(d1[k], dict) and isinstance(v, dict):
            _merge_dicts(d1[k], v)
        else:
            d1[k] = v
    return d1


def _set_by_path(target: dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    current: dict[str, Any] = target
    for key in parts[:-1]:
        current = current.setdefault(key, {})
    current[parts[-1]] = value


def _load_config_file(path: Path) -> dict[str, Any]:
    import yaml

    if path.suffix.lower() not in (".yaml", ".yml"):
        raise ConfigurationError(
            f"Unsupported configuration file format: {path.suffix}. Use YAML (.yaml/.yml).",
            details={"path": str(path)},
        )

    try:
        with open(path, encoding="utf-8") as f:
            file_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(
            f"Invalid YAML in configuration file: {exc}", details={"path": str(path)}
        ) from exc

    if not isinstance(file_config, dict):
        raise ConfigurationError(
            "Configuration file must contain a mapping at the top level",
            details={"path": str(path)},
        )
    return file_config


def load_config(
    config_path: str | Path | None = None,
    *,
    resolution: ParameterResolution | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """
    Load configuration from file and environment.

    Environment variables take precedence over the configuration file, which
    takes precedence over built-in defaults.

    Args:
        config_path: Optional path to a YAML configuration file
        resolution: Optional tracker recording where each value came from
        environ: Environment mapping, defaults to ``os.environ``

    Returns:
        AppConfig instance
    """
    env = os.environ if environ is None else environ
    res = resolution or ParameterResolution()

    config_data: dict[str, Any] = AppConfig().model_dump()

    if config_path:
        path = Path(config_path)
        if not path.exists():
            logger.warning(f"Configuration file not found: {config_path}")
        else:
            try:
                file_config = _load_config_file(path)
            except Exception as exc:
                logger.critical(f"Error loading configuration file: {exc!s}")
                raise
            _merge_dicts(config_data, file_config)
            for name, value in flatten_config(file_config).items():
                res.record(name, value, ParameterSource.CONFIG_FILE, origin=str(path))

    _merge_dicts(config_data, _collect_env_overrides(env, res))

    return AppConfig.model_validate(config_data)
