"""
Command line entry point for the network quality server.

Parses flags, resolves configuration (defaults, YAML file, environment, CLI),
configures logging, builds the application and hands it to the connection
acceptor.
"""

import argparse
import logging
import sys
from collections.abc import Callable
from typing import Any, NoReturn, cast

from fastapi import FastAPI
from pydantic import ValidationError

from nq_server.core.app.application_builder import build_app
from nq_server.core.common.exceptions import ConfigurationError
from nq_server.core.common.logging_utils import (
    configure_logging_with_environment_tagging,
)
from nq_server.core.config.app_config import AppConfig, ServerBackend, load_config
from nq_server.core.config.parameter_resolution import (
    ParameterResolution,
    ParameterSource,
)
from nq_server.core.transport.server import is_port_in_use, serve


def build_cli_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(description="Run the network quality server")

    # Basic server options
    parser.add_argument(
        "--host",
        help="IPv4 address to bind (env: BIND_ADDR, default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port", type=int, help="Port to listen on (env: PORT, default: 3000)"
    )
    parser.add_argument(
        "--hostname",
        help="Hostname advertised in the configuration document (env: HOSTNAME)",
    )
    parser.add_argument(
        "--max-connections",
        dest="max_connections",
        type=int,
        metavar="N",
        help="Maximum number of requests served at once (env: MAX_CONNECTIONS)",
    )
    parser.add_argument(
        "--server",
        choices=[backend.value for backend in ServerBackend],
        default=None,
        help="ASGI server to run (env: ASGI_SERVER, default: hypercorn)",
    )

    # Streaming options
    parser.add_argument(
        "--chunk-size",
        dest="chunk_size",
        type=int,
        metavar="BYTES",
        help="Size of each streamed chunk (env: CHUNK_SIZE, default: 262144)",
    )
    parser.add_argument(
        "--large-download-size",
        dest="large_download_size",
        type=int,
        metavar="BYTES",
        help="Total size of the large download (env: LARGE_DOWNLOAD_SIZE, default: 8 GiB)",
    )

    # Logging options
    parser.add_argument(
        "--config",
        dest="config_file",
        metavar="FILE",
        help="Path to a YAML configuration file",
    )
    parser.add_argument(
        "--log",
        dest="log_file",
        metavar="FILE",
        help="Write logs to FILE in addition to the console",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set the logging level (default: use config or INFO)",
    )
    parser.add_argument(
        "--disable-request-logging",
        dest="disable_request_logging",
        action="store_true",
        default=None,
        help="Do not log each incoming request",
    )
    parser.add_argument(
        "--response-logging",
        dest="response_logging",
        action="store_true",
        default=None,
        help="Log the status and latency of each response",
    )

    return parser


def parse_cli_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = build_cli_parser()
    return parser.parse_args(argv)


def apply_cli_args(
    args: argparse.Namespace,
    *,
    return_resolution: bool = False,
    resolution: ParameterResolution | None = None,
) -> AppConfig | tuple[AppConfig, ParameterResolution]:
    """Apply CLI arguments on top of file and environment configuration."""
    res = resolution or ParameterResolution()
    cfg: AppConfig = load_config(getattr(args, "config_file", None), resolution=res)

    def record_cli(path: str, value: Any, flag: str) -> None:
        res.record(path, value, ParameterSource.CLI, origin=flag)

    if args.host is not None:
        cfg.host = args.host
        record_cli("host", args.host, "--host")
    if args.port is not None:
        cfg.port = args.port
        record_cli("port", args.port, "--port")
    if args.hostname is not None:
        cfg.hostname = args.hostname
        record_cli("hostname", args.hostname, "--hostname")
    if args.max_connections is not None:
        cfg.max_connections = args.max_connections
        record_cli("max_connections", args.max_connections, "--max-connections")
    if args.server is not None:
        cfg.server = ServerBackend(args.server)
        record_cli("server", args.server, "--server")

    if args.chunk_size is not None:
        cfg.streaming.chunk_size = args.chunk_size
        record_cli("streaming.chunk_size", args.chunk_size, "--chunk-size")
    if args.large_download_size is not None:
        cfg.streaming.large_download_size = args.large_download_size
        record_cli(
            "streaming.large_download_size",
            args.large_download_size,
            "--large-download-size",
        )

    if args.log_file is not None:
        cfg.logging.log_file = args.log_file
        record_cli("logging.log_file", args.log_file, "--log")
    if args.log_level is not None:
        cfg.logging.level = args.log_level
        record_cli("logging.level", args.log_level, "--log-level")
    if args.disable_request_logging:
        cfg.logging.request_logging = False
        record_cli("logging.request_logging", False, "--disable-request-logging")
    if args.response_logging:
        cfg.logging.response_logging = True
        record_cli("logging.response_logging", True, "--response-logging")

    if return_resolution:
        return cfg, res
    return cfg


def _configure_logging(cfg: AppConfig) -> None:
    """Configure logging based on configuration."""
    configure_logging_with_environment_tagging(
        level=getattr(logging, cfg.logging.level.value),
        log_file=cfg.logging.log_file,
    )


def _exit_with_error(error_msg: str) -> NoReturn:
    # Use sys.stderr.write instead of print to avoid test failures
    sys.stderr.write(f"\nERROR: Failed to start network quality server: {error_msg}\n")
    sys.exit(1)


def main(
    argv: list[str] | None = None,
    build_app_fn: Callable[[AppConfig], FastAPI] | None = None,
) -> None:
    """Main entry point: resolve configuration and run the server."""
    args: argparse.Namespace = parse_cli_args(argv)
    try:
        cfg_result = apply_cli_args(args, return_resolution=True)
    except (ConfigurationError, ValidationError) as e:
        _exit_with_error(f"invalid configuration: {e}")
    cfg, resolution = cast(tuple[AppConfig, ParameterResolution], cfg_result)

    _configure_logging(cfg)
    resolution.log(logging.getLogger("config.resolution"), cfg)

    try:
        app = build_app_fn(cfg) if build_app_fn else build_app(cfg)
    except Exception as e:
        logging.error(f"Unexpected error during application startup: {e}")
        _exit_with_error(str(e))

    if is_port_in_use(cfg.host, cfg.port):
        error_msg = f"Port {cfg.port} is already in use."
        logging.error(error_msg)
        _exit_with_error(error_msg)

    logging.info(f"Starting {cfg.server.value} on {cfg.host}:{cfg.port}")
    try:
        serve(app, cfg)
    except Exception as e:
        logging.exception("Server failed to start: %s", e)
        raise


if __name__ == "__main__":
    main()
