"""
Connection acceptor.

Binds the listening socket and serves every accepted connection as its own
asyncio task. Hypercorn is the default server and speaks HTTP/1.1 and
cleartext HTTP/2 (prior knowledge or upgrade) on the same port; uvicorn is
available for HTTP/1.1-only deployments. A broken connection only ends that
connection's session; failing to bind ends the process.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import socket

import uvicorn
from fastapi import FastAPI
from hypercorn.asyncio import serve as hypercorn_serve
from hypercorn.config import Config as HypercornConfig

from nq_server.core.common.uvicorn_logging import UVICORN_LOGGING_CONFIG
from nq_server.core.config.app_config import AppConfig, ServerBackend

logger = logging.getLogger(__name__)


def is_port_in_use(host: str, port: int) -> bool:
    """Check if a port is in use on a given host."""
    probe_host = "127.0.0.1" if host == "0.0.0.0" else host
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        return s.connect_ex((probe_host, port)) == 0


def build_hypercorn_config(cfg: AppConfig) -> HypercornConfig:
    """Translate the application configuration into hypercorn settings."""
    config = HypercornConfig()
    config.bind = [f"{cfg.host}:{cfg.port}"]
    # Requests are logged by the application's middleware
    config.accesslog = None
    config.errorlog = logging.getLogger("hypercorn.error")
    return config


def build_server_config(app: FastAPI, cfg: AppConfig) -> uvicorn.Config:
    """Translate the application configuration into uvicorn settings."""
    return uvicorn.Config(
        app,
        host=cfg.host,
        port=cfg.port,
        log_config=UVICORN_LOGGING_CONFIG,
        lifespan="on",
    )


async def serve_hypercorn(app: FastAPI, config: HypercornConfig) -> None:
    """Run hypercorn until SIGINT or SIGTERM is received."""
    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, shutdown.set)

    await hypercorn_serve(app, config, shutdown_trigger=shutdown.wait)  # type: ignore[arg-type]


def serve(app: FastAPI, cfg: AppConfig) -> None:
    """Accept and serve connections until the process is stopped."""
    logger.info(f"Listening on {cfg.host}:{cfg.port} ({cfg.server.value})")
    if cfg.server is ServerBackend.UVICORN:
        uvicorn.Server(build_server_config(app, cfg)).run()
    else:
        asyncio.run(serve_hypercorn(app, build_hypercorn_config(cfg)))
