"""
aiohttp application factory and process runner.

``create_app`` wires the handlers around a fresh ``ServerContext``;
``run_server`` serves it until SIGINT / SIGTERM, then gives in-flight
handlers ``shutdown_timeout`` seconds to finish.
"""
from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable, Optional

from aiohttp import web

from . import handlers
from .config import ServerConfig
from .context import ServerContext

logger = logging.getLogger(__name__)

_Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def logging_middleware(request: web.Request, handler: _Handler) -> web.StreamResponse:
    """Log request details and duration."""
    start = time.perf_counter()
    logger.info("Started %s %s from %s", request.method, request.path, request.remote)
    try:
        return await handler(request)
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("Completed %s %s in %.1f ms", request.method, request.path, elapsed_ms)


def create_app(config: Optional[ServerConfig] = None) -> web.Application:
    config = config or ServerConfig()

    app = web.Application(middlewares=[logging_middleware])
    app[handlers.CONTEXT_KEY] = ServerContext.create(config)

    app.router.add_get("/ping", handlers.ping)
    app.router.add_get("/download", handlers.download)
    app.router.add_post("/upload", handlers.upload)
    app.router.add_get("/healthz", handlers.health)
    app.router.add_get("/metrics", handlers.metrics)
    return app


def run_server(config: ServerConfig) -> None:
    """Block serving *config* until the process is interrupted."""
    app = create_app(config)

    logger.info(
        "Starting speedtest backend: port=%d, chunk-size=%d, random=%s, default-size=%d",
        config.port, config.chunk_size, config.randomize, config.default_size,
    )

    web.run_app(
        app,
        host=config.host,
        port=config.port,
        keepalive_timeout=config.idle_timeout,
        shutdown_timeout=config.shutdown_timeout,
        access_log=None,
        print=None,
    )

    logger.info("Server stopped")
