"""Measurement server -- ping, download and upload endpoints over aiohttp."""

from .app import create_app, logging_middleware, run_server
from .config import ServerConfig
from .context import ServerContext, ServerMetrics
from .handlers import CONTEXT_KEY, parse_size

__all__ = [
    "CONTEXT_KEY",
    "ServerConfig",
    "ServerContext",
    "ServerMetrics",
    "create_app",
    "logging_middleware",
    "parse_size",
    "run_server",
]
