"""
Server configuration surface.

Values come from ``speedtest_server.py`` flags.  Everything is validated
once, in ``__post_init__``, so an invalid value fails before any handler
is reachable.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

from common.errors import ConfigError

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_READ_TIMEOUT = 10.0      # seconds per body read in /upload
DEFAULT_WRITE_TIMEOUT = 0.0      # 0 = no limit
DEFAULT_IDLE_TIMEOUT = 120.0     # keep-alive
DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_DOWNLOAD_SIZE = 10 * 1024 * 1024
DEFAULT_SHUTDOWN_TIMEOUT = 5.0


@dataclass(frozen=True)
class ServerConfig:
    """Immutable server settings."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    read_timeout: float = DEFAULT_READ_TIMEOUT
    write_timeout: float = DEFAULT_WRITE_TIMEOUT
    idle_timeout: float = DEFAULT_IDLE_TIMEOUT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    default_size: int = DEFAULT_DOWNLOAD_SIZE
    randomize: bool = False
    shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 65535:
            raise ConfigError(f"Port must be between 0 and 65535, got {self.port}")
        if self.chunk_size <= 0:
            raise ConfigError(f"Chunk size must be positive, got {self.chunk_size}")
        if self.default_size <= 0:
            raise ConfigError(f"Default download size must be positive, got {self.default_size}")
        for name in ("read_timeout", "write_timeout", "idle_timeout", "shutdown_timeout"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name.replace('_', ' ').capitalize()} must not be negative")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
