"""
Transfer configuration and user defaults.

``TransferConfig`` is the immutable shape of one measurement run.  It is
validated once on construction and never changes afterwards.

User defaults live in ``~/.speedtest-cli/config.json``.

Supported keys::

    server_url = "http://localhost:8080"
    size = 104857600         # bytes per download / upload
    streams = 4              # concurrent upload streams
    chunk_size = 65536
    ping_count = 1
    timeout = 30.0           # socket inactivity timeout in seconds
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from common.errors import ConfigError

from .constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_PING_COUNT,
    DEFAULT_SERVER_URL,
    DEFAULT_STREAMS,
    DEFAULT_TEST_SIZE,
    DEFAULT_TIMEOUT,
    MAX_STREAMS,
    MIN_STREAMS,
)


# ---------------------------------------------------------------------------
# Transfer configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TransferConfig:
    """Payload size, stream count and chunk size for one run."""

    total_size: int = DEFAULT_TEST_SIZE
    stream_count: int = DEFAULT_STREAMS
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        if self.total_size <= 0:
            raise ConfigError(f"Total size must be positive, got {self.total_size}")
        if not MIN_STREAMS <= self.stream_count <= MAX_STREAMS:
            raise ConfigError(f"Stream count must be between {MIN_STREAMS} and {MAX_STREAMS}")
        if self.chunk_size <= 0:
            raise ConfigError(f"Chunk size must be positive, got {self.chunk_size}")
        if self.total_size < self.stream_count:
            raise ConfigError(
                f"Total size ({self.total_size}) must be at least the stream count "
                f"({self.stream_count}) so no segment is empty"
            )
        if sum(self.segment_sizes()) != self.total_size:
            raise ConfigError("Segment sizes do not add up to the total size")

    def segment_sizes(self) -> List[int]:
        """Split ``total_size`` into ``stream_count`` segments.

        The remainder of the division goes to the last segment.
        """
        base, remainder = divmod(self.total_size, self.stream_count)
        sizes = [base] * self.stream_count
        sizes[-1] += remainder
        return sizes


# ---------------------------------------------------------------------------
# User defaults file
# ---------------------------------------------------------------------------

_CONFIG_DIR = os.path.join(Path.home(), ".speedtest-cli")
_CONFIG_FILE = "config.json"

DEFAULTS: Dict[str, Any] = {
    "server_url": DEFAULT_SERVER_URL,
    "size": DEFAULT_TEST_SIZE,
    "streams": DEFAULT_STREAMS,
    "chunk_size": DEFAULT_CHUNK_SIZE,
    "ping_count": DEFAULT_PING_COUNT,
    "timeout": DEFAULT_TIMEOUT,
    "randomize": False,
}


def _config_path() -> str:
    return os.path.join(_CONFIG_DIR, _CONFIG_FILE)


def load_config() -> Dict[str, Any]:
    """Load config from disk, returning defaults for missing keys."""
    path = _config_path()
    config = dict(DEFAULTS)

    if not os.path.isfile(path):
        return config

    try:
        with open(path, encoding="utf-8") as fh:
            user = json.load(fh)
    except (json.JSONDecodeError, OSError):
        return config  # corrupt file; use defaults

    if isinstance(user, dict):
        config.update({k: v for k, v in user.items() if k in DEFAULTS})
    return config


def save_config(config: Dict[str, Any]) -> str:
    """Write *config* to disk.  Returns the file path."""
    path = _config_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as fh:
        json.dump(config, fh, indent=2, ensure_ascii=False)

    return path


def config_path() -> str:
    """Return the config file path (for display purposes)."""
    return _config_path()
