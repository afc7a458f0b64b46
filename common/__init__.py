"""Pieces shared by the speedtest client and server."""

from .errors import (
    ConfigError,
    PartialTransferError,
    SpeedtestError,
    TransportError,
    ValidationError,
)
from .payload import generate_payload, iter_chunks

__all__ = [
    "ConfigError",
    "PartialTransferError",
    "SpeedtestError",
    "TransportError",
    "ValidationError",
    "generate_payload",
    "iter_chunks",
]
