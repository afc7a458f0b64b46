"""
Error hierarchy for the measurement engine.

``ConfigError`` and ``ValidationError`` also derive from ``ValueError`` so
callers that only care about "bad input" can keep catching that.
"""
from __future__ import annotations


class SpeedtestError(Exception):
    """Base class for every error raised by the client or server core."""


class ConfigError(SpeedtestError, ValueError):
    """Invalid size / stream-count / chunk-size detected at startup."""


class ValidationError(SpeedtestError, ValueError):
    """A request parameter the server refuses to act on."""


class TransportError(SpeedtestError):
    """Connection refused, timeout, disconnect or non-success HTTP status."""


class PartialTransferError(SpeedtestError):
    """Fewer bytes were confirmed than were requested."""

    def __init__(self, message: str, expected: int = 0, confirmed: int = 0) -> None:
        super().__init__(message)
        self.expected = expected
        self.confirmed = confirmed
