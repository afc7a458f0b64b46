"""
Round-trip latency measurement.

Protocol flow::

    1. Send     GET {base}/ping
    2. Receive  200 "pong"
    3. Repeat 1-2 for the desired number of samples.

The whole request/response cycle, body included, is timed.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List

import aiohttp

from common.errors import TransportError

from .constants import DEFAULT_PING_COUNT, PING_PATH
from .stats import PhaseResult, calculate_jitter

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class PingResult:
    """Round-trip samples (seconds) and the pong bytes received."""

    samples: List[float] = field(default_factory=list)
    bytes_total: int = 0

    @property
    def latency_ms(self) -> float:
        """Best (minimum) round-trip time."""
        return min(self.samples) * 1000 if self.samples else 0.0

    @property
    def jitter_ms(self) -> float:
        return calculate_jitter([s * 1000 for s in self.samples])

    @property
    def phase_result(self) -> PhaseResult:
        return PhaseResult(
            bytes_transferred=self.bytes_total,
            elapsed=min(self.samples) if self.samples else 0.0,
        )

    def to_dict(self) -> dict:
        return {
            "latency_ms": round(self.latency_ms, 3),
            "jitter_ms": round(self.jitter_ms, 3),
            "pings": [round(s * 1000, 3) for s in self.samples],
        }


# ---------------------------------------------------------------------------
# Tester
# ---------------------------------------------------------------------------

class LatencyTester:
    """Time ``GET /ping`` round trips against one server."""

    def __init__(self, ping_count: int = DEFAULT_PING_COUNT) -> None:
        self.ping_count = ping_count

    async def test(self, session: aiohttp.ClientSession, base_url: str) -> PingResult:
        result = PingResult()
        url = base_url.rstrip("/") + PING_PATH

        for _ in range(self.ping_count):
            elapsed, n = await self._ping_once(session, url)
            result.samples.append(elapsed)
            result.bytes_total += n

        logger.debug("Ping %s: %.1f ms over %d samples", url, result.latency_ms, len(result.samples))
        return result

    @staticmethod
    async def _ping_once(session: aiohttp.ClientSession, url: str) -> tuple:
        start = time.perf_counter()
        try:
            async with session.get(url) as resp:
                resp.raise_for_status()
                body = await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            raise TransportError(f"Ping to {url} failed: {exc}") from exc
        return time.perf_counter() - start, len(body)
