"""
Upload throughput test with concurrent streams.

The payload is split into ``stream_count`` segments (remainder on the last
one) and each segment is POSTed on its own stream.  A stream's bytes count
only once the server has confirmed receiving all of them, so the shared
counter tracks confirmed transfer, not attempted transfer.

Every stream reports a ``StreamResult``; failed streams never cut their
siblings short.  Whether a partial upload is acceptable is decided after
the join by ``allow_partial``.
"""
from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import dataclass, field
from typing import AsyncIterator, List, Optional

import aiohttp

from common.errors import PartialTransferError, TransportError
from common.payload import generate_payload, iter_chunks

from .config import TransferConfig
from .constants import PROGRESS_INTERVAL, UPLOAD_PATH
from .counter import ByteCounter
from .phases import MeasurementPhase
from .progress import ProgressAggregator, ProgressCallback
from .stats import PhaseResult

logger = logging.getLogger(__name__)

_RECEIVED_RE = re.compile(r"received\s+(\d+)\s+bytes")


def parse_received(text: str) -> Optional[int]:
    """Extract N from the server's ``received N bytes`` reply."""
    m = _RECEIVED_RE.search(text)
    return int(m.group(1)) if m else None


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class StreamResult:
    """Outcome of one upload stream."""

    index: int
    size: int
    bytes_confirmed: int = 0
    elapsed: float = 0.0
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result = {
            "index": self.index,
            "size": self.size,
            "bytes_confirmed": self.bytes_confirmed,
            "elapsed_ms": round(self.elapsed * 1000, 3),
            "success": self.success,
        }
        if self.error:
            result["error"] = self.error
        return result


@dataclass
class UploadResult:
    """Aggregate of all streams, measured over the wall-clock join."""

    total_size: int = 0
    elapsed: float = 0.0
    streams: List[StreamResult] = field(default_factory=list)

    @property
    def bytes_confirmed(self) -> int:
        return sum(s.bytes_confirmed for s in self.streams if s.success)

    @property
    def failed_streams(self) -> List[StreamResult]:
        return [s for s in self.streams if not s.success]

    @property
    def partial(self) -> bool:
        return self.bytes_confirmed < self.total_size

    @property
    def phase_result(self) -> PhaseResult:
        return PhaseResult(bytes_transferred=self.bytes_confirmed, elapsed=self.elapsed)

    def to_dict(self) -> dict:
        result = self.phase_result.to_dict()
        result.update({
            "total_size": self.total_size,
            "partial": self.partial,
            "streams": [s.to_dict() for s in self.streams],
        })
        return result


# ---------------------------------------------------------------------------
# Tester
# ---------------------------------------------------------------------------

class UploadTester:
    """Fan out ``config.stream_count`` concurrent POSTs and join them."""

    def __init__(
        self,
        config: TransferConfig,
        allow_partial: bool = True,
        randomize: bool = False,
        progress_interval: float = PROGRESS_INTERVAL,
    ) -> None:
        self.config = config
        self.allow_partial = allow_partial
        self.progress_interval = progress_interval
        # One shared chunk, sliced by every stream.
        self._payload = generate_payload(config.chunk_size, randomize)
        self.on_progress: Optional[ProgressCallback] = None

    async def test(self, session: aiohttp.ClientSession, base_url: str) -> UploadResult:
        url = base_url.rstrip("/") + UPLOAD_PATH
        total = self.config.total_size
        counter = ByteCounter()
        aggregator = ProgressAggregator(
            counter, total, MeasurementPhase.UPLOAD, self.on_progress, self.progress_interval,
        )

        async with aggregator:
            start = time.perf_counter()
            streams = await asyncio.gather(*[
                self._stream(session, url, i, size, counter)
                for i, size in enumerate(self.config.segment_sizes())
            ])
            elapsed = time.perf_counter() - start

        result = UploadResult(total_size=total, elapsed=elapsed, streams=list(streams))

        if not any(s.success for s in result.streams):
            raise TransportError(
                f"All {len(result.streams)} upload streams failed: {result.streams[0].error}"
            )
        if result.partial:
            msg = (
                f"Upload confirmed {result.bytes_confirmed} of {total} bytes; "
                f"{len(result.failed_streams)} of {len(result.streams)} streams failed"
            )
            if not self.allow_partial:
                raise PartialTransferError(msg, expected=total, confirmed=result.bytes_confirmed)
            logger.warning(msg)

        return result

    # -- Internals ----------------------------------------------------------

    async def _body(self, size: int) -> AsyncIterator[bytes]:
        for chunk in iter_chunks(self._payload, size):
            yield chunk

    async def _stream(
        self,
        session: aiohttp.ClientSession,
        url: str,
        index: int,
        size: int,
        counter: ByteCounter,
    ) -> StreamResult:
        result = StreamResult(index=index, size=size)
        start = time.perf_counter()

        try:
            async with session.post(
                url,
                data=self._body(size),
                headers={"Content-Type": "application/octet-stream"},
            ) as resp:
                resp.raise_for_status()
                text = await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            result.elapsed = time.perf_counter() - start
            result.error = str(exc) or exc.__class__.__name__
            logger.warning("Upload stream %d failed: %s", index, result.error)
            return result

        result.elapsed = time.perf_counter() - start
        confirmed = parse_received(text)
        if confirmed != size:
            result.error = f"server confirmed {confirmed} of {size} bytes"
            logger.warning("Upload stream %d: %s", index, result.error)
            return result

        result.bytes_confirmed = size
        counter.add(size)
        return result
