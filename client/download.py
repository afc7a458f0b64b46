"""
Download throughput test.

A single ``GET /download?size=N`` is drained chunk by chunk.  Every chunk
feeds a ``ByteCounter`` that the progress aggregator samples, and the
phase only succeeds if exactly ``N`` bytes arrive.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

import aiohttp

from common.errors import PartialTransferError, TransportError

from .config import TransferConfig
from .constants import DOWNLOAD_PATH, PROGRESS_INTERVAL
from .counter import ByteCounter
from .phases import MeasurementPhase
from .progress import ProgressAggregator, ProgressCallback
from .stats import PhaseResult

logger = logging.getLogger(__name__)


class DownloadTester:
    """Download ``config.total_size`` bytes and time the transfer."""

    def __init__(
        self,
        config: TransferConfig,
        progress_interval: float = PROGRESS_INTERVAL,
    ) -> None:
        self.config = config
        self.progress_interval = progress_interval
        self.on_progress: Optional[ProgressCallback] = None

    async def test(self, session: aiohttp.ClientSession, base_url: str) -> PhaseResult:
        size = self.config.total_size
        url = base_url.rstrip("/") + DOWNLOAD_PATH
        counter = ByteCounter()
        aggregator = ProgressAggregator(
            counter, size, MeasurementPhase.DOWNLOAD, self.on_progress, self.progress_interval,
        )

        async with aggregator:
            start = time.perf_counter()
            try:
                async with session.get(url, params={"size": str(size)}) as resp:
                    resp.raise_for_status()
                    if resp.content_length is not None and resp.content_length != size:
                        raise PartialTransferError(
                            f"Server announced {resp.content_length} bytes, expected {size}",
                            expected=size,
                            confirmed=resp.content_length,
                        )
                    async for chunk in resp.content.iter_chunked(self.config.chunk_size):
                        counter.add(len(chunk))
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
                raise TransportError(f"Download from {url} failed: {exc}") from exc
            elapsed = time.perf_counter() - start

        if counter.value != size:
            raise PartialTransferError(
                f"Downloaded {counter.value} of {size} bytes",
                expected=size,
                confirmed=counter.value,
            )

        logger.debug("Downloaded %d bytes in %.3f s", size, elapsed)
        return PhaseResult(bytes_transferred=counter.value, elapsed=elapsed)
