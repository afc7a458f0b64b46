"""
Measurement driver.

Runs the phases strictly in order over one shared ``aiohttp`` session::

    PING -> DOWNLOAD -> UPLOAD -> DONE
     |         |          |
     +---------+----------+----> ERROR

There is no retry: the first ``SpeedtestError`` moves the run to ``ERROR``
and later phases are never attempted.  A run cannot be cancelled
mid-phase except by cancelling the task that awaits ``run()``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

import aiohttp

from common.errors import SpeedtestError

from .config import TransferConfig
from .constants import (
    COMMON_HEADERS,
    CONNECT_TIMEOUT,
    DEFAULT_PING_COUNT,
    DEFAULT_TIMEOUT,
    PROGRESS_INTERVAL,
)
from .download import DownloadTester
from .latency import LatencyTester, PingResult
from .phases import MeasurementPhase, next_phase
from .progress import ProgressCallback
from .stats import PhaseResult
from .upload import UploadResult, UploadTester

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

@dataclass
class MeasurementReport:
    """Everything one run produced."""

    server_url: str = ""
    phase: MeasurementPhase = MeasurementPhase.PING
    ping: Optional[PingResult] = None
    download: Optional[PhaseResult] = None
    upload: Optional[UploadResult] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.phase is MeasurementPhase.DONE

    def to_dict(self) -> dict:
        # A failed run reports the error alone, never half a result.
        if not self.success:
            return {"server": self.server_url, "phase": self.phase.value, "error": self.error}
        return {
            "server": self.server_url,
            "phase": self.phase.value,
            "ping": self.ping.to_dict(),
            "download": self.download.to_dict(),
            "upload": self.upload.to_dict(),
        }


PhaseCallback = Callable[[MeasurementPhase, MeasurementReport], None]


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------

class MeasurementDriver:
    """Sequential ping / download / upload runner for one server."""

    def __init__(
        self,
        base_url: str,
        config: TransferConfig,
        *,
        ping_count: int = DEFAULT_PING_COUNT,
        timeout: float = DEFAULT_TIMEOUT,
        allow_partial: bool = True,
        randomize: bool = False,
        progress_interval: float = PROGRESS_INTERVAL,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.config = config
        self.ping_count = ping_count
        self.timeout = timeout
        self.allow_partial = allow_partial
        self.randomize = randomize
        self.progress_interval = progress_interval

        self.phase = MeasurementPhase.PING
        self.history: List[MeasurementPhase] = [self.phase]
        self.on_phase: Optional[PhaseCallback] = None
        self.on_progress: Optional[ProgressCallback] = None

    # -- State machine ------------------------------------------------------

    def _advance(self, report: MeasurementReport, failed: bool = False) -> None:
        self.phase = next_phase(self.phase, failed=failed)
        self.history.append(self.phase)
        report.phase = self.phase
        logger.debug("Phase -> %s", self.phase.value)
        if self.on_phase:
            self.on_phase(self.phase, report)

    # -- Session ------------------------------------------------------------

    def _session(self) -> aiohttp.ClientSession:
        connector = aiohttp.TCPConnector(
            limit=self.config.stream_count,
            limit_per_host=self.config.stream_count,
            force_close=False,
        )
        timeout = aiohttp.ClientTimeout(total=None, connect=CONNECT_TIMEOUT, sock_read=self.timeout)
        return aiohttp.ClientSession(
            headers=COMMON_HEADERS,
            connector=connector,
            timeout=timeout,
            auto_decompress=False,
        )

    # -- Run ----------------------------------------------------------------

    async def run(self) -> MeasurementReport:
        if self.phase is not MeasurementPhase.PING:
            raise RuntimeError("MeasurementDriver.run() can only be called once")

        report = MeasurementReport(server_url=self.base_url)

        try:
            async with self._session() as session:
                report.ping = await LatencyTester(self.ping_count).test(session, self.base_url)
                self._advance(report)

                dl = DownloadTester(self.config, progress_interval=self.progress_interval)
                dl.on_progress = self.on_progress
                report.download = await dl.test(session, self.base_url)
                self._advance(report)

                ul = UploadTester(
                    self.config,
                    allow_partial=self.allow_partial,
                    randomize=self.randomize,
                    progress_interval=self.progress_interval,
                )
                ul.on_progress = self.on_progress
                report.upload = await ul.test(session, self.base_url)
                self._advance(report)

        except SpeedtestError as exc:
            logger.debug("Run failed during %s: %s", self.phase.value, exc)
            report.error = str(exc)
            self._advance(report, failed=True)

        return report
