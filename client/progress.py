"""
Periodic progress sampling.

The aggregator reads a ``ByteCounter`` on a fixed tick and hands a
``ProgressSnapshot`` to a callback.  It never touches the transfer tasks.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional

from .constants import PROGRESS_INTERVAL
from .counter import ByteCounter
from .phases import MeasurementPhase


@dataclass(frozen=True)
class ProgressSnapshot:
    phase: MeasurementPhase
    bytes_done: int
    total: int

    @property
    def fraction(self) -> float:
        if self.total <= 0:
            return 0.0
        return min(self.bytes_done / self.total, 1.0)


ProgressCallback = Callable[[ProgressSnapshot], None]


class ProgressAggregator:
    """
    Emit a snapshot every ``interval`` seconds.

    Ticking stops when the counter reaches ``total`` or when ``stop()`` is
    called after the phase's join, whichever comes first.
    """

    def __init__(
        self,
        counter: ByteCounter,
        total: int,
        phase: MeasurementPhase,
        on_progress: Optional[ProgressCallback] = None,
        interval: float = PROGRESS_INTERVAL,
    ) -> None:
        self.counter = counter
        self.total = total
        self.phase = phase
        self.on_progress = on_progress
        self.interval = interval
        self.ticks = 0
        self._stop = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            phase=self.phase,
            bytes_done=min(self.counter.value, self.total),
            total=self.total,
        )

    def _emit(self) -> ProgressSnapshot:
        snap = self.snapshot()
        if self.on_progress:
            self.on_progress(snap)
        return snap

    async def run(self) -> None:
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval)
                break
            except asyncio.TimeoutError:
                pass

            self.ticks += 1
            if self._emit().bytes_done >= self.total:
                return

        # Stopped by the join: publish where the counter ended up.
        self._emit()

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        self._stop.set()
        if self._task is not None:
            await self._task
            self._task = None

    async def __aenter__(self) -> ProgressAggregator:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.stop()
