"""
Measurement results and statistics.

Pure functions and lightweight dataclasses -- no I/O, no side effects.
Everything here is deterministic and easy to unit-test.
"""
from __future__ import annotations

import statistics
from dataclasses import dataclass
from typing import List

from common.errors import SpeedtestError

from .constants import MIB


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PhaseResult:
    """Bytes moved and wall-clock seconds spent by one phase.

    Throughput is always derived from these two fields, never stored.
    """

    bytes_transferred: int = 0
    elapsed: float = 0.0

    def __post_init__(self) -> None:
        if self.bytes_transferred < 0:
            raise ValueError("bytes_transferred must not be negative")
        if self.elapsed < 0:
            raise ValueError("elapsed must not be negative")

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed * 1000

    @property
    def throughput_mbps(self) -> float:
        """Megabytes (MiB) per second."""
        return calculate_throughput(self.bytes_transferred, self.elapsed)

    def to_dict(self) -> dict:
        result = {
            "bytes": self.bytes_transferred,
            "elapsed_ms": round(self.elapsed_ms, 3),
        }
        if self.elapsed > 0:
            result["throughput_mbps"] = round(self.throughput_mbps, 3)
        return result


# ---------------------------------------------------------------------------
# Pure helper functions
# ---------------------------------------------------------------------------

def calculate_throughput(bytes_transferred: int, elapsed: float) -> float:
    """``bytes / seconds / 1 MiB``; a zero duration is an error."""
    if elapsed <= 0:
        raise SpeedtestError("Cannot derive throughput from a zero-length phase")
    return bytes_transferred / elapsed / MIB


def calculate_jitter(samples: List[float]) -> float:
    """Mean absolute difference between consecutive samples."""
    if len(samples) < 2:
        return 0.0
    diffs = [abs(samples[i] - samples[i - 1]) for i in range(1, len(samples))]
    return statistics.mean(diffs)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_speed(speed_mbps: float) -> str:
    """Human-readable speed string."""
    if speed_mbps >= 1024:
        return f"{speed_mbps / 1024:.2f} GB/s"
    return f"{speed_mbps:.2f} MB/s"


def format_latency(latency_ms: float) -> str:
    """Human-readable latency string."""
    if latency_ms >= 1000:
        return f"{latency_ms / 1000:.2f} s"
    return f"{latency_ms:.1f} ms"


def format_size(num_bytes: int) -> str:
    if num_bytes >= MIB:
        return f"{num_bytes / MIB:.1f} MiB"
    if num_bytes >= 1024:
        return f"{num_bytes / 1024:.1f} KiB"
    return f"{num_bytes} B"
