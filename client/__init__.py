"""Speedtest client library -- phases, transfer testers and statistics."""

from .config import TransferConfig
from .counter import ByteCounter
from .download import DownloadTester
from .driver import MeasurementDriver, MeasurementReport
from .latency import LatencyTester, PingResult
from .phases import MeasurementPhase, next_phase
from .progress import ProgressAggregator, ProgressSnapshot
from .stats import (
    PhaseResult,
    calculate_jitter,
    calculate_throughput,
    format_latency,
    format_size,
    format_speed,
)
from .upload import StreamResult, UploadResult, UploadTester

__version__ = "1.0.0"

__all__ = [
    "ByteCounter",
    "DownloadTester",
    "LatencyTester",
    "MeasurementDriver",
    "MeasurementPhase",
    "MeasurementReport",
    "PhaseResult",
    "PingResult",
    "ProgressAggregator",
    "ProgressSnapshot",
    "StreamResult",
    "TransferConfig",
    "UploadResult",
    "UploadTester",
    "calculate_jitter",
    "calculate_throughput",
    "format_latency",
    "format_size",
    "format_speed",
    "next_phase",
]
