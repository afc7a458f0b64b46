"""
Measurement phases and their transitions.

A run moves ``PING -> DOWNLOAD -> UPLOAD -> DONE``.  Any failure before
``DONE`` jumps straight to ``ERROR``.  ``DONE`` and ``ERROR`` are terminal.
"""
from __future__ import annotations

import enum


class MeasurementPhase(enum.Enum):
    PING = "ping"
    DOWNLOAD = "download"
    UPLOAD = "upload"
    DONE = "done"
    ERROR = "error"

    @property
    def terminal(self) -> bool:
        return self in (MeasurementPhase.DONE, MeasurementPhase.ERROR)


_NEXT = {
    MeasurementPhase.PING: MeasurementPhase.DOWNLOAD,
    MeasurementPhase.DOWNLOAD: MeasurementPhase.UPLOAD,
    MeasurementPhase.UPLOAD: MeasurementPhase.DONE,
}


def next_phase(current: MeasurementPhase, failed: bool = False) -> MeasurementPhase:
    """Return the phase that follows *current*.

    Raises ``ValueError`` when called on a terminal phase.
    """
    if current.terminal:
        raise ValueError(f"No transition out of terminal phase {current.value!r}")
    if failed:
        return MeasurementPhase.ERROR
    return _NEXT[current]
