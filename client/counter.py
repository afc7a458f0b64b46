"""Shared byte counter sampled by the progress aggregator."""
from __future__ import annotations


class ByteCounter:
    """
    Monotonic byte count shared between transfer tasks and the sampler.

    All users run on one asyncio event loop and ``add`` never awaits, so an
    increment cannot interleave with a read.
    """

    __slots__ = ("_value",)

    def __init__(self) -> None:
        self._value = 0

    def add(self, n: int) -> int:
        if n < 0:
            raise ValueError("ByteCounter only counts forward")
        self._value += n
        return self._value

    @property
    def value(self) -> int:
        return self._value
