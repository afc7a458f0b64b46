"""
Payload generation.

The buffer is built once and handed out by reference; nothing in the
server or client mutates it afterwards.
"""
from __future__ import annotations

import os
from typing import Iterator

from .errors import ConfigError


def generate_payload(size: int, randomize: bool = False) -> bytes:
    """
    Return an immutable buffer of *size* bytes.

    Zero-filled by default (fastest, content is never inspected).  With
    *randomize* the buffer is filled from ``os.urandom`` so transparent
    compression on the path cannot inflate the measured throughput; this
    is not a security control.
    """
    if size <= 0:
        raise ConfigError(f"Payload size must be positive, got {size}")
    if randomize:
        return os.urandom(size)
    return bytes(size)


def iter_chunks(payload: bytes, total: int) -> Iterator[bytes]:
    """
    Yield *payload* repeatedly until *total* bytes have been produced.

    The final chunk is truncated.  Full chunks are the shared buffer itself,
    so only the tail costs a copy.
    """
    chunk_size = len(payload)
    sent = 0
    while sent < total:
        n = min(chunk_size, total - sent)
        yield payload if n == chunk_size else payload[:n]
        sent += n
