"""
HTTP handlers for the measurement server.

Every handler pulls the shared ``ServerContext`` from the application; no
per-request state outlives the call.

Request lifecycle: validate -> stream -> completed | aborted.
"""
from __future__ import annotations

import asyncio
import logging
import re
from typing import Optional

from aiohttp import ClientPayloadError, StreamReader, http_exceptions, web
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from common.errors import ValidationError
from common.payload import iter_chunks

from .context import ServerContext

logger = logging.getLogger(__name__)

CONTEXT_KEY = web.AppKey("context", ServerContext)

# Errors that mean the peer went away or sent a broken body.
_READ_ERRORS = (
    ClientPayloadError,
    http_exceptions.HttpProcessingError,
    ConnectionError,
    asyncio.TimeoutError,
)
_WRITE_ERRORS = (ConnectionError, asyncio.TimeoutError)

# ASCII digits only; int() alone also takes "1_000", " 12 " and non-ASCII digits.
_SIZE_RE = re.compile(r"[+-]?[0-9]+")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def parse_size(raw: Optional[str], default: int) -> int:
    """Parse the ``size`` query parameter, falling back to *default*."""
    if raw is None or raw == "":
        return default
    if not _SIZE_RE.fullmatch(raw):
        raise ValidationError(f"size is not an integer: {raw!r}")
    size = int(raw)
    if size <= 0:
        raise ValidationError(f"size must be positive: {raw!r}")
    return size


async def _with_timeout(coro, timeout: float):  # noqa: ANN001
    """Await *coro*, bounded by *timeout* seconds unless it is 0."""
    if timeout > 0:
        return await asyncio.wait_for(coro, timeout=timeout)
    return await coro


async def _drain(content: StreamReader, chunk_size: int, timeout: float) -> int:
    received = 0
    while True:
        chunk = await _with_timeout(content.read(chunk_size), timeout)
        if not chunk:
            return received
        received += len(chunk)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

async def health(request: web.Request) -> web.Response:
    return web.Response(text="ok")


async def ping(request: web.Request) -> web.Response:
    request.app[CONTEXT_KEY].metrics.ping_requests.inc()
    return web.Response(text="pong")


async def download(request: web.Request) -> web.StreamResponse:
    """
    Stream ``size`` bytes built from the shared payload buffer.

    ``Content-Length`` is sent up front; each write carries at most one
    chunk, so memory use does not depend on the requested size.
    """
    ctx = request.app[CONTEXT_KEY]
    raw = request.query.get("size")

    try:
        size = parse_size(raw, ctx.config.default_size)
    except ValidationError:
        logger.warning("Invalid size parameter: %r", raw)
        raise web.HTTPBadRequest(text="invalid size parameter")

    resp = web.StreamResponse(headers={"Content-Type": "application/octet-stream"})
    resp.content_length = size
    await resp.prepare(request)

    sent = 0
    try:
        for chunk in iter_chunks(ctx.payload, size):
            await _with_timeout(resp.write(chunk), ctx.config.write_timeout)
            sent += len(chunk)
            ctx.metrics.download_bytes.inc(len(chunk))
            ctx.metrics.download_chunks.inc()
    except _WRITE_ERRORS as exc:
        # Partial bytes are not retried; the client sees a short body.
        logger.warning("Error writing chunk after %d/%d bytes: %r", sent, size, exc)
        return resp

    await resp.write_eof()
    logger.info("Served /download size=%d bytes", size)
    return resp


async def upload(request: web.Request) -> web.Response:
    """Drain the request body, counting bytes without keeping them."""
    ctx = request.app[CONTEXT_KEY]

    try:
        received = await _drain(request.content, ctx.config.chunk_size, ctx.config.read_timeout)
    except _READ_ERRORS as exc:
        logger.error("Error reading upload body: %r", exc)
        raise web.HTTPInternalServerError(text="error reading body")

    ctx.metrics.upload_bytes.inc(received)
    ctx.metrics.upload_requests.inc()
    logger.info("Handled /upload: %d bytes received", received)
    return web.Response(text=f"received {received} bytes")


async def metrics(request: web.Request) -> web.Response:
    registry = request.app[CONTEXT_KEY].metrics.registry
    return web.Response(
        body=generate_latest(registry),
        headers={"Content-Type": CONTENT_TYPE_LATEST},
    )
