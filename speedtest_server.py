#!/usr/bin/env python3
"""
Speedtest server -- serves /ping, /download, /upload, /healthz and /metrics.

Usage::

    python speedtest_server.py                          # listen on :8080
    python speedtest_server.py --port 9000 --random     # random payload
    python speedtest_server.py --chunk-size 1024 --default-size 4096
"""
from __future__ import annotations

import argparse
import logging
import sys

from rich.logging import RichHandler

from common.errors import ConfigError
from server.app import run_server
from server.config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DOWNLOAD_SIZE,
    DEFAULT_HOST,
    DEFAULT_IDLE_TIMEOUT,
    DEFAULT_PORT,
    DEFAULT_READ_TIMEOUT,
    DEFAULT_SHUTDOWN_TIMEOUT,
    DEFAULT_WRITE_TIMEOUT,
    ServerConfig,
)

logger = logging.getLogger("speedtest_server")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Speedtest measurement server")
    parser.add_argument("--host", type=str, default=DEFAULT_HOST, help="Interface to bind (default: %(default)s)")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Port to run the speedtest server on (default: %(default)s)")
    parser.add_argument("--read-timeout", type=float, default=DEFAULT_READ_TIMEOUT, metavar="SECS", help="Per-read upload body timeout (default: %(default)s)")
    parser.add_argument("--write-timeout", type=float, default=DEFAULT_WRITE_TIMEOUT, metavar="SECS", help="Per-chunk download write timeout, 0 for no limit (default: %(default)s)")
    parser.add_argument("--idle-timeout", type=float, default=DEFAULT_IDLE_TIMEOUT, metavar="SECS", help="Keep-alive idle timeout (default: %(default)s)")
    parser.add_argument("--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE, metavar="BYTES", help="Size of each data chunk in bytes (default: %(default)s)")
    parser.add_argument("--random", action="store_true", help="Fill download chunks with random data")
    parser.add_argument("--default-size", type=int, default=DEFAULT_DOWNLOAD_SIZE, metavar="BYTES", help="Download size when none is requested (default: %(default)s)")
    parser.add_argument("--shutdown-timeout", type=float, default=DEFAULT_SHUTDOWN_TIMEOUT, metavar="SECS", help="Grace period for in-flight requests on shutdown (default: %(default)s)")
    parser.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level (default: %(default)s)")
    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig(
        host=args.host,
        port=args.port,
        read_timeout=args.read_timeout,
        write_timeout=args.write_timeout,
        idle_timeout=args.idle_timeout,
        chunk_size=args.chunk_size,
        default_size=args.default_size,
        randomize=args.random,
        shutdown_timeout=args.shutdown_timeout,
    )


def main() -> None:
    args = build_parser().parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )

    try:
        config = config_from_args(args)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        sys.exit(1)

    try:
        run_server(config)
    except OSError as exc:
        logger.error("Server failed: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
