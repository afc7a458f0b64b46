#!/usr/bin/env python3
"""
Speedtest CLI -- ping, download and upload against a speedtest server.

Usage::

    python speedtest.py                                # rich dashboard
    python speedtest.py --server http://host:8080      # pick the server
    python speedtest.py --simple                       # plain text
    python speedtest.py --json                         # JSON to stdout
    python speedtest.py -o result.json                 # save to file
    python speedtest.py --size 52428800 --streams 8    # 50 MiB over 8 streams
    python speedtest.py --strict                       # fail on partial uploads
    python speedtest.py --streams 8 --save-config      # remember as defaults
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from client import __version__
from client.config import TransferConfig, config_path, load_config, save_config
from client.constants import (
    MAX_PING_COUNT,
    MAX_TIMEOUT,
    MIN_PING_COUNT,
    MIN_TIMEOUT,
)
from client.driver import MeasurementDriver, MeasurementReport
from client.phases import MeasurementPhase
from ui.dashboard import (
    ProgressDisplay,
    console,
    print_error,
    print_final_results,
    print_header,
    print_ping_result,
    print_speed_result,
    print_stream_table,
)
from ui.output import create_result_json, format_text_result, save_json


# ---------------------------------------------------------------------------
# Parameter validation
# ---------------------------------------------------------------------------

def _validate(
    size: int,
    streams: int,
    chunk_size: int,
    ping_count: int,
    timeout: float,
) -> TransferConfig:
    """Raise ``ValueError`` if any parameter is out of range."""
    if not MIN_PING_COUNT <= ping_count <= MAX_PING_COUNT:
        raise ValueError(f"Ping count must be between {MIN_PING_COUNT} and {MAX_PING_COUNT}")
    if not MIN_TIMEOUT <= timeout <= MAX_TIMEOUT:
        raise ValueError(f"Timeout must be between {MIN_TIMEOUT} and {MAX_TIMEOUT} s")
    return TransferConfig(total_size=size, stream_count=streams, chunk_size=chunk_size)


# ---------------------------------------------------------------------------
# Core test runner
# ---------------------------------------------------------------------------

def _dashboard_callbacks(driver: MeasurementDriver) -> ProgressDisplay:
    """Hook the rich dashboard onto the driver's phase and progress signals."""
    progress = ProgressDisplay()
    total = driver.config.total_size

    def on_phase(phase: MeasurementPhase, report: MeasurementReport) -> None:
        progress.stop()
        if phase is MeasurementPhase.DOWNLOAD:
            print_ping_result(report.ping)
            console.print("\n[bold]Testing download speed...[/bold]")
            progress.start("Downloading", total)
        elif phase is MeasurementPhase.UPLOAD:
            print_speed_result(report.download, "Download Results", "green")
            console.print("\n[bold]Testing upload speed...[/bold]")
            progress.start("Uploading", total)
        elif phase is MeasurementPhase.DONE:
            print_speed_result(report.upload.phase_result, "Upload Results", "blue")
            print_stream_table(report.upload)

    driver.on_phase = on_phase
    driver.on_progress = progress.update
    return progress


async def run_speedtest(
    *,
    server_url: str,
    config: TransferConfig,
    ping_count: int,
    timeout: float,
    allow_partial: bool = True,
    randomize: bool = False,
    json_output: bool = False,
    output_file: Optional[str] = None,
    simple: bool = False,
) -> MeasurementReport:
    """Execute the ping / download / upload sequence and render the outcome."""

    show_ui = not json_output and not simple

    driver = MeasurementDriver(
        server_url,
        config,
        ping_count=ping_count,
        timeout=timeout,
        allow_partial=allow_partial,
        randomize=randomize,
    )

    progress = None
    if show_ui:
        print_header(server_url)
        console.print("[bold]Testing latency...[/bold]")
        progress = _dashboard_callbacks(driver)

    try:
        report = await driver.run()
    finally:
        if progress is not None:
            progress.stop()

    if show_ui:
        if report.success:
            print_final_results(report)
        else:
            print_error(report.error)
    elif simple:
        print(format_text_result(report))

    result_json = create_result_json(report)

    if json_output:
        print(json.dumps(result_json, indent=2))

    if output_file:
        save_json(result_json, output_file)
        if not json_output:
            console.print(f"\n[green]Results saved to:[/green] {output_file}")

    return report


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def main() -> None:
    defaults = load_config()

    parser = argparse.ArgumentParser(
        description="Speedtest CLI -- measure latency and throughput against a speedtest server",
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")

    # Output modes
    parser.add_argument("--json", "-j", action="store_true", help="Output results as JSON")
    parser.add_argument("--output", "-o", type=str, metavar="FILE", help="Save results to JSON file")
    parser.add_argument("--simple", "-s", action="store_true", help="Simple output mode (no dashboard)")
    parser.add_argument("--verbose", action="store_true", help="Log phase transitions and stream failures")

    # Target and transfer parameters
    parser.add_argument("--server", type=str, default=defaults["server_url"], metavar="URL", help="Server base URL (default: %(default)s)")
    parser.add_argument("--size", type=int, default=defaults["size"], metavar="BYTES", help="Download / upload size in bytes (default: %(default)s)")
    parser.add_argument("--streams", type=int, default=defaults["streams"], metavar="N", help="Concurrent upload streams (default: %(default)s)")
    parser.add_argument("--chunk-size", type=int, default=defaults["chunk_size"], metavar="BYTES", help="Read / write chunk size (default: %(default)s)")
    parser.add_argument("--ping-count", type=int, default=defaults["ping_count"], metavar="N", help="Number of ping samples (default: %(default)s)")
    parser.add_argument("--timeout", type=float, default=defaults["timeout"], metavar="SECS", help="Socket inactivity timeout (default: %(default)s)")
    parser.add_argument("--strict", action="store_true", help="Treat a partially confirmed upload as an error")
    parser.add_argument("--random", action="store_true", default=defaults["randomize"], help="Upload random bytes instead of zeros")
    parser.add_argument("--save-config", action="store_true", help=f"Save these settings as defaults in {config_path()} and exit")

    args = parser.parse_args()

    _setup_logging(args.verbose)

    # Validate
    try:
        config = _validate(
            size=args.size,
            streams=args.streams,
            chunk_size=args.chunk_size,
            ping_count=args.ping_count,
            timeout=args.timeout,
        )
    except ValueError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)

    if args.save_config:
        try:
            path = save_config({
                "server_url": args.server,
                "size": config.total_size,
                "streams": config.stream_count,
                "chunk_size": config.chunk_size,
                "ping_count": args.ping_count,
                "timeout": args.timeout,
                "randomize": args.random,
            })
        except OSError as exc:
            console.print(f"[red]Error: {exc}[/red]")
            sys.exit(1)
        console.print(f"[green]Defaults saved to:[/green] {path}")
        return

    try:
        report = asyncio.run(
            run_speedtest(
                server_url=args.server,
                config=config,
                ping_count=args.ping_count,
                timeout=args.timeout,
                allow_partial=not args.strict,
                randomize=args.random,
                json_output=args.json,
                output_file=args.output,
                simple=args.simple,
            )
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Test cancelled by user[/yellow]")
        sys.exit(1)
    except OSError as exc:
        console.print(f"\n[red]Error: {exc}[/red]")
        sys.exit(1)

    if not report.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
