"""
Rich-based terminal dashboard for speedtest results.

All formatting helpers live in ``client.stats`` -- this module only does
presentation via the ``rich`` library.
"""
from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from client.driver import MeasurementReport
from client.latency import PingResult
from client.progress import ProgressSnapshot
from client.stats import PhaseResult, format_latency, format_size, format_speed
from client.upload import UploadResult

console = Console()


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------

def print_header(server_url: str) -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Speedtest CLI[/bold cyan]\n"
            f"[dim]Measuring against {server_url}[/dim]",
            border_style="cyan",
        )
    )
    console.print()


def print_ping_result(result: PingResult) -> None:
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(style="dim")
    table.add_column(style="bold")
    table.add_row("Latency:", format_latency(result.latency_ms))
    if len(result.samples) > 1:
        table.add_row("Jitter:", f"{result.jitter_ms:.2f} ms")
        table.add_row("Samples:", str(len(result.samples)))
    console.print(Panel(table, title="[bold]Ping[/bold]", border_style="yellow"))


def print_speed_result(result: PhaseResult, title: str, color: str = "green") -> None:
    """Print a download or upload result panel."""
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Speed", f"[bold {color}]{format_speed(result.throughput_mbps)}[/bold {color}]")
    table.add_row("Data Transferred", format_size(result.bytes_transferred))
    table.add_row("Duration", f"{result.elapsed:.2f} s")
    console.print(table)


def print_stream_table(result: UploadResult) -> None:
    """Per-stream breakdown of an upload, failures included."""
    table = Table(title="Upload Streams", box=box.SIMPLE)
    table.add_column("#", style="dim")
    table.add_column("Segment", justify="right")
    table.add_column("Confirmed", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Status")

    for s in result.streams:
        status = "[green]ok[/green]" if s.success else f"[red]{s.error}[/red]"
        table.add_row(
            str(s.index),
            format_size(s.size),
            format_size(s.bytes_confirmed),
            f"{s.elapsed:.2f} s",
            status,
        )
    console.print(table)

    if result.partial:
        console.print(
            f"[yellow]Degraded result: {format_size(result.bytes_confirmed)} of "
            f"{format_size(result.total_size)} confirmed[/yellow]"
        )


def print_final_results(report: MeasurementReport) -> None:
    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Server:[/bold cyan] {report.server_url}\n\n"
            f"[bold white]   Ping:[/bold white]  "
            f"[bold yellow]{format_latency(report.ping.latency_ms)}[/bold yellow]\n"
            f"[bold white]   Download:[/bold white]  "
            f"[bold green]{format_speed(report.download.throughput_mbps)}[/bold green]\n"
            f"[bold white]   Upload:[/bold white]  "
            f"[bold blue]{format_speed(report.upload.phase_result.throughput_mbps)}[/bold blue]",
            title="[bold]Results[/bold]",
            border_style="cyan",
        )
    )
    console.print()


def print_error(message: Optional[str]) -> None:
    console.print(f"[red]Error: {message or 'An error occurred during the test.'}[/red]")


# ---------------------------------------------------------------------------
# Progress display
# ---------------------------------------------------------------------------

class ProgressDisplay:
    """Manages a ``rich`` progress bar fed by ``ProgressSnapshot`` values."""

    def __init__(self) -> None:
        self.progress: Optional[Progress] = None
        self._task_id = None
        self._last_fraction = -1.0

    def start(self, description: str, total: int) -> None:
        # A fresh bar per phase; rich keeps finished tasks on screen otherwise.
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.description}"),
            BarColumn(bar_width=40),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            DownloadColumn(binary_units=True),
            TimeElapsedColumn(),
            console=console,
        )
        self.progress.start()
        self._task_id = self.progress.add_task(description, total=total)
        self._last_fraction = -1.0

    def update(self, snapshot: ProgressSnapshot) -> None:
        if self._task_id is None:
            return
        # Debounce: only update when the bar moves noticeably
        if abs(snapshot.fraction - self._last_fraction) < 0.01:
            return
        self.progress.update(self._task_id, completed=snapshot.bytes_done, total=snapshot.total)
        self._last_fraction = snapshot.fraction

    def stop(self) -> None:
        if self._task_id is not None:
            self.progress.stop()
            self._task_id = None
