"""
Output formatting -- JSON export and plain text.
"""
from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Dict

from client.driver import MeasurementReport


def create_result_json(report: MeasurementReport) -> Dict[str, Any]:
    """Build a JSON-serialisable dict for *report*, stamped with the current time."""
    result: Dict[str, Any] = {"timestamp": datetime.now(timezone.utc).isoformat()}
    result.update(report.to_dict())
    return result


def save_json(result: Dict[str, Any], filepath: str) -> None:
    """Write *result* to *filepath* atomically (write-tmp then rename)."""
    dir_path = os.path.dirname(filepath) or "."
    tmp = os.path.join(dir_path, f".tmp_{os.path.basename(filepath)}")

    try:
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(result, fh, indent=2, ensure_ascii=False)
        os.replace(tmp, filepath)
    except OSError as exc:
        # Clean up partial temp file
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise OSError(f"Failed to save JSON to {filepath}: {exc}") from exc


def format_text_result(report: MeasurementReport) -> str:
    """Plain-text summary; a failed run yields a single error line."""
    if not report.success:
        return f"Error: {report.error or 'An error occurred during the test.'}"

    upload = report.upload.phase_result
    lines = [
        f"Ping: {report.ping.latency_ms:.1f} ms",
        f"Download: {report.download.throughput_mbps:.2f} MB/s",
        f"Upload: {upload.throughput_mbps:.2f} MB/s",
    ]
    if report.upload.partial:
        lines.append(
            f"Upload degraded: {len(report.upload.failed_streams)} of "
            f"{len(report.upload.streams)} streams failed"
        )
    return "\n".join(lines)
