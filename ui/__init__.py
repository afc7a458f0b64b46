"""UI layer -- Rich dashboard and output formatters."""

from .dashboard import (
    ProgressDisplay,
    console,
    print_error,
    print_final_results,
    print_header,
    print_ping_result,
    print_speed_result,
    print_stream_table,
)
from .output import create_result_json, format_text_result, save_json

__all__ = [
    "ProgressDisplay",
    "console",
    "create_result_json",
    "format_text_result",
    "print_error",
    "print_final_results",
    "print_header",
    "print_ping_result",
    "print_speed_result",
    "print_stream_table",
    "save_json",
]
