"""CLI output formatters."""

from leakscope.cli.formatters.table import (
    format_dump_outcome,
    format_history,
    format_probe_outcome,
    format_read_outcome,
    format_scan_report,
)
from leakscope.cli.formatters.json_fmt import format_json

__all__ = [
    "format_scan_report",
    "format_probe_outcome",
    "format_read_outcome",
    "format_dump_outcome",
    "format_history",
    "format_json",
]
