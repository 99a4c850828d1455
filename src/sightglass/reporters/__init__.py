"""Report formatters."""

from .json_report import build_json_payload, format_json_report
from .terminal import format_chains, format_terminal_report

__all__ = [
    "build_json_payload",
    "format_chains",
    "format_json_report",
    "format_terminal_report",
]
