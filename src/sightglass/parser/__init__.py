"""Free-text recognizers for commands and queries."""

from .commands import (
    extract_alternatives,
    format_package_spec,
    is_install_command,
    is_proactive_search_query,
    parse_install_command,
    parse_package_spec,
)

__all__ = [
    "extract_alternatives",
    "format_package_spec",
    "is_install_command",
    "is_proactive_search_query",
    "parse_install_command",
    "parse_package_spec",
]
