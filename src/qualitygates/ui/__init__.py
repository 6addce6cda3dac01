"""Console formatting for gate output.

Usage:
    from qualitygates.ui import format_check_line, render_json
"""

from .format import (
    ColorMode,
    Column,
    colorize,
    format_check_line,
    format_count,
    render_json,
    render_table,
)

__all__ = [
    "ColorMode",
    "Column",
    "colorize",
    "format_check_line",
    "format_count",
    "render_json",
    "render_table",
]
