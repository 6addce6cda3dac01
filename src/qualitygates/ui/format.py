"""Formatting utilities for gate output.

Provides deterministic, stable output for check lines, tables, JSON, and
colored text. All functions are pure.

Key design principles:
- Stable ordering: rows keep the order they are given unless a sort key is passed
- Optional color: all color can be disabled with --no-color
- Non-TTY safe: works when stdout is redirected
"""

import json
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from ..gates.result import CheckResult, Outcome


class ColorMode(Enum):
    """Color output mode."""

    AUTO = "auto"  # Color if TTY, no color otherwise
    ALWAYS = "always"  # Always use color
    NEVER = "never"  # Never use color


# ANSI color codes
_COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "cyan": "\033[36m",
}

OUTCOME_ICONS = {
    Outcome.PASS: "✅",  # check mark
    Outcome.FAIL: "❌",  # cross
    Outcome.SKIP: "⏭️",  # skip
}

OUTCOME_COLORS = {
    Outcome.PASS: "green",
    Outcome.FAIL: "red",
    Outcome.SKIP: "yellow",
}

WARNING_ICON = "⚠️"
RULE = "━" * 37


def _should_color(mode: ColorMode, stream=None) -> bool:
    """Determine if output should be colored."""
    if mode == ColorMode.NEVER:
        return False
    if mode == ColorMode.ALWAYS:
        return True
    # AUTO: color if the stream is a TTY
    stream = stream if stream is not None else sys.stdout
    return hasattr(stream, "isatty") and stream.isatty()


def colorize(text: str, color: str, mode: ColorMode = ColorMode.AUTO, stream=None) -> str:
    """Apply color to text if color mode allows.

    Args:
        text: Text to colorize.
        color: Color name (red, green, yellow, blue, etc.)
        mode: Color mode (auto, always, never).
        stream: Stream checked for TTY in AUTO mode (default: stdout).

    Returns:
        Colored text if mode allows, otherwise plain text.
    """
    if not _should_color(mode, stream):
        return text

    code = _COLORS.get(color, "")
    reset = _COLORS.get("reset", "")

    if not code:
        return text

    return f"{code}{text}{reset}"


def format_check_line(
    result: CheckResult, color_mode: ColorMode = ColorMode.AUTO, stream=None
) -> str:
    """Format the single status line for a check, e.g. "✅ Core PHP Files: PASSED"."""
    icon = OUTCOME_ICONS[result.outcome]
    label = colorize(
        result.outcome.label, OUTCOME_COLORS[result.outcome], color_mode, stream
    )
    return f"{icon} {result.title or result.check_id}: {label}"


def format_count(
    count: int, label: str, color_mode: ColorMode = ColorMode.AUTO, stream=None
) -> str:
    """Format a count with label and optional color.

    Args:
        count: The count value.
        label: Label for the count (e.g., "failed", "skipped").
        color_mode: Color output mode.
        stream: Stream checked for TTY in AUTO mode (default: stdout).

    Returns:
        Formatted string like "5 errors" with appropriate color.
    """
    text = f"{count} {label}"

    if count == 0:
        return colorize(text, "dim", color_mode, stream)
    elif "error" in label.lower() or "fail" in label.lower():
        return colorize(text, "red", color_mode, stream)
    elif "skip" in label.lower():
        return colorize(text, "yellow", color_mode, stream)
    elif "pass" in label.lower():
        return colorize(text, "green", color_mode, stream)
    else:
        return text


@dataclass
class Column:
    """Table column definition."""

    name: str
    header: str
    width: Optional[int] = None
    align: str = "left"  # "left", "right", "center"


def render_table(
    rows: Sequence[dict[str, Any]],
    columns: Sequence[Column | str],
    *,
    sort_key: Optional[str | Callable[[dict], Any]] = None,
    color_mode: ColorMode = ColorMode.AUTO,
    show_header: bool = True,
) -> str:
    """Render rows as a formatted table.

    Args:
        rows: Sequence of dicts to render.
        columns: Column definitions (Column objects or field names).
        sort_key: Field name or function for sorting.
        color_mode: Color output mode.
        show_header: Whether to show column headers.

    Returns:
        Formatted table as string.
    """
    if not rows:
        return ""

    cols = []
    for c in columns:
        if isinstance(c, str):
            cols.append(Column(name=c, header=c.upper()))
        else:
            cols.append(c)

    sorted_rows = list(rows)
    if sort_key:
        if isinstance(sort_key, str):
            key_fn = lambda r: (r.get(sort_key, "") or "")
        else:
            key_fn = sort_key
        sorted_rows.sort(key=key_fn)

    widths = []
    for col in cols:
        if col.width:
            widths.append(col.width)
        else:
            max_len = len(col.header)
            for row in sorted_rows:
                val = str(row.get(col.name, ""))
                max_len = max(max_len, len(val))
            widths.append(min(max_len, 60))  # Cap at 60 chars

    lines = []

    if show_header:
        header_parts = []
        for i, col in enumerate(cols):
            header_parts.append(_align(col.header, widths[i], col.align))
        header_line = "  ".join(header_parts)
        lines.append(colorize(header_line, "bold", color_mode))
        lines.append("  ".join("-" * w for w in widths))

    for row in sorted_rows:
        parts = []
        for i, col in enumerate(cols):
            val = str(row.get(col.name, ""))
            if len(val) > widths[i]:
                val = val[: widths[i] - 3] + "..."
            parts.append(_align(val, widths[i], col.align))
        lines.append("  ".join(parts).rstrip())

    return "\n".join(lines)


def _align(text: str, width: int, align: str) -> str:
    """Align text within width."""
    if align == "right":
        return text.rjust(width)
    elif align == "center":
        return text.center(width)
    else:
        return text.ljust(width)


def render_json(
    obj: Any,
    *,
    indent: int = 2,
    sort_keys: bool = True,
) -> str:
    """Render object as JSON with stable key ordering.

    Args:
        obj: Object to serialize.
        indent: Indentation level (None for compact).
        sort_keys: Whether to sort dictionary keys.

    Returns:
        JSON string with stable ordering.
    """
    return json.dumps(
        obj,
        indent=indent,
        sort_keys=sort_keys,
        ensure_ascii=False,
        default=_json_default,
    )


def _json_default(obj: Any) -> Any:
    """JSON serialization fallback for non-standard types."""
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if isinstance(obj, Enum):
        return obj.value
    return str(obj)

