"""
Output helpers for the Twintag CLI.
"""
from typing import Any, Dict, List, Optional

# Terminal color definitions
COLORS = {
    "default": "\033[0m",
    "bold": "\033[1m",
    "green": "\033[92m",
    "red": "\033[91m",
    "yellow": "\033[93m",
    "blue": "\033[94m",
    "cyan": "\033[96m",
}

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")

# Cells wider than this are cut
MAX_CELL_WIDTH = 40


def colorize(text: str, color: str = "default") -> str:
    return f"{COLORS.get(color, COLORS['default'])}{text}{COLORS['default']}"


def print_colored(text: str, color: str = "default") -> None:
    """
    Print a message in one of the ``COLORS``; unknown colors print plain.
    """
    print(colorize(text, color))


def format_size(size: int) -> str:
    """Render a byte count with a binary unit, e.g. ``1.5 KB``."""
    value = float(size)
    for unit in SIZE_UNITS:
        if value < 1024 or unit == SIZE_UNITS[-1]:
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def _cell(value: Any) -> str:
    text = "" if value is None else str(value)
    if len(text) > MAX_CELL_WIDTH:
        return text[:MAX_CELL_WIDTH - 3] + "..."
    return text


def format_table(rows: List[Dict[str, Any]], columns: Optional[List[str]] = None,
                 numeric: Optional[List[str]] = None) -> str:
    """
    Lay out rows as an aligned text table.

    Args:
        rows: One mapping per row
        columns: Columns to show, in order (defaults to the keys of the first row)
        numeric: Columns aligned to the right

    Returns:
        The table, or a notice when there are no rows
    """
    if not rows:
        return "No data to display"

    columns = columns or list(rows[0])
    right = set(numeric or [])
    cells = [[_cell(row.get(col)) for col in columns] for row in rows]
    widths = [max([len(col)] + [len(line[i]) for line in cells]) for i, col in enumerate(columns)]

    def render(values: List[str]) -> str:
        return "  ".join(
            value.rjust(width) if col in right else value.ljust(width)
            for col, value, width in zip(columns, values, widths)
        ).rstrip()

    lines = [render(columns), "  ".join("-" * width for width in widths)]
    lines.extend(render(line) for line in cells)
    return "\n".join(lines)
