"""Rich styles shared by the views."""

from __future__ import annotations

from rich.style import Style

TITLE = Style(bold=True, color="bright_magenta")
ACTIVE_TAB = Style(bold=True, color="black", bgcolor="magenta")
INACTIVE_TAB = Style(color="grey62")
SELECTED = Style(bold=True, color="bright_white", bgcolor="grey23")
HELP_KEY = Style(color="bright_cyan")
HELP_DESC = Style(color="grey50")
ERROR = Style(bold=True, color="red")

DIFF_FILE = Style(bold=True, color="bright_blue")
DIFF_HUNK = Style(color="cyan")
DIFF_ADD = Style(color="green")
DIFF_DEL = Style(color="red")

STATUS = {
    "success": Style(color="green"),
    "failed": Style(color="red"),
    "running": Style(color="blue"),
    "manual": Style(color="magenta"),
    "pending": Style(color="yellow"),
}


def status_style(color_class: str) -> Style:
    return STATUS.get(color_class, STATUS["pending"])
