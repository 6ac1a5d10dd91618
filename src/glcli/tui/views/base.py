"""Building blocks shared by the sub-views: cursor lists, filters, text buffers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from rich.text import Text

from .. import styles

CURSOR = "▸ "
NO_CURSOR = "  "

# rows taken by the tab bar, breadcrumb, footer and list chrome
LIST_CHROME = 6
DETAIL_CHROME = 7


def time_ago(when: datetime | None, now: datetime | None = None) -> str:
    if when is None:
        return ""
    now = now or datetime.now(timezone.utc)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    seconds = int((now - when).total_seconds())
    if seconds < 60:
        return f"{max(seconds, 0)}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"


def truncate(value: str, width: int) -> str:
    if len(value) <= width:
        return value
    return value[: width - 3] + "..."


def short_project(path: str) -> str:
    return path.rsplit("/", 1)[-1]


def hint(value: str) -> Text:
    return Text(value, style=styles.HELP_DESC)


@dataclass
class ListView:
    """A cursor over a sequence with a scroll window kept around the cursor.

    Invariant after every mutation: ``0 <= cursor < len(items())`` when there
    are items, ``cursor == 0`` otherwise.
    """

    cursor: int = 0
    offset: int = 0
    height: int = 20

    def items(self) -> tuple[Any, ...]:
        raise NotImplementedError

    def set_height(self, terminal_height: int) -> None:
        self.height = max(terminal_height - LIST_CHROME, 5)
        self.clamp()

    def selected(self) -> Any | None:
        items = self.items()
        return items[self.cursor] if items else None

    def clamp(self) -> None:
        count = len(self.items())
        if count == 0:
            self.cursor = 0
            self.offset = 0
            return
        self.cursor = min(max(self.cursor, 0), count - 1)
        self.offset = min(self.offset, count - 1)
        self.ensure_visible()

    def ensure_visible(self) -> None:
        if self.cursor < self.offset:
            self.offset = self.cursor
        if self.cursor >= self.offset + self.height:
            self.offset = self.cursor - self.height + 1

    def move(self, key: str) -> bool:
        """Apply a navigation key; return False when *key* is not one."""
        half = max(self.height // 2, 1)
        if key in ("up", "k"):
            self.cursor -= 1
        elif key in ("down", "j"):
            self.cursor += 1
        elif key in ("home", "g"):
            self.cursor = 0
        elif key in ("end", "G"):
            self.cursor = len(self.items()) - 1
        elif key in ("pgup", "ctrl+u"):
            self.cursor -= half
        elif key in ("pgdown", "ctrl+d"):
            self.cursor += half
        else:
            return False
        self.clamp()
        return True

    def window(self) -> list[tuple[int, Any]]:
        items = self.items()
        end = min(self.offset + self.height, len(items))
        return [(i, items[i]) for i in range(self.offset, end)]

    def position(self) -> Text:
        return hint(f"  {self.cursor + 1}/{len(self.items())}")


@dataclass
class FilterableList(ListView):
    """A list whose visible rows are the source rows matching a free-text filter.

    The source list is never discarded; clearing the filter restores it in
    its original order.
    """

    source: tuple[Any, ...] = ()
    filtered: tuple[Any, ...] = ()
    query: str = ""
    filtering: bool = False
    loaded: bool = False

    def items(self) -> tuple[Any, ...]:
        return self.filtered

    def filter_fields(self, item: Any) -> tuple[str, ...]:
        raise NotImplementedError

    def set_items(self, items: tuple[Any, ...]) -> None:
        self.source = tuple(items)
        self.loaded = True
        self.apply_filter()

    def apply_filter(self) -> None:
        needle = self.query.lower()
        if not needle:
            self.filtered = self.source
        else:
            self.filtered = tuple(
                item
                for item in self.source
                if any(needle in field.lower() for field in self.filter_fields(item))
            )
        self.clamp()

    def start_filter(self) -> None:
        self.filtering = True
        self.query = ""
        self.apply_filter()

    def filter_key(self, key: str) -> None:
        if key in ("enter", "esc"):
            self.filtering = False
        elif key == "backspace":
            if self.query:
                self.query = self.query[:-1]
                self.apply_filter()
        elif len(key) == 1:
            self.query += key
            self.apply_filter()

    def filter_line(self) -> Text | None:
        if self.filtering:
            return Text.assemble(("  Filter: ", styles.HELP_KEY), self.query, "█")
        if self.query:
            return Text.assemble(("  Filter: ", styles.HELP_KEY), (self.query, styles.HELP_DESC))
        return None


@dataclass
class TextBuffer:
    """Scrollable, pre-rendered lines for the detail views."""

    lines: tuple[Text, ...] = ()
    offset: int = 0
    height: int = 20

    def set_height(self, terminal_height: int) -> None:
        self.height = max(terminal_height - DETAIL_CHROME, 3)
        self.offset = min(self.offset, self.max_offset())

    def max_offset(self) -> int:
        return max(len(self.lines) - self.height, 0)

    def set_lines(self, lines: list[Text]) -> None:
        self.lines = tuple(lines)
        self.offset = min(self.offset, self.max_offset())

    def goto_top(self) -> None:
        self.offset = 0

    def goto_bottom(self) -> None:
        self.offset = self.max_offset()

    def scroll(self, key: str) -> bool:
        half = max(self.height // 2, 1)
        if key in ("up", "k"):
            offset = self.offset - 1
        elif key in ("down", "j"):
            offset = self.offset + 1
        elif key in ("pgup", "ctrl+u"):
            offset = self.offset - half
        elif key in ("pgdown", "ctrl+d", " "):
            offset = self.offset + half
        elif key in ("home", "g"):
            offset = 0
        elif key in ("end", "G"):
            offset = self.max_offset()
        else:
            return False
        self.offset = min(max(offset, 0), self.max_offset())
        return True

    def window(self) -> list[Text]:
        return list(self.lines[self.offset : self.offset + self.height])
