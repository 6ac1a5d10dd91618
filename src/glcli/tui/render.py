"""Turn an AppState into the full screen as rich Text."""

from __future__ import annotations

import copy

from rich.text import Text

from . import styles
from .components import HotkeyHint, breadcrumb, status_bar
from .state import AppState, ViewID, tab_of

TAB_LABELS = (
    ("1", "Projects", ViewID.PROJECTS),
    ("2", "Pipelines", ViewID.PIPELINES),
    ("3", "Jobs", ViewID.JOBS),
    ("4", "Log", ViewID.LOG),
    ("5", "MRs", ViewID.MERGE_REQUESTS),
)

# tabs, breadcrumb, footer and padding
CHROME_LINES = 5
CONFIRM_LINES = 4


def _hints(*pairs: tuple[str, str]) -> tuple[HotkeyHint, ...]:
    return tuple(HotkeyHint(key, desc) for key, desc in pairs)


HINTS = {
    ViewID.PROJECTS: _hints(
        ("↑↓", "navigate"), ("Enter", "select"), ("m", "MRs"), ("a", "add"),
        ("d", "delete"), ("Tab", "next tab"), ("q", "quit"),
    ),
    ViewID.PIPELINES: _hints(
        ("↑↓", "navigate"), ("fn↑↓", "page"), ("Enter", "jobs"), ("c", "commits"),
        ("/", "filter"), ("l", "limit"), ("Tab", "next tab"), ("q", "quit"),
    ),
    ViewID.JOBS: _hints(
        ("↑↓", "navigate"), ("Enter", "log"), ("r", "run/retry"), ("c", "cancel"),
        ("Esc", "back"), ("q", "quit"),
    ),
    ViewID.LOG: _hints(("↑↓", "scroll"), ("Esc", "back"), ("q", "quit")),
    ViewID.MERGE_REQUESTS: _hints(
        ("↑↓", "navigate"), ("Enter", "detail"), ("n", "new MR"), ("/", "filter"),
        ("Esc", "back"), ("q", "quit"),
    ),
    ViewID.MR_CREATE: _hints(
        ("Tab/↑↓", "navigate"), ("Enter", "next/toggle"), ("Ctrl+S", "submit"),
        ("Esc", "cancel"),
    ),
    ViewID.MR_DETAIL: _hints(
        ("↑↓", "scroll"), ("Tab", "diff/comments"), ("r", "refresh"), ("a", "approve"),
        ("m", "merge"), ("Esc", "back"), ("q", "quit"),
    ),
    ViewID.COMMITS: _hints(("↑↓", "navigate"), ("Esc", "back"), ("q", "quit")),
}  # fmt: skip


def tabs(state: AppState) -> Text:
    active = {state.view, tab_of(state.view)}
    text = Text()
    for key, name, view in TAB_LABELS:
        style = styles.ACTIVE_TAB if view in active else styles.INACTIVE_TAB
        text.append(f" {key}:{name} ", style=style)
    return text


def content_lines(state: AppState) -> list[Text]:
    view = state.current_view()
    if hasattr(view, "loading_status"):
        # list views show the controller's status line in place of rows
        view = copy.copy(view)
        view.loading_status = state.loading_status
    return view.render()


def fit(lines: list[Text], height: int) -> list[Text]:
    """Pad or truncate to exactly ``height`` lines."""
    height = max(height, 1)
    lines = lines[:height]
    return lines + [Text("")] * (height - len(lines))


def render(state: AppState) -> Text:
    lines = [tabs(state), breadcrumb(state.breadcrumb)]
    if state.error:
        lines.append(Text(f"  Error: {state.error}", style=styles.ERROR))

    confirm_lines = CONFIRM_LINES if state.confirm is not None else 0
    lines.extend(fit(content_lines(state), state.height - CHROME_LINES - confirm_lines))
    if state.confirm is not None:
        lines.extend(state.confirm.render())
    lines.append(status_bar(HINTS[state.view]))
    return Text("\n").join(lines)
