"""Open merge requests across the tracked projects."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from ...models.merge_requests import MergeRequest
from .. import messages as msg
from ..styles import status_style
from .base import CURSOR, NO_CURSOR, FilterableList, hint, short_project, truncate


@dataclass
class MergeRequestsView(FilterableList):
    loading_status: str = ""

    def filter_fields(self, item: MergeRequest) -> tuple[str, ...]:
        return (item.title, item.author, item.source_branch, item.project_path)

    def is_input_mode(self) -> bool:
        return self.filtering

    def handle_key(self, key: str) -> msg.Message | None:
        if self.filtering:
            self.filter_key(key)
            return None
        if self.move(key):
            return None
        mr = self.selected()
        if key == "enter" and mr is not None:
            return msg.MRSelected(mr)
        if key == "/":
            self.start_filter()
        elif key == "n":
            return msg.MRCreateRequested()
        return None

    def render(self) -> list[Text]:
        lines = []
        filter_line = self.filter_line()
        if filter_line is not None:
            lines.append(filter_line)
        lines.append(Text(""))

        for i, mr in self.window():
            style = status_style(mr.state.style)
            lines.append(
                Text.assemble(
                    f"{CURSOR if i == self.cursor else NO_CURSOR}"
                    f"{short_project(mr.project_path):<16} !{mr.iid:<6} "
                    f"{mr.source_branch:<20} ",
                    (mr.state.symbol, style),
                    " ",
                    ("[Draft] " if mr.draft else "", "grey50"),
                    (f"{mr.state.value:<10}", style),
                    f" @{mr.author:<12} {truncate(mr.title, 40)}",
                )
            )

        if not self.filtered:
            if not self.loaded:
                lines.append(hint(f"  {self.loading_status or 'Loading merge requests...'}"))
            elif self.query:
                lines.append(hint("  No merge requests match filter"))
            else:
                lines.append(hint("  No open merge requests"))
        else:
            lines.append(Text(""))
            lines.append(self.position())
        return lines
