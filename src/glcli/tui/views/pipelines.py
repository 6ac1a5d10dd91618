"""Pipelines of all tracked projects, newest first."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from ...models.pipelines import Pipeline
from .. import messages as msg
from ..styles import status_style
from .base import CURSOR, NO_CURSOR, FilterableList, hint, short_project, time_ago


@dataclass
class PipelinesView(FilterableList):
    limit: int = 0
    loading_status: str = ""

    def filter_fields(self, item: Pipeline) -> tuple[str, ...]:
        return (item.project_path, item.ref, item.status.value)

    def is_input_mode(self) -> bool:
        return self.filtering

    def handle_key(self, key: str) -> msg.Message | None:
        if self.filtering:
            self.filter_key(key)
            return None
        if self.move(key):
            return None
        pipeline = self.selected()
        if key == "enter" and pipeline is not None:
            return msg.PipelineSelected(pipeline)
        if key == "c" and pipeline is not None:
            return msg.CommitsRequested(pipeline)
        if key == "/":
            self.start_filter()
        elif key == "l":
            return msg.PipelineLimitCycled()
        return None

    def render(self) -> list[Text]:
        lines = []
        filter_line = self.filter_line()
        if filter_line is not None:
            lines.append(filter_line)
        lines.append(Text(""))

        for i, pipeline in self.window():
            style = status_style(pipeline.status.style)
            lines.append(
                Text.assemble(
                    f"{CURSOR if i == self.cursor else NO_CURSOR}"
                    f"{short_project(pipeline.project_path):<16} "
                    f"#{pipeline.id:<8} {pipeline.ref:<16} ",
                    (pipeline.status.symbol, style),
                    " ",
                    (f"{pipeline.status.value:<12}", style),
                    f" {time_ago(pipeline.created_at)}",
                )
            )

        if not self.filtered:
            if not self.source:
                if self.loaded:
                    lines.append(hint("  No pipelines"))
                else:
                    lines.append(hint(f"  {self.loading_status or 'Loading pipelines...'}"))
            else:
                lines.append(hint("  No pipelines match filter"))
        else:
            info = f"  {self.cursor + 1}/{len(self.filtered)}"
            if self.limit > 0:
                info += f"  limit:{self.limit}"
            lines.append(Text(""))
            lines.append(hint(info))
        return lines
