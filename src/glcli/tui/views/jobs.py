"""Jobs of the selected pipeline."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from ...models.pipelines import Job
from .. import messages as msg
from .. import styles
from ..styles import status_style
from .base import CURSOR, NO_CURSOR, ListView, hint


def action_hint(job: Job) -> str:
    if job.status.can_play:
        return " [r:run]"
    if job.status.can_retry:
        return " [r:retry]"
    if job.status.can_cancel:
        return " [c:cancel]"
    return ""


@dataclass
class JobsView(ListView):
    jobs: tuple[Job, ...] = ()
    loaded: bool = False
    # generation in which the current pipeline was opened
    generation: int = 0

    def items(self) -> tuple[Job, ...]:
        return self.jobs

    def set_jobs(self, jobs: tuple[Job, ...]) -> None:
        self.jobs = tuple(jobs)
        self.loaded = True
        self.clamp()

    def reset(self) -> None:
        self.jobs = ()
        self.loaded = False
        self.cursor = 0
        self.offset = 0

    def handle_key(self, key: str) -> msg.Message | None:
        if self.move(key):
            return None
        job = self.selected()
        if job is None:
            return None
        if key == "enter":
            return msg.JobSelected(job)
        if key == "r":
            if job.status.can_play:
                return msg.JobActionRequested("play", job)
            if job.status.can_retry:
                return msg.JobActionRequested("retry", job)
        elif key == "c" and job.status.can_cancel:
            return msg.JobActionRequested("cancel", job)
        return None

    def render(self) -> list[Text]:
        lines = [Text("")]
        for i, job in self.window():
            style = status_style(job.status.style)
            duration = f"{job.duration:.0f}s" if job.duration else ""
            lines.append(
                Text.assemble(
                    f"{CURSOR if i == self.cursor else NO_CURSOR}{job.stage:<10} ",
                    (job.status.symbol, style),
                    f" {job.name:<24} ",
                    (f"{job.status.value:<8}", style),
                    f" {duration}",
                    (action_hint(job), styles.HELP_KEY),
                )
            )
        if not self.jobs:
            lines.append(hint("  No jobs" if self.loaded else "  Loading jobs..."))
        elif len(self.jobs) > self.height:
            lines.append(Text(""))
            lines.append(self.position())
        return lines
