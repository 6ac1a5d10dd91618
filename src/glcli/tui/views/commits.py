"""Recent commits on a pipeline's ref."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from ...models.repositories import Commit
from .. import styles
from .base import CURSOR, NO_CURSOR, ListView, hint, time_ago, truncate


@dataclass
class CommitsView(ListView):
    commits: tuple[Commit, ...] = ()
    ref: str = ""
    loaded: bool = False
    generation: int = 0

    def items(self) -> tuple[Commit, ...]:
        return self.commits

    def reset(self, ref: str) -> None:
        self.ref = ref
        self.commits = ()
        self.loaded = False
        self.cursor = 0
        self.offset = 0

    def set_commits(self, commits: tuple[Commit, ...]) -> None:
        self.commits = tuple(commits)
        self.loaded = True
        self.clamp()

    def handle_key(self, key: str) -> None:
        self.move(key)

    def render(self) -> list[Text]:
        lines = []
        if self.ref:
            lines.append(Text(f"  Commits: {self.ref}", style=styles.TITLE))
        lines.append(Text(""))
        for i, commit in self.window():
            lines.append(
                Text.assemble(
                    CURSOR if i == self.cursor else NO_CURSOR,
                    (commit.short_id, styles.HELP_KEY),
                    f"  {commit.author_name:<20}  {truncate(commit.title, 60)}"
                    f"  {time_ago(commit.created_at)}",
                )
            )
        if not self.commits:
            lines.append(hint("  No commits" if self.loaded else "  Loading commits..."))
        elif len(self.commits) > self.height:
            lines.append(Text(""))
            lines.append(self.position())
        return lines
