"""Tracked projects, with an inline search for adding new ones."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from ...models.projects import Project
from .. import messages as msg
from .. import styles
from .base import CURSOR, NO_CURSOR, ListView, hint


@dataclass
class ProjectsView(ListView):
    projects: tuple[Project, ...] = ()
    loaded: bool = False
    loading_status: str = ""
    adding: bool = False
    search_query: str = ""
    results: tuple[Project, ...] = ()
    result_cursor: int = 0

    def items(self) -> tuple[Project, ...]:
        return self.projects

    def is_input_mode(self) -> bool:
        return self.adding

    def set_projects(self, projects: tuple[Project, ...]) -> None:
        self.projects = tuple(projects)
        self.loaded = True
        self.clamp()

    def set_search_results(self, projects: tuple[Project, ...]) -> None:
        if not self.adding:
            return
        self.results = tuple(projects)
        self.result_cursor = 0

    def handle_key(self, key: str) -> msg.Message | None:
        if self.adding:
            return self._add_key(key)
        if self.move(key):
            return None
        project = self.selected()
        if key == "enter" and project is not None:
            return msg.ProjectSelected(project)
        if key == "a":
            self.adding = True
            self.search_query = ""
            self.results = ()
            self.result_cursor = 0
        elif key == "d" and project is not None:
            return msg.ProjectDeleteRequested(project.path_with_namespace)
        elif key == "m":
            return msg.MergeRequestsRequested()
        return None

    def _add_key(self, key: str) -> msg.Message | None:
        if key == "esc":
            self.adding = False
            self.results = ()
        elif key == "enter":
            if self.results:
                path = self.results[self.result_cursor].path_with_namespace
                self.adding = False
                self.results = ()
                return msg.ProjectAddRequested(path)
        elif key in ("up", "shift+tab"):
            self.result_cursor = max(self.result_cursor - 1, 0)
        elif key in ("down", "tab"):
            self.result_cursor = min(self.result_cursor + 1, max(len(self.results) - 1, 0))
        elif key == "backspace":
            self.search_query = self.search_query[:-1]
            return self._search()
        elif len(key) == 1:
            self.search_query += key
            return self._search()
        return None

    def _search(self) -> msg.Message | None:
        if not self.search_query.strip():
            self.results = ()
            self.result_cursor = 0
            return None
        return msg.ProjectSearchRequested(self.search_query.strip())

    def render(self) -> list[Text]:
        lines = [Text("")]
        for i, project in self.window():
            selected = i == self.cursor
            line = (
                f"{CURSOR if selected else NO_CURSOR}{project.path_with_namespace:<40} "
                f"{project.pipeline_count} pipelines  {project.active_count} active"
            )
            lines.append(Text(line, style=styles.SELECTED if selected else styles.HELP_DESC))
        if not self.projects:
            if not self.loaded:
                lines.append(hint(f"  {self.loading_status or 'Loading projects...'}"))
            else:
                lines.append(hint("  No tracked projects. Press a to add one."))

        if self.adding:
            lines.append(Text(""))
            lines.append(Text.assemble(("  Add project: ", styles.HELP_KEY), self.search_query, "█"))
            for i, project in enumerate(self.results):
                selected = i == self.result_cursor
                prefix = " ▸ " if selected else "   "
                lines.append(
                    Text(
                        f"  {prefix}{project.path_with_namespace}",
                        style=styles.SELECTED if selected else styles.HELP_DESC,
                    )
                )
        return lines
