"""Form for opening a new merge request."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from ...models.merge_requests import CreateMROptions
from .. import messages as msg
from .. import styles
from .base import CURSOR, NO_CURSOR

FIELD_PROJECT = 0
FIELD_SOURCE = 1
FIELD_TARGET = 2
FIELD_TITLE = 3
FIELD_DESCRIPTION = 4
FIELD_DRAFT = 5
FIELD_COUNT = 6

LABELS = ("Project", "Source Branch", "Target Branch", "Title", "Description", "Draft")
BRANCH_FIELDS = (FIELD_SOURCE, FIELD_TARGET)
DEFAULT_TARGET = "main"


@dataclass
class MRCreateView:
    """Field-by-field form entry.

    The project field suggests tracked projects locally; the branch fields
    ask the controller for branch suggestions after every keystroke.
    """

    fields: tuple[str, ...] = ("",) * FIELD_COUNT
    draft: bool = False
    cursor: int = FIELD_PROJECT
    active: bool = False
    submitting: bool = False
    projects: tuple[str, ...] = ()
    project_suggestions: tuple[str, ...] = ()
    branches: tuple[str, ...] = ()
    suggestion_cursor: int = 0
    error: str = ""

    def is_input_mode(self) -> bool:
        return self.active

    def activate(self, projects: list[str] | tuple[str, ...]) -> None:
        self.active = True
        self.submitting = False
        self.cursor = FIELD_PROJECT
        self.fields = ("", "", DEFAULT_TARGET, "", "", "")
        self.draft = False
        self.projects = tuple(projects)
        self.project_suggestions = self.projects
        self.branches = ()
        self.suggestion_cursor = 0
        self.error = ""

    def value(self, field: int) -> str:
        return self.fields[field]

    def _set(self, field: int, value: str) -> None:
        fields = list(self.fields)
        fields[field] = value
        self.fields = tuple(fields)

    def set_branch_results(self, field: int, query: str, branches: tuple[str, ...]) -> None:
        # only the search for what the field holds now may fill the dropdown
        if field != self.cursor or query != self.fields[field]:
            return
        self.branches = tuple(branches)
        self.suggestion_cursor = 0

    def is_branch_field(self) -> bool:
        return self.cursor in BRANCH_FIELDS

    def suggestions(self) -> tuple[str, ...]:
        if self.cursor == FIELD_PROJECT:
            return self.project_suggestions
        if self.is_branch_field():
            return self.branches
        return ()

    def clear_suggestions(self) -> None:
        self.branches = ()
        self.project_suggestions = ()
        self.suggestion_cursor = 0

    def _advance(self) -> None:
        self.cursor = min(self.cursor + 1, FIELD_COUNT - 1)

    def close(self) -> None:
        self.active = False
        self.submitting = False

    def handle_key(self, key: str) -> msg.Message | None:
        if self.submitting:
            return None
        suggestions = self.suggestions()
        if suggestions:
            if key == "esc":
                self.clear_suggestions()
                return None
            if key in ("tab", "down"):
                self.suggestion_cursor = min(self.suggestion_cursor + 1, len(suggestions) - 1)
                return None
            if key in ("shift+tab", "up"):
                self.suggestion_cursor = max(self.suggestion_cursor - 1, 0)
                return None
            if key == "enter":
                self._set(self.cursor, suggestions[self.suggestion_cursor])
                self.clear_suggestions()
                self._advance()
                return None

        if key == "esc":
            self.active = False
            return msg.MRCreateCancelled()
        if key in ("tab", "down"):
            self.clear_suggestions()
            self._advance()
        elif key in ("shift+tab", "up"):
            self.clear_suggestions()
            self.cursor = max(self.cursor - 1, 0)
        elif key == "enter":
            if self.cursor == FIELD_DRAFT:
                self.draft = not self.draft
            elif self.cursor == FIELD_DESCRIPTION:
                return self.submit()
            else:
                self.clear_suggestions()
                self._advance()
        elif key == "ctrl+s":
            return self.submit()
        elif key == " ":
            if self.cursor == FIELD_DRAFT:
                self.draft = not self.draft
            elif self.cursor != FIELD_PROJECT and not self.is_branch_field():
                self._set(self.cursor, self.fields[self.cursor] + " ")
        elif key == "backspace":
            if self.cursor != FIELD_DRAFT and self.fields[self.cursor]:
                self._set(self.cursor, self.fields[self.cursor][:-1])
                self.clear_suggestions()
                return self._field_changed()
        elif len(key) == 1 and self.cursor != FIELD_DRAFT:
            self._set(self.cursor, self.fields[self.cursor] + key)
            self.clear_suggestions()
            return self._field_changed()
        return None

    def _field_changed(self) -> msg.Message | None:
        if self.cursor == FIELD_PROJECT:
            query = self.fields[FIELD_PROJECT].lower()
            self.project_suggestions = tuple(p for p in self.projects if query in p.lower())
            self.suggestion_cursor = 0
            return None
        if self.is_branch_field():
            query = self.fields[self.cursor]
            project = self.fields[FIELD_PROJECT]
            if query and project:
                return msg.BranchSearchRequested(project, query, self.cursor)
        return None

    def submit(self) -> msg.Message | None:
        project = self.fields[FIELD_PROJECT].strip()
        source = self.fields[FIELD_SOURCE].strip()
        target = self.fields[FIELD_TARGET].strip()
        title = self.fields[FIELD_TITLE].strip()

        if not project:
            self.error = "Project is required"
            return None
        if not source or not target or not title:
            self.error = "Source, target and title are required"
            return None
        if source == target:
            self.error = "Source and target branches must be different"
            return None

        self.error = ""
        self.submitting = True
        self.clear_suggestions()
        options = CreateMROptions(
            source_branch=source,
            target_branch=target,
            title=title,
            description=self.fields[FIELD_DESCRIPTION].strip(),
            draft=self.draft,
        )
        return msg.MRCreateSubmitted(project, options)

    def render(self) -> list[Text]:
        lines = [Text(""), Text("  Create Merge Request", style=styles.HELP_KEY), Text("")]
        for field, label in enumerate(LABELS):
            focused = field == self.cursor
            if field == FIELD_DRAFT:
                value = "[x]" if self.draft else "[ ]"
            else:
                value = self.fields[field] + ("█" if focused else "")
            lines.append(
                Text.assemble(
                    CURSOR if focused else NO_CURSOR,
                    (f"{label:<16}", styles.HELP_KEY),
                    f" {value}",
                )
            )
            if focused:
                for i, suggestion in enumerate(self.suggestions()):
                    selected = i == self.suggestion_cursor
                    lines.append(
                        Text(
                            f"  {' ▸ ' if selected else '   '}{suggestion}",
                            style=styles.SELECTED if selected else styles.HELP_DESC,
                        )
                    )
        if self.error:
            lines.append(Text(""))
            lines.append(Text(f"  {self.error}", style=styles.status_style("failed")))
        lines.append(Text(""))
        hint = (
            "  Submitting..."
            if self.submitting
            else "  Tab/↑↓ navigate  Enter select/next  Ctrl+S submit  Esc cancel"
        )
        lines.append(Text(hint, style=styles.HELP_DESC))
        return lines
