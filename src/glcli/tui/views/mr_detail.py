"""Merge request detail with Diffs and Comments tabs."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from ...models.merge_requests import MergeRequest, MRDiff, MRNote
from ...models.status import MRState
from .. import messages as msg
from .. import styles
from .base import TextBuffer, hint, time_ago

TAB_DIFFS = "diffs"
TAB_COMMENTS = "comments"

# keys this view handles itself even though they are global elsewhere
CAPTURED_KEYS = frozenset({"tab"})


def diff_lines(diff: str) -> list[Text]:
    lines = []
    for line in diff.split("\n"):
        if line.startswith("@@"):
            lines.append(Text(line, style=styles.DIFF_HUNK))
        elif line.startswith("+"):
            lines.append(Text(line, style=styles.DIFF_ADD))
        elif line.startswith("-"):
            lines.append(Text(line, style=styles.DIFF_DEL))
        else:
            lines.append(Text(line))
    return lines


@dataclass
class MRDetailView(TextBuffer):
    mr: MergeRequest | None = None
    diffs: tuple[MRDiff, ...] = ()
    notes: tuple[MRNote, ...] = ()
    tab: str = TAB_DIFFS
    diffs_loaded: bool = False
    notes_loaded: bool = False
    generation: int = 0

    def set_mr(self, mr: MergeRequest) -> None:
        is_new = (
            self.mr is None or self.mr.iid != mr.iid or self.mr.project_id != mr.project_id
        )
        self.mr = mr
        if is_new:
            self.diffs = ()
            self.notes = ()
            self.diffs_loaded = False
            self.notes_loaded = False
            self.tab = TAB_DIFFS
            self.offset = 0
        self.rebuild()

    def force_reset(self) -> None:
        """Forget diffs and notes so a refresh shows loading placeholders."""
        self.diffs = ()
        self.notes = ()
        self.diffs_loaded = False
        self.notes_loaded = False
        self.rebuild()

    def set_diffs(self, diffs: tuple[MRDiff, ...]) -> None:
        self.diffs = tuple(diffs)
        self.diffs_loaded = True
        if self.tab == TAB_DIFFS:
            self.rebuild()

    def set_notes(self, notes: tuple[MRNote, ...]) -> None:
        self.notes = tuple(notes)
        self.notes_loaded = True
        if self.tab == TAB_COMMENTS:
            self.rebuild()

    def toggle_tab(self) -> None:
        self.tab = TAB_COMMENTS if self.tab == TAB_DIFFS else TAB_DIFFS
        self.rebuild()
        self.goto_top()

    def rebuild(self) -> None:
        mr = self.mr
        if mr is None:
            return
        draft = " [Draft]" if mr.draft else ""
        lines = [
            Text(f"{mr.state.symbol} !{mr.iid}: {mr.title}{draft}"),
            Text(
                f"Author: @{mr.author}  |  {mr.source_branch} → {mr.target_branch}"
                f"  |  {mr.state.value}  |  {mr.merge_status}"
            ),
        ]
        if mr.description:
            lines.append(Text(""))
            lines.extend(Text(line) for line in mr.description.split("\n"))
        lines.append(Text(""))

        if self.tab == TAB_DIFFS:
            lines.append(Text.assemble((" [Diffs] ", styles.HELP_KEY), " | ", "  Comments  "))
        else:
            lines.append(Text.assemble("  Diffs  ", " | ", (" [Comments] ", styles.HELP_KEY)))
        lines.append(Text("─" * 60))
        lines.append(Text(""))

        if self.tab == TAB_DIFFS:
            lines.extend(self._diff_section())
        else:
            lines.extend(self._notes_section())
        self.set_lines(lines)

    def _diff_section(self) -> list[Text]:
        if not self.diffs_loaded:
            return [Text("Loading diffs...")]
        if not self.diffs:
            return [Text("No changes.")]
        lines = []
        for diff in self.diffs:
            lines.append(Text(diff.label, style=styles.DIFF_FILE))
            lines.extend(diff_lines(diff.diff))
            lines.append(Text(""))
        return lines

    def _notes_section(self) -> list[Text]:
        if not self.notes_loaded:
            return [Text("Loading comments...")]
        if not self.notes:
            return [Text("No comments.")]
        lines = []
        for note in self.notes:
            prefix = "[system] " if note.system else ""
            lines.append(Text(f"{prefix}@{note.author} ({time_ago(note.created_at)}):"))
            lines.extend(Text(line) for line in note.body.split("\n"))
            lines.append(Text(""))
        return lines

    def handle_key(self, key: str) -> msg.Message | None:
        mr = self.mr
        if key == "tab":
            self.toggle_tab()
            return None
        if mr is not None:
            if key == "r":
                return msg.MRRefreshRequested(mr)
            if mr.state == MRState.OPENED:
                if key == "a":
                    return msg.MRApproveRequested(mr)
                if key == "m":
                    return msg.MRMergeRequested(mr)
        self.scroll(key)
        return None

    def render(self) -> list[Text]:
        if self.mr is None:
            return [hint("  Loading MR detail...")]
        title = Text(f"MR !{self.mr.iid}: {self.mr.title}", style=styles.TITLE)
        return [title, Text(""), *self.window()]
