"""Presentation pieces around the views: confirm dialog, breadcrumb, hint bar."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from . import styles

YES = 0
NO = 1


@dataclass(frozen=True)
class ConfirmResult:
    confirmed: bool
    action: str
    project_id: int
    target_id: int
    label: str = ""


@dataclass
class ConfirmDialog:
    """Yes/No modal that owns the keyboard until it resolves.

    ``target_id`` is a job id for job actions, an MR iid for MR actions and
    unused for project removal, where ``label`` carries the project path.
    """

    message: str
    action: str
    project_id: int = 0
    target_id: int = 0
    label: str = ""
    focused: int = YES

    def result(self, confirmed: bool) -> ConfirmResult:
        return ConfirmResult(confirmed, self.action, self.project_id, self.target_id, self.label)

    def handle_key(self, key: str) -> ConfirmResult | None:
        """Return the resolution, or None while the dialog stays open."""
        if key in ("left", "h"):
            self.focused = YES
        elif key in ("right", "l"):
            self.focused = NO
        elif key == "enter":
            return self.result(self.focused == YES)
        elif key == "y":
            return self.result(True)
        elif key in ("n", "esc"):
            return self.result(False)
        return None

    def render(self) -> list[Text]:
        yes = (" Yes ", styles.SELECTED if self.focused == YES else "")
        no = (" No ", styles.SELECTED if self.focused == NO else "")
        return [Text(""), Text(f"  {self.message}"), Text(""), Text.assemble("  ", yes, "  ", no)]


def breadcrumb(parts: tuple[str, ...]) -> Text:
    if not parts:
        return Text("glcli", style=styles.TITLE)
    return Text("glcli > " + " > ".join(parts), style=styles.TITLE)


@dataclass(frozen=True)
class HotkeyHint:
    key: str
    desc: str


def status_bar(hints: tuple[HotkeyHint, ...]) -> Text:
    text = Text()
    for i, item in enumerate(hints):
        if i:
            text.append("  ")
        text.append(item.key, style=styles.HELP_KEY)
        text.append(" ")
        text.append(item.desc, style=styles.HELP_DESC)
    return text
