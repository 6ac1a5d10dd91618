"""Job log viewer."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from .. import styles
from .base import TextBuffer, hint


def log_lines(content: str) -> list[Text]:
    """Split a job trace into display lines, honouring ANSI colors.

    GitLab traces overwrite section headers with ``\\r``; only the text after
    the last carriage return on a line is shown.
    """
    return [Text.from_ansi(line.rsplit("\r", 1)[-1]) for line in content.split("\n")]


@dataclass
class LogView(TextBuffer):
    job_name: str = ""
    loaded: bool = False
    generation: int = 0

    def reset(self, job_name: str) -> None:
        self.job_name = job_name
        self.loaded = False
        self.lines = ()
        self.offset = 0

    def set_content(self, content: str, job_name: str) -> None:
        # keep following the tail unless the user scrolled up
        follow = not self.loaded or job_name != self.job_name or self.offset >= self.max_offset()
        self.job_name = job_name
        self.loaded = True
        self.set_lines(log_lines(content))
        if follow:
            self.goto_bottom()

    def handle_key(self, key: str) -> None:
        self.scroll(key)

    def render(self) -> list[Text]:
        if not self.loaded:
            return [hint("  Loading log...")]
        return [Text(f"Log: {self.job_name}", style=styles.TITLE), Text(""), *self.window()]
