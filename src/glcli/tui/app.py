"""Textual host for the runtime: draws the rendered screen and forwards input."""

from __future__ import annotations

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from ..client import GitLabClient
from ..config import GitLabConfig
from ..services.gitlab import GitLabService
from . import keymap
from . import messages as msg
from .render import render
from .runtime import Runtime
from .state import AppState

# keys Textual would otherwise consume for focus handling or quitting
FORWARDED_KEYS = ("tab", "shift+tab", "ctrl+c")


class GlcliApp(App):
    """Browse GitLab pipelines, jobs and merge requests."""

    TITLE = "glcli"

    CSS = """
    Screen {
        overflow: hidden;
    }

    #body {
        width: 100%;
        height: 100%;
    }
    """

    BINDINGS = [
        Binding(key, f"forward('{key}')", show=False, priority=True) for key in FORWARDED_KEYS
    ]

    def __init__(self, config: GitLabConfig, service: GitLabService | None = None):
        super().__init__()
        self.config = config
        self.client: GitLabClient | None = None
        if service is None:
            self.client = GitLabClient(config)
            service = GitLabService(self.client)
        self.runtime = Runtime(service, config, on_render=self.draw, on_quit=self.exit)

    def compose(self) -> ComposeResult:
        yield Static(id="body")

    def on_mount(self) -> None:
        self.runtime.post(msg.Resized(self.size.width, self.size.height))
        self.run_worker(self.runtime.run(), exclusive=True, name="runtime")

    async def on_unmount(self) -> None:
        await self.runtime.shutdown()
        if self.client is not None:
            await self.client.close()

    def draw(self, state: AppState) -> None:
        self.query_one("#body", Static).update(render(state))

    def action_forward(self, key: str) -> None:
        self.runtime.post(msg.KeyPressed(key))

    def on_key(self, event: events.Key) -> None:
        if event.key in FORWARDED_KEYS:
            return
        event.stop()
        event.prevent_default()
        self.runtime.post(msg.KeyPressed(keymap.from_terminal(event.key, event.character)))

    def on_resize(self, event: events.Resize) -> None:
        self.runtime.post(msg.Resized(event.size.width, event.size.height))
