"""Event loop: feeds messages through the reducer and runs the commands it returns."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from ..config import GitLabConfig
from ..services.gitlab import GitLabService
from . import commands as cmd
from . import messages as msg
from .controller import init, update
from .state import AppState

logger = logging.getLogger(__name__)


class Runtime:
    """Single consumer of the message queue.

    Messages are processed strictly one at a time. Commands run as
    independent tasks and post their completion back onto the queue, so
    completions arrive in whatever order the network delivers them.
    """

    def __init__(
        self,
        service: GitLabService,
        config: GitLabConfig,
        on_render: Callable[[AppState], None] | None = None,
        on_quit: Callable[[], None] | None = None,
    ):
        self.service = service
        self.config = config
        self.on_render = on_render
        self.on_quit = on_quit
        self.queue: asyncio.Queue[msg.Message] = asyncio.Queue()
        self.state, self._initial = init(config)
        self._tasks: set[asyncio.Task] = set()
        self._running = False

    def post(self, message: msg.Message) -> None:
        self.queue.put_nowait(message)

    async def run(self) -> None:
        self._running = True
        self._render()
        self.execute(self._initial)
        try:
            while self._running:
                message = await self.queue.get()
                self.step(message)
        finally:
            await self.shutdown()

    def step(self, message: msg.Message) -> list[cmd.Command]:
        """Apply one message and start the commands it produced."""
        self.state, commands = update(self.state, message)
        self._render()
        self.execute(commands)
        return commands

    def execute(self, commands: list[cmd.Command]) -> None:
        for command in commands:
            if isinstance(command, cmd.Quit):
                self._quit()
            elif isinstance(command, cmd.SaveConfig):
                self.post(self._save_config(command))
            else:
                task = asyncio.create_task(self._perform(command))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)

    async def _perform(self, command: cmd.Command) -> None:
        try:
            result = await command.run(self.service)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("%s failed: %s", type(command).__name__, e)
            result = command.failed(e)
        self.post(result)

    def _save_config(self, command: cmd.SaveConfig) -> msg.Message:
        self.config.projects = list(command.projects)
        self.config.pipeline_limit = command.pipeline_limit
        try:
            path = self.config.save()
        except OSError as e:
            logger.error("Could not save config: %s", e)
            return msg.ActionFailed(f"Could not save config: {e}", command.generation)
        return msg.ConfigSaved(str(path), command.generation)

    def _render(self) -> None:
        if self.on_render is not None:
            self.on_render(self.state)

    def _quit(self) -> None:
        self._running = False
        if self.on_quit is not None:
            self.on_quit()

    async def shutdown(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
