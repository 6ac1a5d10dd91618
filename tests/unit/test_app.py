"""Smoke test for the Textual host."""

from __future__ import annotations

from conftest import make_pipeline

from glcli.tui.app import GlcliApp
from glcli.tui.state import ViewID


class PipelineService:
    async def load_all_pipelines(self, paths, limit):
        return [make_pipeline(id=7), make_pipeline(id=6)]


async def test_loads_navigates_and_quits(config):
    app = GlcliApp(config, service=PipelineService())
    async with app.run_test(size=(100, 30)) as pilot:
        for _ in range(20):
            if app.runtime.state.pipelines_view.loaded:
                break
            await pilot.pause(0.05)
        state = app.runtime.state
        assert [p.id for p in state.pipelines_view.items()] == [7, 6]
        assert (state.width, state.height) == (100, 30)

        await pilot.press("j")
        await pilot.pause()
        assert app.runtime.state.pipelines_view.cursor == 1

        await pilot.press("tab")
        await pilot.pause()
        assert app.runtime.state.view == ViewID.MERGE_REQUESTS

        await pilot.press("q")
        await pilot.pause()
    assert not app.is_running
