"""Tests for the confirm dialog, breadcrumb and status bar."""

from __future__ import annotations

from glcli.tui.components import (
    NO,
    YES,
    ConfirmDialog,
    ConfirmResult,
    HotkeyHint,
    breadcrumb,
    status_bar,
)


def _dialog() -> ConfirmDialog:
    return ConfirmDialog('Retry job "test"?', "retry", project_id=1, target_id=42)


class TestConfirmDialog:
    def test_yes_focused_by_default(self):
        assert _dialog().focused == YES

    def test_y_confirms(self):
        assert _dialog().handle_key("y") == ConfirmResult(True, "retry", 1, 42)

    def test_enter_uses_focus(self):
        dialog = _dialog()
        assert dialog.handle_key("right") is None
        assert dialog.focused == NO
        assert dialog.handle_key("enter").confirmed is False

        dialog.handle_key("h")
        assert dialog.handle_key("enter").confirmed is True

    def test_n_and_esc_cancel(self):
        assert _dialog().handle_key("n").confirmed is False
        assert _dialog().handle_key("esc").confirmed is False

    def test_other_keys_keep_it_open(self):
        dialog = _dialog()
        for key in ("q", "tab", "j", "1"):
            assert dialog.handle_key(key) is None

    def test_label_carried_through(self):
        dialog = ConfirmDialog('Remove project "g/a"?', "remove_project", label="g/a")
        assert dialog.handle_key("y").label == "g/a"

    def test_render(self):
        lines = [line.plain for line in _dialog().render()]
        assert len(lines) == 4
        assert 'Retry job "test"?' in lines[1]
        assert "Yes" in lines[3] and "No" in lines[3]


def test_breadcrumb():
    assert breadcrumb(()).plain == "glcli"
    assert breadcrumb(("g/a", "#7")).plain == "glcli > g/a > #7"


def test_status_bar():
    bar = status_bar((HotkeyHint("q", "quit"), HotkeyHint("Esc", "back")))
    assert bar.plain == "q quit  Esc back"
