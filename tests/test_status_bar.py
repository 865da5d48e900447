"""Tests for the status display: view building, temporary messages and
the status button."""

import pytest

from worksession.timer.engine import EngineState, Phase
from worksession.ui.status_bar import (
    CMD_PAUSE,
    CMD_RESUME,
    CMD_START_SESSION,
    MESSAGE_COLOR,
    PAUSED_COLOR,
    StatusBarController,
    StatusView,
    ThemeColors,
    VisibilityOptions,
    build_view,
)
from worksession.ui.status_button import MENU_ENTRIES, StatusButton, button_stylesheet

from helpers import SignalCollector


def _state(phase, remaining=0):
    if phase == Phase.PAUSED:
        return EngineState(phase=phase, remaining_seconds=remaining, paused_from=Phase.WORKING)
    return EngineState(phase=phase, remaining_seconds=remaining)


# ═══════════════════════════════════════════════════════════════════════════
#  build_view
# ═══════════════════════════════════════════════════════════════════════════


class TestBuildView:

    def test_idle(self):
        view = build_view(_state(Phase.IDLE))
        assert view.text == "⚪ Ready ▶️"
        assert view.tooltip == "Work Session Manager - Click to start work session"
        assert view.command == CMD_START_SESSION
        assert view.color is None

    def test_no_state_looks_idle(self):
        assert build_view(None) == build_view(_state(Phase.IDLE))

    def test_working(self):
        view = build_view(_state(Phase.WORKING, 1500))
        assert view.text == "🟢 25:00 ⏸️"
        assert view.tooltip == "Work Session - 25:00 remaining. Click to pause."
        assert view.command == CMD_PAUSE
        assert view.color == "#4CAF50"

    def test_resting(self):
        view = build_view(_state(Phase.RESTING, 61))
        assert view.text == "🔵 01:01 ⏸️"
        assert view.tooltip.startswith("Rest Period - 01:01")
        assert view.color == "#64B5F6"

    def test_paused(self):
        view = build_view(_state(Phase.PAUSED, 599))
        assert view.text == "🟡 09:59 ▶️"
        assert view.tooltip == "Timer Paused - 09:59 remaining. Click to resume."
        assert view.command == CMD_RESUME
        assert view.color == PAUSED_COLOR

    def test_custom_theme(self):
        colors = ThemeColors("red", "navy")
        assert build_view(_state(Phase.WORKING, 10), colors).color == "red"
        assert build_view(_state(Phase.RESTING, 10), colors).color == "navy"

    @pytest.mark.parametrize("countdown,dot,button,expected", [
        (True, False, False, "25:00"),
        (False, True, False, "🟢"),
        (False, False, True, "⏸️"),
        (True, True, False, "🟢 25:00"),
        (False, False, False, ""),
    ])
    def test_visibility(self, countdown, dot, button, expected):
        vis = VisibilityOptions(countdown, dot, button)
        assert build_view(_state(Phase.WORKING, 1500), visibility=vis).text == expected


# ═══════════════════════════════════════════════════════════════════════════
#  StatusBarController
# ═══════════════════════════════════════════════════════════════════════════


class TestStatusBarController:

    @pytest.fixture
    def status(self, qapp):
        ctrl = StatusBarController()
        yield ctrl
        ctrl.dispose()

    def test_update_display_emits_live_view(self, status):
        c = SignalCollector()
        status.display_changed.connect(c)
        status.update_display(_state(Phase.WORKING, 90))
        assert len(c) == 1
        assert c.last.text == "🟢 01:30 ⏸️"

    def test_message_replaces_view(self, status):
        c = SignalCollector()
        status.display_changed.connect(c)
        status.show_message("Hello", 1000)
        assert status.is_showing_message
        assert c.last == StatusView("Hello", "Hello", None, MESSAGE_COLOR)
        assert status.view.text == "Hello"

    def test_updates_held_back_while_message_shows(self, status):
        status.show_message("Hello")
        c = SignalCollector()
        status.display_changed.connect(c)
        status.update_display(_state(Phase.WORKING, 90))
        assert len(c) == 0
        assert status.live_view.text == "🟢 01:30 ⏸️"

    def test_message_expiry_restores_live_view(self, status):
        status.update_display(_state(Phase.RESTING, 30))
        status.show_message("Hello")
        c = SignalCollector()
        status.display_changed.connect(c)
        status._clear_message()
        assert not status.is_showing_message
        assert c.last.text == "🔵 00:30 ⏸️"

    def test_force_update_emits_current_view(self, status):
        status.show_message("Hello")
        c = SignalCollector()
        status.display_changed.connect(c)
        status.force_update()
        assert c.last.text == "Hello"

    def test_apply_theme(self, status):
        status.update_display(_state(Phase.WORKING, 30))
        status.apply_theme(ThemeColors("#123456", "#654321"))
        assert status.view.color == "#123456"

    def test_set_visibility(self, status):
        status.update_display(_state(Phase.WORKING, 30))
        status.set_visibility(VisibilityOptions(True, False, False))
        assert status.view.text == "00:30"

    @pytest.mark.parametrize("method,args,text", [
        ("show_session_complete", (), "✅ Work Session Complete!"),
        ("show_rest_complete", (), "✅ Rest Period Complete!"),
        ("show_timer_started", (True,), "▶️ Work Session Started"),
        ("show_timer_started", (False,), "▶️ Rest Period Started"),
        ("show_timer_paused", (), "⏸️ Timer Paused"),
        ("show_timer_resumed", (), "▶️ Timer Resumed"),
        ("show_timer_reset", (), "🔄 Timer Reset"),
    ])
    def test_canned_messages(self, status, method, args, text):
        getattr(status, method)(*args)
        assert status.view.text == text

    def test_dispose_drops_message(self, status):
        status.show_message("Hello")
        status.dispose()
        assert not status.is_showing_message


# ═══════════════════════════════════════════════════════════════════════════
#  StatusButton
# ═══════════════════════════════════════════════════════════════════════════


class TestStatusButton:

    def test_render_view(self, qapp):
        btn = StatusButton()
        view = build_view(_state(Phase.WORKING, 1500))
        btn.render_view(view)
        assert btn.text() == view.text
        assert btn.toolTip() == view.tooltip
        assert "#4CAF50" in btn.styleSheet()

    def test_click_requests_view_command(self, qapp):
        btn = StatusButton()
        c = SignalCollector()
        btn.command_requested.connect(c)
        btn.render_view(build_view(_state(Phase.PAUSED, 10)))
        btn.click()
        assert c.items == [CMD_RESUME]

    def test_click_on_message_does_nothing(self, qapp):
        btn = StatusButton()
        c = SignalCollector()
        btn.command_requested.connect(c)
        btn.render_view(StatusView("Hi", "Hi"))
        btn.click()
        assert len(c) == 0

    def test_menu_lists_every_command(self, qapp):
        btn = StatusButton()
        c = SignalCollector()
        btn.command_requested.connect(c)
        for action in btn._menu.actions():
            action.trigger()
        assert c.items == [cmd for _label, cmd in MENU_ENTRIES]

    def test_stylesheet(self):
        assert button_stylesheet(None) == ""
        sheet = button_stylesheet("#000000")
        assert "color: #000000" in sheet
        assert "hover" in sheet and "pressed" in sheet
