"""Status display: turns timer snapshots into what the status button shows.

The controller owns no widget.  It builds a ``StatusView`` (text, tooltip,
click command, color) for every snapshot and emits it; ``StatusButton``
renders whatever it receives.
"""

from __future__ import annotations

from dataclasses import dataclass

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..timer.engine import EngineState, Phase, format_time

PAUSED_COLOR = "#FFA500"
MESSAGE_COLOR = "#FFA500"

# Click commands understood by the controller in app.py
CMD_START_SESSION = "start_session"
CMD_START_REST = "start_rest"
CMD_PAUSE = "pause"
CMD_RESUME = "resume"
CMD_RESET = "reset"

_DOTS = {
    Phase.IDLE: "⚪",
    Phase.WORKING: "🟢",
    Phase.RESTING: "🔵",
    Phase.PAUSED: "🟡",
}
_PLAY = "▶️"
_PAUSE = "⏸️"


@dataclass(frozen=True)
class ThemeColors:
    work_session_color: str = "#4CAF50"
    rest_period_color: str = "#64B5F6"


@dataclass(frozen=True)
class VisibilityOptions:
    show_countdown: bool = True
    show_status_dot: bool = True
    show_pause_play_button: bool = True


@dataclass(frozen=True)
class StatusView:
    text: str
    tooltip: str
    command: str | None = None
    color: str | None = None


def build_view(
    state: EngineState | None,
    colors: ThemeColors = ThemeColors(),
    visibility: VisibilityOptions = VisibilityOptions(),
) -> StatusView:
    """The live (non-message) view for *state*."""
    phase = state.phase if state is not None else Phase.IDLE
    remaining = format_time(state.remaining_seconds) if state is not None else "00:00"

    parts: list[str] = []
    if visibility.show_status_dot:
        parts.append(_DOTS[phase])
    if visibility.show_countdown:
        parts.append("Ready" if phase == Phase.IDLE else remaining)
    if visibility.show_pause_play_button:
        parts.append(_PAUSE if phase in (Phase.WORKING, Phase.RESTING) else _PLAY)
    text = " ".join(parts)

    if phase == Phase.WORKING:
        return StatusView(
            text, f"Work Session - {remaining} remaining. Click to pause.",
            CMD_PAUSE, colors.work_session_color,
        )
    if phase == Phase.RESTING:
        return StatusView(
            text, f"Rest Period - {remaining} remaining. Click to pause.",
            CMD_PAUSE, colors.rest_period_color,
        )
    if phase == Phase.PAUSED:
        return StatusView(
            text, f"Timer Paused - {remaining} remaining. Click to resume.",
            CMD_RESUME, PAUSED_COLOR,
        )
    return StatusView(text, "Work Session Manager - Click to start work session", CMD_START_SESSION)


class StatusBarController(QObject):
    """Keeps the status view in sync with the timer.

    Signals
    -------
    display_changed(view: StatusView)
        Emitted whenever the visible view changes: a new snapshot, a
        theme/visibility change, or a temporary message starting or
        expiring.
    """

    display_changed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        colors: ThemeColors | None = None,
        visibility: VisibilityOptions | None = None,
    ) -> None:
        super().__init__(parent)
        self._colors = colors or ThemeColors()
        self._visibility = visibility or VisibilityOptions()
        self._state: EngineState | None = None
        self._message: StatusView | None = None

        self._message_timer = QTimer(self)
        self._message_timer.setSingleShot(True)
        self._message_timer.timeout.connect(self._clear_message)

    # ── public API ────────────────────────────────────────────────────

    @property
    def view(self) -> StatusView:
        """What the button should show right now."""
        return self._message or self.live_view

    @property
    def live_view(self) -> StatusView:
        return build_view(self._state, self._colors, self._visibility)

    @property
    def colors(self) -> ThemeColors:
        return self._colors

    @property
    def visibility(self) -> VisibilityOptions:
        return self._visibility

    @property
    def is_showing_message(self) -> bool:
        return self._message is not None

    def update_display(self, state: EngineState | None = None) -> None:
        if state is not None:
            self._state = state
        if self._message is None:
            self.display_changed.emit(self.live_view)

    def force_update(self) -> None:
        self.display_changed.emit(self.view)

    def apply_theme(self, colors: ThemeColors) -> None:
        self._colors = colors
        self.update_display()

    def set_visibility(self, visibility: VisibilityOptions) -> None:
        self._visibility = visibility
        self.update_display()

    def show_message(self, message: str, duration_ms: int = 3000) -> None:
        """Replace the view with *message* for *duration_ms*."""
        self._message = StatusView(message, message, None, MESSAGE_COLOR)
        self._message_timer.start(duration_ms)
        self.display_changed.emit(self._message)

    def show_session_complete(self) -> None:
        self.show_message("✅ Work Session Complete!", 5000)

    def show_rest_complete(self) -> None:
        self.show_message("✅ Rest Period Complete!", 5000)

    def show_timer_started(self, is_work_session: bool) -> None:
        label = "Work Session Started" if is_work_session else "Rest Period Started"
        self.show_message(f"{_PLAY} {label}", 2000)

    def show_timer_paused(self) -> None:
        self.show_message(f"{_PAUSE} Timer Paused", 2000)

    def show_timer_resumed(self) -> None:
        self.show_message(f"{_PLAY} Timer Resumed", 2000)

    def show_timer_reset(self) -> None:
        self.show_message("🔄 Timer Reset", 2000)

    def dispose(self) -> None:
        self._message_timer.stop()
        self._message = None

    # ── internal ──────────────────────────────────────────────────────

    def _clear_message(self) -> None:
        self._message = None
        self.display_changed.emit(self.live_view)
