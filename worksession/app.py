"""Host layer: wires the timer to persistence, audio and the status display.

``WorkSessionController`` owns one ``TimerEngine`` and one
``PersistenceGateway`` and passes them around explicitly; there is no
module-level timer.  It decides everything the engine deliberately does
not: statistics, auto-starting the next phase, what to play and show when
a phase completes.
"""

from __future__ import annotations

import logging
from pathlib import Path

from PyQt6.QtCore import QFileSystemWatcher, QObject, QTimer
from sqlalchemy.exc import SQLAlchemyError

from .audio.sounds import SoundManager
from .database.gateway import PersistenceGateway
from .settings import Settings, load_settings
from .timer.engine import EngineState, Phase, TimerEngine
from .ui.status_bar import (
    CMD_PAUSE,
    CMD_RESET,
    CMD_RESUME,
    CMD_START_REST,
    CMD_START_SESSION,
    StatusBarController,
    ThemeColors,
    VisibilityOptions,
)

logger = logging.getLogger(__name__)

AUTO_START_DELAY_MS = 2000  # long enough to read the completion message


def _theme(settings: Settings) -> ThemeColors:
    return ThemeColors(settings.work_session_color, settings.rest_period_color)


def _visibility(settings: Settings) -> VisibilityOptions:
    return VisibilityOptions(
        show_countdown=settings.show_countdown,
        show_status_dot=settings.show_status_dot,
        show_pause_play_button=settings.show_pause_play_button,
    )


class WorkSessionController(QObject):
    """Coordinates the timer and its collaborators."""

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        settings: Settings | None = None,
        engine: TimerEngine | None = None,
        gateway: PersistenceGateway | None = None,
        sounds: SoundManager | None = None,
        status: StatusBarController | None = None,
        auto_start_delay_ms: int = AUTO_START_DELAY_MS,
    ) -> None:
        super().__init__(parent)
        self._settings = settings or load_settings()

        self._engine = engine or TimerEngine(
            self,
            session_duration_minutes=self._settings.session_duration,
            rest_duration_minutes=self._settings.rest_duration,
        )
        self._gateway = gateway or PersistenceGateway()
        self._sounds = sounds or SoundManager(self, enabled=self._settings.sound_enabled)
        self._sounds.set_volume(self._settings.sound_volume)
        self._status = status or StatusBarController(
            self,
            colors=_theme(self._settings),
            visibility=_visibility(self._settings),
        )

        # ── statistics ────────────────────────────────────────────────
        self._session_count = 0
        self._total_work_seconds = 0

        # ── pending auto-start ────────────────────────────────────────
        self._auto_start_timer = QTimer(self)
        self._auto_start_timer.setSingleShot(True)
        self._auto_start_timer.setInterval(auto_start_delay_ms)
        self._auto_start_timer.timeout.connect(self._run_auto_start)
        self._auto_start_phase: Phase | None = None

        self._settings_watcher: QFileSystemWatcher | None = None
        self._shut_down = False

        self._engine.state_changed.connect(self._on_state_changed)
        self._engine.timer_completed.connect(self._on_timer_completed)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    @property
    def gateway(self) -> PersistenceGateway:
        return self._gateway

    @property
    def status(self) -> StatusBarController:
        return self._status

    @property
    def sounds(self) -> SoundManager:
        return self._sounds

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def session_count(self) -> int:
        return self._session_count

    @property
    def total_work_seconds(self) -> int:
        return self._total_work_seconds

    @property
    def auto_start_pending(self) -> Phase | None:
        """The phase waiting to auto-start, if any."""
        return self._auto_start_phase if self._auto_start_timer.isActive() else None

    # ══════════════════════════════════════════════════════════════════
    #  LIFECYCLE
    # ══════════════════════════════════════════════════════════════════

    def startup(self) -> None:
        """Restore statistics and the saved timer, or start fresh."""
        restored: EngineState | None = None
        try:
            stats = self._gateway.get_statistics()
            self._session_count = stats.session_count
            self._total_work_seconds = stats.total_work_seconds
            restored = self._gateway.load()
        except SQLAlchemyError:
            logger.warning("Could not read saved state, starting fresh", exc_info=True)

        if restored is not None and restored.phase != Phase.IDLE:
            self._engine.restore(restored)
            # Settings may have changed while we were closed
            self._engine.update_durations(
                self._settings.session_duration, self._settings.rest_duration
            )
        elif self._settings.auto_start_on_open:
            logger.info("Auto-starting a work session on open")
            self.start_session()
        else:
            self._status.update_display(self._engine.state)
            self._save()

    def shutdown(self) -> None:
        """Save the final state and release the timer.  Safe to call twice."""
        if self._shut_down:
            return
        self._shut_down = True
        self._auto_start_timer.stop()
        self._save()
        self._engine.dispose()
        self._status.dispose()

    # ══════════════════════════════════════════════════════════════════
    #  COMMANDS
    # ══════════════════════════════════════════════════════════════════

    def start_session(self) -> None:
        self._auto_start_timer.stop()
        self._engine.start_session()
        self._status.show_timer_started(True)

    def start_rest(self) -> None:
        self._auto_start_timer.stop()
        self._engine.start_rest()
        self._status.show_timer_started(False)

    def pause(self) -> None:
        if not self._engine.is_running:
            return
        self._engine.pause()
        self._status.show_timer_paused()

    def resume(self) -> None:
        if not self._engine.is_paused:
            return
        self._engine.resume()
        self._status.show_timer_resumed()

    def reset(self) -> None:
        self._auto_start_timer.stop()
        self._engine.reset()
        self._status.show_timer_reset()

    def dispatch(self, command: str) -> None:
        """Run a status-button command by name."""
        handlers = {
            CMD_START_SESSION: self.start_session,
            CMD_START_REST: self.start_rest,
            CMD_PAUSE: self.pause,
            CMD_RESUME: self.resume,
            CMD_RESET: self.reset,
        }
        handler = handlers.get(command)
        if handler is None:
            logger.warning("Unknown command %r", command)
            return
        handler()

    # ══════════════════════════════════════════════════════════════════
    #  SETTINGS
    # ══════════════════════════════════════════════════════════════════

    def apply_settings(self, settings: Settings) -> None:
        """Push changed settings into every collaborator."""
        self._settings = settings
        self._engine.update_durations(settings.session_duration, settings.rest_duration)
        self._status.apply_theme(_theme(settings))
        self._status.set_visibility(_visibility(settings))
        self._sounds.set_enabled(settings.sound_enabled)
        self._sounds.set_volume(settings.sound_volume)
        self._status.force_update()

    def watch_settings_file(self, path: Path) -> None:
        """Reload and apply settings whenever *path* changes on disk."""
        self._settings_watcher = QFileSystemWatcher(self)
        if path.exists():
            self._settings_watcher.addPath(str(path))
        self._settings_watcher.fileChanged.connect(lambda _p: self._reload_settings(path))

    # ══════════════════════════════════════════════════════════════════
    #  TIMER SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _on_state_changed(self, state: EngineState) -> None:
        self._status.update_display(state)
        self._save()

    def _on_timer_completed(self, phase: Phase) -> None:
        if phase == Phase.WORKING:
            self._session_count += 1
            self._total_work_seconds += self._engine.session_duration_minutes * 60
            self._sounds.play_session_end()
            self._status.show_session_complete()
            if self._settings.auto_start_rest:
                self._schedule_auto_start(Phase.RESTING)
        elif phase == Phase.RESTING:
            self._sounds.play_rest_end()
            self._status.show_rest_complete()
            if self._settings.auto_start_work:
                self._schedule_auto_start(Phase.WORKING)

        try:
            self._gateway.update_statistics(self._session_count, self._total_work_seconds)
        except SQLAlchemyError:
            logger.warning("Could not save statistics", exc_info=True)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _schedule_auto_start(self, phase: Phase) -> None:
        self._auto_start_phase = phase
        self._auto_start_timer.start()

    def _run_auto_start(self) -> None:
        phase, self._auto_start_phase = self._auto_start_phase, None
        if phase == Phase.RESTING:
            self.start_rest()
        elif phase == Phase.WORKING:
            self.start_session()

    def _reload_settings(self, path: Path) -> None:
        # Editors that save by replacing the file drop it from the watch list
        if self._settings_watcher is not None and path.exists():
            if str(path) not in self._settings_watcher.files():
                self._settings_watcher.addPath(str(path))
        self.apply_settings(load_settings(path))

    def _save(self) -> None:
        try:
            self._gateway.save(
                self._engine.state, self._session_count, self._total_work_seconds
            )
        except SQLAlchemyError:
            logger.warning("Could not save timer state", exc_info=True)
