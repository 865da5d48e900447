"""Timer state machine for WorkSession.

States
------
IDLE      Not running, nothing on the clock.
WORKING   Work session counting down.
RESTING   Rest period counting down.
PAUSED    Timer frozen (remembers whether it was working or resting).

Transitions
-----------
any → WORKING                  (start_session, preempts whatever ran)
any → RESTING                  (start_rest, preempts whatever ran)
WORKING | RESTING → PAUSED     (pause)
PAUSED → {whatever was paused} (resume)
WORKING | RESTING → IDLE       (timer reaches 0, completion emitted first)
any → IDLE                     (reset)

The engine never chains into the next phase on its own.  Whether a rest
follows a finished work session is the host's call.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

from PyQt6.QtCore import QObject, pyqtSignal

from .scheduler import QtTickScheduler, TickHandle, TickScheduler

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class Phase(Enum):
    IDLE = "idle"
    WORKING = "working"
    RESTING = "resting"
    PAUSED = "paused"


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_SESSION_MINUTES = 25
DEFAULT_REST_MINUTES = 5

SESSION_MINUTES_RANGE = (1, 120)
REST_MINUTES_RANGE = (1, 60)

TICK_INTERVAL_MS = 1000

RUNNING_PHASES = frozenset({Phase.WORKING, Phase.RESTING})


def clamp_minutes(value: int, bounds: tuple[int, int]) -> int:
    """Clamp *value* into the inclusive *bounds*, truncating fractions."""
    low, high = bounds
    return max(low, min(high, int(value)))


def _in_bounds(value: float, bounds: tuple[int, int]) -> bool:
    low, high = bounds
    return low <= value <= high


def format_time(seconds: int) -> str:
    """``MM:SS`` countdown text.  Minutes are not capped at 59."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


# ── snapshot ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class EngineState:
    """Immutable view of the engine handed to listeners and persistence.

    Timestamps are whole seconds since the Unix epoch.
    """

    phase: Phase = Phase.IDLE
    remaining_seconds: int = 0
    session_duration_minutes: int = DEFAULT_SESSION_MINUTES
    rest_duration_minutes: int = DEFAULT_REST_MINUTES
    phase_started_at: int | None = None
    paused_at: int | None = None
    paused_from: Phase | None = None

    @property
    def is_running(self) -> bool:
        return self.phase in RUNNING_PHASES

    @property
    def is_paused(self) -> bool:
        return self.phase == Phase.PAUSED

    @property
    def session_duration_seconds(self) -> int:
        return self.session_duration_minutes * 60

    @property
    def rest_duration_seconds(self) -> int:
        return self.rest_duration_minutes * 60

    def with_phase(
        self, phase: Phase, remaining_seconds: int = 0, started_at: int | None = None
    ) -> EngineState:
        """Copy into a running or idle *phase*, fixing up the timestamps."""
        if phase == Phase.IDLE:
            return replace(
                self, phase=Phase.IDLE, remaining_seconds=0,
                phase_started_at=None, paused_at=None, paused_from=None,
            )
        return replace(
            self, phase=phase, remaining_seconds=remaining_seconds,
            phase_started_at=started_at, paused_at=None, paused_from=None,
        )


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Work/rest countdown driven by a 1-second tick.

    Signals
    -------
    state_changed(state: EngineState)
        Emitted synchronously by every mutating call and on every tick.
    timer_completed(phase: Phase)
        Emitted when a WORKING or RESTING countdown reaches zero, after
        the ``state_changed`` for that same tick and before the engine
        drops back to IDLE.
    """

    state_changed = pyqtSignal(object)
    timer_completed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        session_duration_minutes: int = DEFAULT_SESSION_MINUTES,
        rest_duration_minutes: int = DEFAULT_REST_MINUTES,
        scheduler: TickScheduler | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(parent)

        # ── configuration ─────────────────────────────────────────────
        self._session_minutes = clamp_minutes(
            session_duration_minutes, SESSION_MINUTES_RANGE
        )
        self._rest_minutes = clamp_minutes(rest_duration_minutes, REST_MINUTES_RANGE)

        # ── countdown state ───────────────────────────────────────────
        self._phase: Phase = Phase.IDLE
        self._remaining: int = 0
        self._phase_started_at: int | None = None
        self._paused_at: int | None = None
        self._paused_from: Phase | None = None

        # ── ticking ───────────────────────────────────────────────────
        self._scheduler: TickScheduler = scheduler or QtTickScheduler(self)
        self._clock = clock
        self._tick_handle: TickHandle | None = None
        self._disposed = False
        # Bumped by every command that moves the engine to a new phase
        self._generation = 0

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> EngineState:
        return EngineState(
            phase=self._phase,
            remaining_seconds=self._remaining,
            session_duration_minutes=self._session_minutes,
            rest_duration_minutes=self._rest_minutes,
            phase_started_at=self._phase_started_at,
            paused_at=self._paused_at,
            paused_from=self._paused_from,
        )

    def get_state(self) -> EngineState:
        return self.state

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def remaining(self) -> int:
        """Seconds left on the clock."""
        return self._remaining

    @property
    def session_duration_minutes(self) -> int:
        return self._session_minutes

    @property
    def rest_duration_minutes(self) -> int:
        return self._rest_minutes

    @property
    def is_running(self) -> bool:
        """True when actively counting down (not IDLE, not PAUSED)."""
        return self._phase in RUNNING_PHASES

    @property
    def is_paused(self) -> bool:
        return self._phase == Phase.PAUSED

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start_session(self) -> None:
        """Start a work session, replacing anything already on the clock."""
        self._begin(Phase.WORKING, self._session_minutes * 60)

    def start_rest(self) -> None:
        """Start a rest period, replacing anything already on the clock."""
        self._begin(Phase.RESTING, self._rest_minutes * 60)

    def pause(self) -> None:
        if not self.is_running:
            return
        self._stop_ticking()
        self._paused_from = self._phase
        self._paused_at = self._now()
        self._phase_started_at = None
        self._phase = Phase.PAUSED
        self._generation += 1
        logger.debug("Paused %s with %ds left", self._paused_from.value, self._remaining)
        self._emit_state()

    def resume(self) -> None:
        """Resume from PAUSED back into whichever phase was paused."""
        if self._phase != Phase.PAUSED or self._paused_from is None:
            return
        self._phase = self._paused_from
        self._generation += 1
        self._paused_from = None
        self._paused_at = None
        self._phase_started_at = self._now()
        self._start_ticking()
        logger.debug("Resumed %s with %ds left", self._phase.value, self._remaining)
        self._emit_state()

    def reset(self) -> None:
        """Drop whatever is on the clock and go IDLE.  Always succeeds."""
        self._stop_ticking()
        self._generation += 1
        self._go_idle()
        self._emit_state()

    def update_durations(self, session_minutes: int, rest_minutes: int) -> None:
        """Change the configured durations.

        Out-of-range values are clamped to the nearest bound.  When the
        duration of the phase on the clock changes, elapsed time is kept
        and the remaining time is rebuilt from the new duration.  If that
        leaves nothing on the clock the phase completes right away.
        """
        new_session = clamp_minutes(session_minutes, SESSION_MINUTES_RANGE)
        new_rest = clamp_minutes(rest_minutes, REST_MINUTES_RANGE)
        if not (
            _in_bounds(session_minutes, SESSION_MINUTES_RANGE)
            and _in_bounds(rest_minutes, REST_MINUTES_RANGE)
        ):
            logger.warning(
                "Durations %r/%r out of range, clamped to %d/%d minutes",
                session_minutes, rest_minutes, new_session, new_rest,
            )

        old = {Phase.WORKING: self._session_minutes, Phase.RESTING: self._rest_minutes}
        new = {Phase.WORKING: new_session, Phase.RESTING: new_rest}
        self._session_minutes = new_session
        self._rest_minutes = new_rest

        affected = self._paused_from if self._phase == Phase.PAUSED else self._phase
        if affected in RUNNING_PHASES and old[affected] != new[affected]:
            elapsed = old[affected] * 60 - self._remaining
            self._remaining = max(0, new[affected] * 60 - elapsed)
            logger.debug(
                "Rescaled %s to %ds after duration change", affected.value, self._remaining
            )
            if self._remaining == 0:
                self._complete(affected)
                return

        self._emit_state()

    def tick(self) -> None:
        """Count one second off the running phase."""
        if not self.is_running:
            return
        self._remaining = max(0, self._remaining - 1)
        if self._remaining == 0:
            self._complete(self._phase)
        else:
            self._emit_state()

    def restore(self, state: EngineState) -> None:
        """Seed the engine from a saved (and reconciled) snapshot."""
        if state.phase == Phase.PAUSED and state.paused_from not in RUNNING_PHASES:
            raise ValueError("a paused state must record the phase it paused")

        self._stop_ticking()
        self._generation += 1
        self._session_minutes = clamp_minutes(
            state.session_duration_minutes, SESSION_MINUTES_RANGE
        )
        self._rest_minutes = clamp_minutes(state.rest_duration_minutes, REST_MINUTES_RANGE)

        remaining = max(0, state.remaining_seconds)
        if state.phase == Phase.IDLE or (state.phase in RUNNING_PHASES and remaining == 0):
            self._go_idle()
        elif state.phase == Phase.PAUSED:
            self._phase = Phase.PAUSED
            self._remaining = remaining
            self._phase_started_at = None
            self._paused_at = state.paused_at if state.paused_at is not None else self._now()
            self._paused_from = state.paused_from
        else:
            self._phase = state.phase
            self._remaining = remaining
            self._phase_started_at = (
                state.phase_started_at if state.phase_started_at is not None else self._now()
            )
            self._paused_at = None
            self._paused_from = None
            self._start_ticking()

        logger.info("Restored %s with %ds left", self._phase.value, self._remaining)
        self._emit_state()

    def dispose(self) -> None:
        """Stop ticking and drop every listener.  Safe to call twice."""
        self._stop_ticking()
        if self._disposed:
            return
        self._disposed = True
        for signal in (self.state_changed, self.timer_completed):
            try:
                signal.disconnect()
            except TypeError:
                pass  # nothing connected

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _now(self) -> int:
        return int(self._clock())

    def _begin(self, phase: Phase, duration: int) -> None:
        self._stop_ticking()
        self._generation += 1
        self._phase = phase
        self._remaining = duration
        self._phase_started_at = self._now()
        self._paused_at = None
        self._paused_from = None
        self._start_ticking()
        logger.debug("Started %s for %ds", phase.value, duration)
        self._emit_state()

    def _complete(self, ended: Phase) -> None:
        self._stop_ticking()
        self._remaining = 0
        generation = self._generation
        self._emit_state()
        logger.info("%s finished", ended.value.capitalize())
        self.timer_completed.emit(ended)
        if self._generation != generation:
            # A listener already started, reset or restored the timer
            return
        self._go_idle()
        self._emit_state()

    def _go_idle(self) -> None:
        self._phase = Phase.IDLE
        self._remaining = 0
        self._phase_started_at = None
        self._paused_at = None
        self._paused_from = None

    def _start_ticking(self) -> None:
        self._stop_ticking()
        if self._disposed:
            return
        self._tick_handle = self._scheduler.schedule(TICK_INTERVAL_MS, self.tick)

    def _stop_ticking(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _emit_state(self) -> None:
        self.state_changed.emit(self.state)
