"""Durable timer state with drift correction.

The whole timer (phase, remaining seconds, durations, timestamps) plus the
running statistics is kept as one JSON document under ``timer_state``::

    {
        "phase": "working",
        "remaining_seconds": 1320,
        "session_duration_minutes": 25,
        "rest_duration_minutes": 5,
        "phase_started_at": 1760000000,
        "paused_at": null,
        "paused_from": null,
        "last_active_at": 1760000180,
        "session_count": 3,
        "total_work_seconds": 4500
    }

Timestamps are written as epoch seconds.  ISO-8601 strings are accepted
when reading.

On load a WORKING or RESTING record is moved forward by the time the host
was closed: the countdown keeps running, a finished work session rolls
over into the rest that would have followed it, and anything older ends
up IDLE.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable

from ..timer.engine import (
    EngineState,
    Phase,
    REST_MINUTES_RANGE,
    RUNNING_PHASES,
    SESSION_MINUTES_RANGE,
)
from .store import KeyValueStore

logger = logging.getLogger(__name__)

STATE_KEY = "timer_state"

_REQUIRED_KEYS = (
    "phase",
    "remaining_seconds",
    "session_duration_minutes",
    "rest_duration_minutes",
    "last_active_at",
    "session_count",
    "total_work_seconds",
)


class CorruptRecordError(ValueError):
    """The stored record cannot be turned back into a timer state."""


@dataclass(frozen=True)
class Statistics:
    session_count: int = 0
    total_work_seconds: int = 0


@dataclass(frozen=True)
class PersistedRecord:
    state: EngineState
    last_active_at: int
    session_count: int = 0
    total_work_seconds: int = 0

    @property
    def statistics(self) -> Statistics:
        return Statistics(self.session_count, self.total_work_seconds)

    def to_json(self) -> str:
        s = self.state
        return json.dumps({
            "phase": s.phase.value,
            "remaining_seconds": s.remaining_seconds,
            "session_duration_minutes": s.session_duration_minutes,
            "rest_duration_minutes": s.rest_duration_minutes,
            "phase_started_at": s.phase_started_at,
            "paused_at": s.paused_at,
            "paused_from": s.paused_from.value if s.paused_from else None,
            "last_active_at": self.last_active_at,
            "session_count": self.session_count,
            "total_work_seconds": self.total_work_seconds,
        })

    @classmethod
    def from_json(cls, raw: str) -> PersistedRecord:
        """Parse and validate a stored document.

        Raises ``CorruptRecordError`` on anything that does not describe
        a legal timer state.
        """
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise CorruptRecordError(f"not JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise CorruptRecordError("record is not an object")

        missing = [k for k in _REQUIRED_KEYS if k not in data]
        if missing:
            raise CorruptRecordError(f"missing keys: {', '.join(missing)}")

        phase = _phase(data["phase"], "phase")
        session_minutes = _int_in(data["session_duration_minutes"],
                                  "session_duration_minutes", *SESSION_MINUTES_RANGE)
        rest_minutes = _int_in(data["rest_duration_minutes"],
                               "rest_duration_minutes", *REST_MINUTES_RANGE)
        remaining = _int_in(data["remaining_seconds"], "remaining_seconds", 0)
        last_active_at = _timestamp(data["last_active_at"], "last_active_at")
        session_count = _int_in(data["session_count"], "session_count", 0)
        total_work = _int_in(data["total_work_seconds"], "total_work_seconds", 0)
        started_at = _optional_timestamp(data.get("phase_started_at"), "phase_started_at")
        paused_at = _optional_timestamp(data.get("paused_at"), "paused_at")

        durations = {
            Phase.WORKING: session_minutes * 60,
            Phase.RESTING: rest_minutes * 60,
        }
        paused_from = None
        if phase == Phase.PAUSED:
            paused_from = _phase(data.get("paused_from"), "paused_from")
            if paused_from not in RUNNING_PHASES:
                raise CorruptRecordError("paused record must come from working or resting")
            if paused_at is None:
                paused_at = last_active_at
            started_at = None
        elif phase in RUNNING_PHASES:
            if started_at is None:
                started_at = last_active_at
            paused_at = None
        else:
            remaining = 0
            started_at = paused_at = None

        measured = paused_from or phase
        if measured in durations and remaining > durations[measured]:
            raise CorruptRecordError(
                f"remaining_seconds {remaining} exceeds the {measured.value} duration"
            )

        state = EngineState(
            phase=phase,
            remaining_seconds=remaining,
            session_duration_minutes=session_minutes,
            rest_duration_minutes=rest_minutes,
            phase_started_at=started_at,
            paused_at=paused_at,
            paused_from=paused_from,
        )
        return cls(state, last_active_at, session_count, total_work)


# ── field validators ──────────────────────────────────────────────────────


def _phase(value: Any, name: str) -> Phase:
    try:
        return Phase(value)
    except ValueError:
        raise CorruptRecordError(f"{name} has unknown tag {value!r}") from None


def _int_in(value: Any, name: str, low: int, high: int | None = None) -> int:
    # bool is an int subclass but never a valid count
    if type(value) is not int:
        raise CorruptRecordError(f"{name} is not an integer: {value!r}")
    if value < low or (high is not None and value > high):
        raise CorruptRecordError(f"{name} out of range: {value}")
    return value


def _timestamp(value: Any, name: str) -> int:
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise CorruptRecordError(f"{name} is not a timestamp: {value!r}") from None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return int(parsed.timestamp())
    return _int_in(value, name, 0)


def _optional_timestamp(value: Any, name: str) -> int | None:
    return None if value is None else _timestamp(value, name)


# ── reconciliation ────────────────────────────────────────────────────────


def reconcile(record: PersistedRecord, now: int) -> EngineState:
    """Map a stale record to the state that would be current at *now*.

    IDLE and PAUSED records are returned as they are; a paused clock does
    not run while the host is closed.
    """
    state = record.state
    if state.phase not in RUNNING_PHASES:
        return state

    elapsed = max(0, now - record.last_active_at)
    adjusted = max(0, state.remaining_seconds - elapsed)
    if adjusted > 0:
        return replace(state, remaining_seconds=adjusted)

    if state.phase == Phase.WORKING:
        overflow = elapsed - state.remaining_seconds
        if overflow < state.rest_duration_seconds:
            return state.with_phase(
                Phase.RESTING,
                state.rest_duration_seconds - overflow,
                started_at=now - overflow,
            )
    return state.with_phase(Phase.IDLE)


# ── gateway ───────────────────────────────────────────────────────────────


class PersistenceGateway:
    """Saves and restores the timer through a ``KeyValueStore``.

    Storage errors propagate.  A record that fails validation is treated
    as absent and erased.
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store or KeyValueStore()
        self._clock = clock

    def save(
        self,
        state: EngineState,
        session_count: int = 0,
        total_work_seconds: int = 0,
    ) -> None:
        record = PersistedRecord(
            state=state,
            last_active_at=self._now(),
            session_count=max(0, int(session_count)),
            total_work_seconds=max(0, int(total_work_seconds)),
        )
        self._store.put(STATE_KEY, record.to_json())

    def load(self) -> EngineState | None:
        record = self._read_record(discard_corrupt=True)
        if record is None:
            return None
        restored = reconcile(record, self._now())
        if restored.phase != record.state.phase:
            logger.info(
                "%s expired while closed; now %s",
                record.state.phase.value, restored.phase.value,
            )
        return restored

    def clear(self) -> None:
        self._store.delete(STATE_KEY)

    def get_statistics(self) -> Statistics:
        record = self._read_record()
        return record.statistics if record is not None else Statistics()

    def update_statistics(self, session_count: int, total_work_seconds: int) -> None:
        """Replace the counters, leaving the timer fields alone."""
        record = self._read_record()
        if record is None:
            return
        record = replace(
            record,
            session_count=max(0, int(session_count)),
            total_work_seconds=max(0, int(total_work_seconds)),
        )
        self._store.put(STATE_KEY, record.to_json())

    # ── internal ──────────────────────────────────────────────────────

    def _now(self) -> int:
        return int(self._clock())

    def _read_record(self, *, discard_corrupt: bool = False) -> PersistedRecord | None:
        raw = self._store.get(STATE_KEY)
        if raw is None:
            return None
        try:
            return PersistedRecord.from_json(raw)
        except CorruptRecordError as exc:
            if discard_corrupt:
                logger.warning("Discarding corrupt timer state: %s", exc)
                self.clear()
            else:
                logger.debug("Ignoring corrupt timer state: %s", exc)
            return None
