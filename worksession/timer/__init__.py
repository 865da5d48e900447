"""Timer package."""

from .engine import (
    TimerEngine,
    EngineState,
    Phase,
    RUNNING_PHASES,
    DEFAULT_SESSION_MINUTES,
    DEFAULT_REST_MINUTES,
    SESSION_MINUTES_RANGE,
    REST_MINUTES_RANGE,
    format_time,
)
from .scheduler import QtTickScheduler, TickHandle, TickScheduler

__all__ = [
    "TimerEngine",
    "EngineState",
    "Phase",
    "RUNNING_PHASES",
    "DEFAULT_SESSION_MINUTES",
    "DEFAULT_REST_MINUTES",
    "SESSION_MINUTES_RANGE",
    "REST_MINUTES_RANGE",
    "format_time",
    "QtTickScheduler",
    "TickHandle",
    "TickScheduler",
]
