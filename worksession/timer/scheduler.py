"""Periodic callback scheduling for the timer engine.

The engine never talks to ``QTimer`` directly.  It asks a scheduler to
call it back every *interval_ms* and keeps the returned handle so it can
stop ticking later.  ``QtTickScheduler`` is the production implementation;
tests hand the engine a scheduler whose callbacks they fire by hand.
"""

from __future__ import annotations

from typing import Callable, Protocol

from PyQt6.QtCore import QObject, QTimer


class TickHandle(Protocol):
    def cancel(self) -> None:
        """Stop the periodic callback.  Safe to call more than once."""


class TickScheduler(Protocol):
    def schedule(self, interval_ms: int, callback: Callable[[], None]) -> TickHandle:
        """Call *callback* every *interval_ms* until the handle is cancelled."""


class _QtTickHandle:
    """Owns one repeating ``QTimer``."""

    def __init__(self, timer: QTimer) -> None:
        self._timer: QTimer | None = timer

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None


class QtTickScheduler(QObject):
    """Schedules repeating callbacks on the Qt event loop."""

    def schedule(
        self, interval_ms: int, callback: Callable[[], None]
    ) -> _QtTickHandle:
        timer = QTimer(self)
        timer.setInterval(interval_ms)
        timer.timeout.connect(callback)
        timer.start()
        return _QtTickHandle(timer)
