"""Shared test helpers for WorkSession."""

from sqlalchemy.exc import OperationalError

from worksession.timer.engine import TimerEngine

START_TIME = 1_760_000_000  # fixed "now" for the fake clock, epoch seconds


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Callable clock returning epoch seconds that only moves when told."""

    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ManualHandle:
    def __init__(self, interval_ms, callback):
        self.interval_ms = interval_ms
        self.callback = callback
        self.cancel_calls = 0

    @property
    def cancelled(self) -> bool:
        return self.cancel_calls > 0

    def cancel(self):
        self.cancel_calls += 1


class ManualScheduler:
    """Scheduler whose periodic callbacks only run when ``fire`` is called."""

    def __init__(self):
        self.handles: list[ManualHandle] = []

    def schedule(self, interval_ms, callback):
        handle = ManualHandle(interval_ms, callback)
        self.handles.append(handle)
        return handle

    @property
    def active(self) -> list[ManualHandle]:
        return [h for h in self.handles if not h.cancelled]

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            for handle in self.active:
                handle.callback()


class BrokenStore:
    """Key-value store whose every call fails like a locked database."""

    def _fail(self, *args):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    get = put = delete = _fail


class FakeSounds:
    """Stands in for SoundManager; records which cues were requested."""

    def __init__(self):
        self.played: list[str] = []
        self.enabled = True
        self.volume = 70

    def play_session_end(self):
        self.played.append("session_end")
        return True

    def play_rest_end(self):
        self.played.append("rest_end")
        return True

    def set_enabled(self, enabled):
        self.enabled = enabled

    def set_volume(self, level):
        self.volume = level


def tick_to_end(engine: TimerEngine) -> None:
    """Tick until the running phase completes."""
    for _ in range(engine.remaining):
        engine.tick()
