"""Shared test helpers for SmartRest."""

from smartrest.analytics.reporter import AnalyticsSink
from smartrest.preferences.gateway import PreferenceStore
from smartrest.suggestions.context import WorkoutContext
from smartrest.timer.clock import Clock


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


class ManualClock(Clock):
    """Virtual time.  ``advance`` ticks once per second; ``elapse`` doesn't."""

    def __init__(self, start: float = 1000.0):
        self._now = start
        self._callback = None
        self.subscriptions = 0

    def now(self) -> float:
        return self._now

    def subscribe(self, callback) -> None:
        self._callback = callback
        self.subscriptions += 1

    def cancel(self) -> None:
        self._callback = None

    @property
    def active(self) -> bool:
        return self._callback is not None

    def advance(self, seconds: int = 1) -> None:
        for _ in range(seconds):
            self._now += 1.0
            if self._callback is not None:
                self._callback()

    def elapse(self, seconds: float) -> None:
        self._now += seconds


def run_now(fn) -> None:
    """``defer`` replacement: run the deferred write inline."""
    fn()


class RecordingAnalyticsSink(AnalyticsSink):
    def __init__(self):
        self.records = []

    def write(self, record) -> None:
        self.records.append(record)


class FailingAnalyticsSink(AnalyticsSink):
    def write(self, record) -> None:
        raise ConnectionError("analytics backend unreachable")


class MemoryPreferenceStore(PreferenceStore):
    def __init__(self, rows=None):
        self.rows = dict(rows or {})
        self.writes = []

    def fetch(self, user_id):
        return self.rows.get(user_id)

    def upsert(self, user_id, values):
        self.writes.append((user_id, dict(values)))
        self.rows[user_id] = dict(values)


class FailingPreferenceStore(PreferenceStore):
    def fetch(self, user_id):
        raise ConnectionError("preference store unreachable")

    def upsert(self, user_id, values):
        raise ConnectionError("preference store unreachable")


def make_context(**overrides) -> WorkoutContext:
    values = dict(
        exercise_name="Bench Press",
        exercise_type="strength",
        set_number=1,
        total_sets=3,
        workout_progress=0.2,
        is_compound_movement=False,
        exercise_intensity=5,
    )
    values.update(overrides)
    return WorkoutContext(**values)
