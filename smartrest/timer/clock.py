"""Time source and the single repeating tick behind every countdown."""

from __future__ import annotations

import time
from typing import Callable

from PyQt6.QtCore import QObject, QTimer


TICK_INTERVAL_MS = 1000


class Clock:
    """Interface the rest timer needs from a time source.

    ``subscribe`` replaces any previous subscription: a clock drives at
    most one callback.  ``cancel`` is synchronous, so once it returns the
    callback will not fire again.
    """

    def now(self) -> float:
        raise NotImplementedError

    def subscribe(self, callback: Callable[[], None]) -> None:
        raise NotImplementedError

    def cancel(self) -> None:
        raise NotImplementedError

    @property
    def active(self) -> bool:
        raise NotImplementedError


class QtClock(QObject, Clock):
    """``QTimer`` ticks on the Qt event loop, ``time.monotonic`` for now()."""

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        interval_ms: int = TICK_INTERVAL_MS,
        time_fn: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(parent)
        self._time_fn = time_fn
        self._callback: Callable[[], None] | None = None

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(interval_ms)
        self._qt_timer.timeout.connect(self._fire)

    def now(self) -> float:
        return self._time_fn()

    def subscribe(self, callback: Callable[[], None]) -> None:
        self._qt_timer.stop()
        self._callback = callback
        self._qt_timer.start()  # a fresh full interval before the first tick

    def cancel(self) -> None:
        self._qt_timer.stop()
        self._callback = None

    @property
    def active(self) -> bool:
        return self._qt_timer.isActive()

    def _fire(self) -> None:
        if self._callback is not None:
            self._callback()


def defer_to_event_loop(fn: Callable[[], None]) -> None:
    """Run *fn* on the next event-loop pass instead of inline."""
    QTimer.singleShot(0, fn)
