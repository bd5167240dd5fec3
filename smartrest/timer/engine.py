"""Rest-timer state machine for SmartRest.

Phases
------
IDLE        Seeded with a duration, not counting.
RUNNING     Counting down, one tick per second.
COMPLETED   Countdown reached zero on its own.
SKIPPED     User ended the rest early.

Transitions
-----------
IDLE → RUNNING                         (start)
RUNNING → RUNNING                      (start again: countdown restarts)
RUNNING → IDLE                         (stop, reset)
RUNNING → COMPLETED                    (tick reaches 0)
Any → SKIPPED                          (skip)
Any → IDLE                             (reset)

There is no paused phase: ``stop`` returns to IDLE keeping the seconds
left, and the next ``start`` continues from there.

Side effects
------------
The timer performs no I/O.  Every feedback-worthy moment is published as
a :class:`TimerEvent` on ``event_emitted``; terminal events (``complete``
and ``skip``) carry a :class:`RestInterval` describing how the rest was
actually used.  ``stop`` deliberately carries no interval.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum

from PyQt6.QtCore import QObject, pyqtSignal

from .clock import Clock, QtClock


# ── enums ─────────────────────────────────────────────────────────────────


class TimerPhase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class TimerMode(Enum):
    AUTO = "auto"
    MANUAL = "manual"
    ADAPTIVE = "adaptive"


class FeedbackEvent(Enum):
    START = "start"
    LOW_TIME_TICK = "low-time-tick"
    STOP = "stop"
    COMPLETE = "complete"
    SKIP = "skip"
    ADJUST = "adjust"
    RESET = "reset"


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_REST_SECONDS = 90
MIN_ADJUSTED_SECONDS = 15
LOW_TIME_THRESHOLD = 10


# ── value types ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RestInterval:
    """How one rest interval actually went."""

    suggested_time: int
    actual_time: int
    was_skipped: bool
    was_extended: bool = False


@dataclass(frozen=True)
class TimerEvent:
    kind: FeedbackEvent
    remaining: int
    interval: RestInterval | None = None

    @property
    def tag(self) -> str:
        return self.kind.value


@dataclass
class TimerState:
    current_time: int
    suggested_time: int
    actual_start_time: int
    is_running: bool = False
    is_completed: bool = False
    mode: TimerMode = TimerMode.ADAPTIVE


# ── timer ─────────────────────────────────────────────────────────────────


class RestTimer(QObject):
    """Countdown between two sets, driven by a :class:`Clock`.

    Signals
    -------
    tick(remaining_seconds: int)
        Emitted on every countdown tick and after ``adjust``.
    phase_changed(new_phase: TimerPhase)
        Emitted on every phase transition.
    completed()
        Emitted once when the countdown reaches zero.
    event_emitted(event: TimerEvent)
        One descriptor per feedback-worthy moment, for the effect
        dispatcher.
    """

    tick = pyqtSignal(int)
    phase_changed = pyqtSignal(object)
    completed = pyqtSignal()
    event_emitted = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        clock: Clock | None = None,
        initial_time: int | None = None,
        low_time_threshold: int = LOW_TIME_THRESHOLD,
    ) -> None:
        super().__init__(parent)

        seed = initial_time or DEFAULT_REST_SECONDS
        self._clock: Clock = clock if clock is not None else QtClock(self)
        self._low_time_threshold = low_time_threshold

        self._state = TimerState(
            current_time=seed,
            suggested_time=seed,
            actual_start_time=seed,
        )
        self._phase: TimerPhase = TimerPhase.IDLE

        # ── per-interval accounting ───────────────────────────────────
        self._started_at: float | None = None
        self._extended: bool = False

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TimerState:
        """A copy of the current state; mutating it changes nothing."""
        return replace(self._state)

    @property
    def phase(self) -> TimerPhase:
        return self._phase

    @property
    def current_time(self) -> int:
        return self._state.current_time

    @property
    def suggested_time(self) -> int:
        return self._state.suggested_time

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def is_completed(self) -> bool:
        return self._state.is_completed

    @property
    def mode(self) -> TimerMode:
        return self._state.mode

    @mode.setter
    def mode(self, value: TimerMode) -> None:
        self._state.mode = value

    @property
    def percent_complete(self) -> float:
        """0.0 → 1.0 progress through the interval as started."""
        total = self._state.actual_start_time
        if total <= 0:
            return 0.0
        elapsed = total - self._state.current_time
        return max(0.0, min(1.0, elapsed / total))

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self, custom_time: int | None = None) -> None:
        """Start (or restart) the countdown.

        Without *custom_time* the countdown continues from
        ``current_time``, which is how a stopped timer resumes.
        """
        self._clock.cancel()

        seconds = self._state.current_time if custom_time is None else custom_time
        seconds = max(0, int(seconds))
        self._started_at = self._clock.now()
        self._extended = False

        self._state.current_time = seconds
        self._state.actual_start_time = seconds
        self._state.is_running = True
        self._state.is_completed = False
        self._set_phase(TimerPhase.RUNNING)
        self._emit(FeedbackEvent.START)

        self._clock.subscribe(self._on_tick)

    def stop(self) -> None:
        """Stop counting, keep the seconds left.  No analytics record."""
        self._clock.cancel()
        self._state.is_running = False
        if self._phase == TimerPhase.RUNNING:
            self._set_phase(TimerPhase.IDLE)
        self._emit(FeedbackEvent.STOP)

    def skip(self) -> None:
        """End the rest now and report it as skipped.

        On an interval that already ended only the ``skip`` tag goes out;
        the interval was reported when it finished.
        """
        self._clock.cancel()
        if self._state.is_completed:
            self._emit(FeedbackEvent.SKIP)
            return
        interval = self._finish(was_skipped=True)
        self._set_phase(TimerPhase.SKIPPED)
        self.tick.emit(0)
        self._emit(FeedbackEvent.SKIP, interval)

    def adjust(self, delta_seconds: int) -> None:
        """Add or remove time; never below ``MIN_ADJUSTED_SECONDS``.

        Does not start or stop the countdown.
        """
        self._state.current_time = max(
            MIN_ADJUSTED_SECONDS, self._state.current_time + int(delta_seconds)
        )
        if delta_seconds > 0 and self._state.is_running:
            self._extended = True
        self.tick.emit(self._state.current_time)
        self._emit(FeedbackEvent.ADJUST)

    def reset(self, new_time: int | None = None) -> None:
        """Back to IDLE with *new_time* (default: the suggested time)."""
        self._clock.cancel()
        seconds = self._state.suggested_time if new_time is None else int(new_time)
        self._clear(seconds, keep_start_time=True)
        self._set_phase(TimerPhase.IDLE)
        self._emit(FeedbackEvent.RESET)

    # ── seeding (driven by the session, not by the user) ──────────────

    def apply_suggestion(self, seconds: int, *, reseed: bool = True) -> None:
        """Take a freshly computed suggestion.

        With ``reseed`` the interval starts over from *seconds*; without
        it only ``suggested_time`` changes, leaving the countdown alone.
        """
        self._state.suggested_time = int(seconds)
        if not reseed:
            return
        self._clock.cancel()
        self._clear(int(seconds))
        self._set_phase(TimerPhase.IDLE)
        self.tick.emit(self._state.current_time)

    def pin(self, seconds: int) -> None:
        """Seed an explicit duration chosen by the user."""
        self._clock.cancel()
        self._state.suggested_time = int(seconds)
        self._clear(int(seconds))
        self._state.mode = TimerMode.MANUAL
        self._set_phase(TimerPhase.IDLE)
        self.tick.emit(self._state.current_time)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — timer mechanics
    # ══════════════════════════════════════════════════════════════════

    def _on_tick(self) -> None:
        if not self._state.is_running:
            return  # stale tick

        remaining = max(0, self._state.current_time - 1)
        self._state.current_time = remaining

        if remaining == 0:
            self._complete()
            return

        started_at = self._started_at
        self.tick.emit(remaining)
        # a tick slot may have skipped, stopped or restarted the timer
        if (
            remaining <= self._low_time_threshold
            and self._state.is_running
            and self._state.current_time == remaining
            and self._started_at == started_at
        ):
            self._emit(FeedbackEvent.LOW_TIME_TICK)

    def _complete(self) -> None:
        self._clock.cancel()
        interval = self._finish(was_skipped=False)
        self._set_phase(TimerPhase.COMPLETED)
        self.tick.emit(0)
        self._emit(FeedbackEvent.COMPLETE, interval)
        self.completed.emit()

    def _finish(self, *, was_skipped: bool) -> RestInterval:
        """Move state to its terminal values and describe the interval."""
        interval = RestInterval(
            suggested_time=self._state.suggested_time,
            actual_time=self._elapsed(),
            was_skipped=was_skipped,
            was_extended=self._extended,
        )
        self._state.current_time = 0
        self._state.is_running = False
        self._state.is_completed = True
        self._started_at = None
        self._extended = False
        return interval

    def _clear(self, seconds: int, *, keep_start_time: bool = False) -> None:
        self._state.current_time = seconds
        if not keep_start_time:
            self._state.actual_start_time = seconds
        self._state.is_running = False
        self._state.is_completed = False
        self._started_at = None
        self._extended = False

    def _elapsed(self) -> int:
        """Whole clock seconds since ``start`` (0 if never started)."""
        if self._started_at is None:
            return 0
        seconds = self._clock.now() - self._started_at
        return max(0, int(math.floor(seconds + 0.5)))

    def _set_phase(self, new_phase: TimerPhase) -> None:
        self._phase = new_phase
        self.phase_changed.emit(new_phase)

    def _emit(self, kind: FeedbackEvent, interval: RestInterval | None = None) -> None:
        self.event_emitted.emit(
            TimerEvent(kind=kind, remaining=self._state.current_time, interval=interval)
        )
