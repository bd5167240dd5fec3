"""Turns timer events into side effects.

The rest timer only describes what happened (:class:`TimerEvent`).  The
dispatcher decides what that means for the outside world: a feedback cue
for every event, an analytics record for every finished interval.  A
failing sink is logged and otherwise ignored; the timer never hears
about it.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject

from .analytics.reporter import AnalyticsReporter
from .feedback.haptics import FeedbackSink, NullFeedbackSink
from .suggestions.context import WorkoutContext
from .timer.engine import RestTimer, TimerEvent


logger = logging.getLogger(__name__)


class EffectDispatcher(QObject):
    """Listens to one :class:`RestTimer` and fans events out to the sinks.

    ``user_id``, ``workout_id`` and ``context`` describe the interval in
    progress and are kept current by the owning session.
    """

    def __init__(
        self,
        timer: RestTimer,
        *,
        sink: FeedbackSink | None = None,
        reporter: AnalyticsReporter | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._sink = sink if sink is not None else NullFeedbackSink()
        self._reporter = reporter

        self.user_id: str | None = None
        self.workout_id: str | None = None
        self.context: WorkoutContext | None = None
        self.notifications_enabled: bool = True
        self.pending_rating: float | None = None

        timer.event_emitted.connect(self.dispatch)

    def dispatch(self, event: TimerEvent) -> None:
        if self.notifications_enabled:
            self._notify(event.tag)
        if event.interval is not None:
            self._report(event)

    # ── internal ──────────────────────────────────────────────────────

    def _notify(self, tag: str) -> None:
        try:
            self._sink.notify(tag)
        except Exception:
            logger.warning("Feedback sink failed on %r", tag, exc_info=True)

    def _report(self, event: TimerEvent) -> None:
        if self._reporter is None or self.context is None:
            return
        interval = event.interval
        rating, self.pending_rating = self.pending_rating, None
        try:
            self._reporter.record(
                self.user_id,
                self.workout_id,
                self.context,
                suggested_time=interval.suggested_time,
                actual_time=interval.actual_time,
                was_skipped=interval.was_skipped,
                was_extended=interval.was_extended,
                performance_rating=rating,
            )
        except Exception:
            logger.exception("Could not queue rest analytics")
