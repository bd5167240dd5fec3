"""One user's rest timing for one workout.

Wires the pieces together the way a workout screen uses them::

    session = RestSession("user-1", "workout-9")
    session.begin_interval(context)   # new set done → suggest, seed, maybe start
    session.timer.adjust(+15)
    session.timer.skip()              # → analytics record

An explicit ``initial_time`` (or :meth:`pin_initial_time`) pins the
countdown: later suggestions only refresh ``suggested_time`` for display.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, pyqtSignal

from .analytics.baseline import HistoricalBaseline
from .analytics.reporter import AnalyticsReporter
from .effects import EffectDispatcher
from .feedback.haptics import FeedbackSink
from .preferences.gateway import PreferenceGateway, UserRestPreferences
from .suggestions.context import WorkoutContext
from .suggestions.engine import RestSuggestion, Suggestion, SuggestionEngine
from .timer.clock import Clock
from .timer.engine import LOW_TIME_THRESHOLD, RestTimer, TimerMode


logger = logging.getLogger(__name__)


class RestSession(QObject):
    """Owns a :class:`RestTimer` plus everything that feeds or observes it.

    Signals
    -------
    suggestions_changed(suggestions: list[RestSuggestion])
        Emitted after every recalculation.
    """

    suggestions_changed = pyqtSignal(object)

    def __init__(
        self,
        user_id: str | None = None,
        workout_id: str | None = None,
        *,
        gateway: PreferenceGateway | None = None,
        engine: SuggestionEngine | None = None,
        reporter: AnalyticsReporter | None = None,
        sink: FeedbackSink | None = None,
        clock: Clock | None = None,
        initial_time: int | None = None,
        low_time_threshold: int = LOW_TIME_THRESHOLD,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self.user_id = user_id
        self.workout_id = workout_id

        self._gateway = gateway if gateway is not None else PreferenceGateway()
        self._engine = (
            engine if engine is not None else SuggestionEngine(HistoricalBaseline())
        )

        self.timer = RestTimer(
            self,
            clock=clock,
            initial_time=initial_time,
            low_time_threshold=low_time_threshold,
        )
        self._dispatcher = EffectDispatcher(
            self.timer,
            sink=sink,
            reporter=reporter if reporter is not None else AnalyticsReporter(),
            parent=self,
        )
        self._dispatcher.user_id = user_id
        self._dispatcher.workout_id = workout_id

        self._context: WorkoutContext | None = None
        self._suggestion: Suggestion | None = None
        self._pinned: int | None = None

        self._gateway.load(user_id)
        self._apply_preferences()

        if initial_time:
            self.pin_initial_time(initial_time)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def preferences(self) -> UserRestPreferences:
        return self._gateway.preferences

    @property
    def context(self) -> WorkoutContext | None:
        return self._context

    @property
    def suggestion(self) -> Suggestion | None:
        return self._suggestion

    @property
    def suggestions(self) -> list[RestSuggestion]:
        return list(self._suggestion.alternatives) if self._suggestion else []

    @property
    def is_pinned(self) -> bool:
        return self._pinned is not None

    # ══════════════════════════════════════════════════════════════════
    #  OPERATIONS
    # ══════════════════════════════════════════════════════════════════

    def update_context(self, context: WorkoutContext) -> Suggestion | None:
        """Recalculate for a new set.  Does not start the countdown."""
        self._context = context
        self._dispatcher.context = context
        if not context.exercise_name:
            return None

        suggestion = self._engine.suggest(self.user_id, context, self.preferences)
        self._suggestion = suggestion
        self.timer.apply_suggestion(suggestion.base_time, reseed=not self.is_pinned)
        self._apply_mode()

        logger.debug(
            "Rest for %s set %d/%d: %ds (%s)",
            context.exercise_name,
            context.set_number,
            context.total_sets,
            suggestion.base_time,
            "history" if suggestion.from_history else "default",
        )
        self.suggestions_changed.emit(self.suggestions)
        return suggestion

    def begin_interval(self, context: WorkoutContext) -> Suggestion | None:
        """A set was just finished: recalculate and auto-start if enabled."""
        suggestion = self.update_context(context)
        if suggestion is None and not self.is_pinned:
            return None
        if self.preferences.auto_start:
            if self.is_pinned and self.timer.is_completed:
                self.timer.start(self._pinned)
            else:
                self.timer.start()
        return suggestion

    def start_with(self, suggestion: RestSuggestion) -> None:
        """Start the countdown at one of the ranked alternatives."""
        self.timer.start(suggestion.time)

    def pin_initial_time(self, seconds: int) -> None:
        self._pinned = int(seconds)
        self.timer.pin(self._pinned)

    def unpin(self) -> None:
        """Hand the countdown back to the suggestions."""
        self._pinned = None
        if self._context is not None:
            self.update_context(self._context)
        else:
            self._apply_mode()

    def update_preferences(self, **changes) -> UserRestPreferences:
        prefs = self._gateway.save(self.user_id, **changes)
        self._apply_preferences()
        return prefs

    def set_performance_rating(self, rating: float) -> None:
        """Attach a 1-10 rating to the record of the interval in progress."""
        if not 1 <= rating <= 10:
            raise ValueError(f"rating must be 1-10, got {rating}")
        self._dispatcher.pending_rating = rating

    # ── internal ──────────────────────────────────────────────────────

    def _apply_preferences(self) -> None:
        self._dispatcher.notifications_enabled = (
            self.preferences.rest_notifications_enabled
        )
        self._apply_mode()

    def _apply_mode(self) -> None:
        if self.is_pinned:
            self.timer.mode = TimerMode.MANUAL
        elif self.preferences.adaptive_enabled:
            self.timer.mode = TimerMode.ADAPTIVE
        else:
            self.timer.mode = TimerMode.AUTO
