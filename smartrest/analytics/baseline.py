"""Historical rest baseline: what this user actually rests for an exercise."""

from __future__ import annotations

from ..database.db import get_session
from ..database.models import RestAnalyticsRecord
from ..suggestions.context import WorkoutContext


DEFAULT_HISTORY_WINDOW = 20


class HistoricalBaseline:
    """Mean actual rest over the user's most recent completed intervals.

    Skipped intervals are left out: they say when the user gave up, not
    how long they needed.  Returns ``None`` without history so the engine
    falls back to the default rest time.
    """

    def __init__(self, window: int = DEFAULT_HISTORY_WINDOW) -> None:
        self._window = max(1, window)

    def __call__(self, user_id: str, context: WorkoutContext) -> float | None:
        with get_session() as db:
            rows = (
                db.query(RestAnalyticsRecord.actual_rest_time)
                .filter(
                    RestAnalyticsRecord.user_id == user_id,
                    RestAnalyticsRecord.exercise_name == context.exercise_name,
                    RestAnalyticsRecord.was_skipped.is_(False),
                )
                .order_by(RestAnalyticsRecord.created_at.desc(), RestAnalyticsRecord.id.desc())
                .limit(self._window)
                .all()
            )
        if not rows:
            return None
        return sum(r.actual_rest_time for r in rows) / len(rows)
