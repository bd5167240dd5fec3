"""Records how each rest interval was actually used.

One record per terminal transition (natural completion or skip).  Writes
are best-effort: deferred off the countdown path, never retried, and a
failing sink only produces a log line.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Callable

from ..database.db import get_session
from ..database.models import RestAnalyticsRecord
from ..suggestions.context import WorkoutContext
from ..timer.clock import defer_to_event_loop


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RestRecord:
    user_id: str
    workout_id: str
    exercise_name: str
    exercise_type: str
    set_number: int
    suggested_time: int
    actual_time: int
    was_skipped: bool
    was_extended: bool
    performance_rating: float | None
    workout_progress: float

    def as_dict(self) -> dict:
        """Keyed by the analytics store's column names."""
        data = asdict(self)
        data["suggested_rest_time"] = data.pop("suggested_time")
        data["actual_rest_time"] = data.pop("actual_time")
        data["performance_after_rest"] = data.pop("performance_rating")
        return data


class AnalyticsSink:
    def write(self, record: RestRecord) -> None:
        raise NotImplementedError


class SqlAnalyticsSink(AnalyticsSink):
    """Appends to ``rest_time_analytics``."""

    def write(self, record: RestRecord) -> None:
        with get_session() as db:
            db.add(RestAnalyticsRecord(**record.as_dict()))


class AnalyticsReporter:
    """Turns a finished interval into a :class:`RestRecord` for the sink."""

    def __init__(
        self,
        sink: AnalyticsSink | None = None,
        *,
        defer: Callable[[Callable[[], None]], None] = defer_to_event_loop,
    ) -> None:
        self._sink = sink if sink is not None else SqlAnalyticsSink()
        self._defer = defer

    def record(
        self,
        user_id: str | None,
        workout_id: str | None,
        context: WorkoutContext,
        suggested_time: int,
        actual_time: int,
        was_skipped: bool,
        was_extended: bool,
        performance_rating: float | None = None,
    ) -> RestRecord | None:
        """Queue one record.  Returns it, or ``None`` when ids are missing."""
        if not user_id or not workout_id:
            return None

        record = RestRecord(
            user_id=user_id,
            workout_id=workout_id,
            exercise_name=context.exercise_name,
            exercise_type=context.exercise_type,
            set_number=context.set_number,
            suggested_time=suggested_time,
            actual_time=actual_time,
            was_skipped=was_skipped,
            was_extended=was_extended,
            performance_rating=performance_rating,
            workout_progress=context.workout_progress,
        )
        self._defer(lambda: self._write(record))
        return record

    def _write(self, record: RestRecord) -> None:
        try:
            self._sink.write(record)
        except Exception:
            logger.warning(
                "Dropping rest analytics for %s set %d",
                record.exercise_name,
                record.set_number,
                exc_info=True,
            )
