"""Rest-time analytics over recorded intervals.

Metrics
-------
- average / "optimal" rest   optimal is average x 1.1, a rough nudge upward
- skip rate                  skipped intervals / all intervals
- rest consistency           1 - (std / mean), clamped to 0..1
- per-exercise breakdown     average actual vs. average suggested rest
- daily trends               last 14 days with data, oldest first
- performance correlation    Pearson r between rest time and the
                             performance rating given after the rest

Insights
--------
- inconsistent rest          consistency below 0.7
- high skip rate             more than 20% of rests skipped
- rest helps performance     correlation above 0.3
- short rest periods         average rest under a minute

Rows without a performance rating (``None`` or 0) are left out of the
performance figures only.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable

import numpy as np

from ..database.db import get_session
from ..database.models import RestAnalyticsRecord


TIME_RANGES: dict[str, int | None] = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
    "all": None,
}

EMPTY_AVERAGE_REST = 90
OPTIMAL_FACTOR = 1.1
TREND_DAYS = 14

# Insight thresholds
CONSISTENCY_FLOOR = 0.7
SKIP_RATE_CEILING = 0.2
CORRELATION_FLOOR = 0.3
SHORT_REST_SECONDS = 60


@dataclass
class ExerciseBreakdown:
    exercise_name: str
    average_rest: int
    optimal_rest: int          # average suggested rest
    performance: float         # mean rating, 0 when unrated
    sessions: int


@dataclass
class DailyTrend:
    day: date
    average_rest: float
    performance: float


@dataclass
class RestSummary:
    average_rest_time: int = EMPTY_AVERAGE_REST
    optimal_rest_time: int = EMPTY_AVERAGE_REST
    rest_consistency: float = 0.0
    performance_correlation: float = 0.0
    skip_rate: float = 0.0
    total_sessions: int = 0
    exercise_breakdown: list[ExerciseBreakdown] = field(default_factory=list)
    daily_trends: list[DailyTrend] = field(default_factory=list)


@dataclass(frozen=True)
class Insight:
    kind: str                  # inconsistent | skipping | performance | short-rest
    title: str
    description: str


def format_duration(seconds: int) -> str:
    """``45s``, ``2m``, ``1m 30s``."""
    minutes, secs = divmod(int(seconds), 60)
    if minutes == 0:
        return f"{secs}s"
    if secs == 0:
        return f"{minutes}m"
    return f"{minutes}m {secs}s"


def _round(value: float) -> int:
    return int(np.floor(value + 0.5))


def _rated(value) -> bool:
    return bool(value)


def load_records(
    user_id: str,
    time_range: str = "30d",
    exercise: str | None = None,
    *,
    now: datetime | None = None,
) -> list[RestAnalyticsRecord]:
    """Fetch the user's analytics rows for one of ``TIME_RANGES``."""
    if time_range not in TIME_RANGES:
        raise ValueError(
            f"time_range must be one of {', '.join(TIME_RANGES)}, got {time_range!r}"
        )
    days = TIME_RANGES[time_range]

    with get_session() as db:
        query = db.query(RestAnalyticsRecord).filter(
            RestAnalyticsRecord.user_id == user_id
        )
        if exercise:
            query = query.filter(RestAnalyticsRecord.exercise_name == exercise)
        if days is not None:
            cutoff = (now or datetime.utcnow()) - timedelta(days=days)
            query = query.filter(RestAnalyticsRecord.created_at > cutoff)
        return query.order_by(RestAnalyticsRecord.created_at).all()


def summarize(records: Iterable[RestAnalyticsRecord]) -> RestSummary:
    rows = list(records)
    if not rows:
        return RestSummary()

    rest = np.array([r.actual_rest_time for r in rows], dtype=np.float64)
    skipped = np.array([bool(r.was_skipped) for r in rows])
    mean_rest = float(rest.mean())

    if mean_rest > 0:
        consistency = 1.0 - float(rest.std()) / mean_rest
    else:
        consistency = 0.0

    return RestSummary(
        average_rest_time=_round(mean_rest),
        optimal_rest_time=_round(mean_rest * OPTIMAL_FACTOR),
        rest_consistency=max(0.0, min(1.0, consistency)),
        performance_correlation=_performance_correlation(rows),
        skip_rate=float(skipped.mean()),
        total_sessions=len(rows),
        exercise_breakdown=_exercise_breakdown(rows),
        daily_trends=_daily_trends(rows),
    )


def _exercise_breakdown(rows: list[RestAnalyticsRecord]) -> list[ExerciseBreakdown]:
    groups: dict[str, list[RestAnalyticsRecord]] = defaultdict(list)
    for row in rows:
        groups[row.exercise_name].append(row)

    breakdown = []
    for name, items in groups.items():
        ratings = [r.performance_after_rest for r in items if _rated(r.performance_after_rest)]
        breakdown.append(ExerciseBreakdown(
            exercise_name=name,
            average_rest=_round(np.mean([r.actual_rest_time for r in items])),
            optimal_rest=_round(np.mean([r.suggested_rest_time for r in items])),
            performance=float(np.mean(ratings)) if ratings else 0.0,
            sessions=len(items),
        ))
    return breakdown


def _daily_trends(rows: list[RestAnalyticsRecord]) -> list[DailyTrend]:
    rest_by_day: dict[date, list[float]] = defaultdict(list)
    perf_by_day: dict[date, list[float]] = defaultdict(list)
    for row in rows:
        day = row.created_at.date()
        rest_by_day[day].append(row.actual_rest_time)
        if _rated(row.performance_after_rest):
            perf_by_day[day].append(row.performance_after_rest)

    trends = [
        DailyTrend(
            day=day,
            average_rest=float(np.mean(times)),
            performance=float(np.mean(perf_by_day[day])) if perf_by_day[day] else 0.0,
        )
        for day, times in sorted(rest_by_day.items())
    ]
    return trends[-TREND_DAYS:]


def _performance_correlation(rows: list[RestAnalyticsRecord]) -> float:
    rated = [r for r in rows if _rated(r.performance_after_rest)]
    if len(rated) < 2:
        return 0.0

    rest = np.array([r.actual_rest_time for r in rated], dtype=np.float64)
    perf = np.array([r.performance_after_rest for r in rated], dtype=np.float64)
    d_rest = rest - rest.mean()
    d_perf = perf - perf.mean()
    denominator = np.sqrt(np.sum(d_rest ** 2) * np.sum(d_perf ** 2))
    if denominator == 0:
        return 0.0
    return float(np.sum(d_rest * d_perf) / denominator)


def insights(summary: RestSummary) -> list[Insight]:
    """Recommendations drawn from a summary, in a fixed order.

    A summary with no sessions yields none.
    """
    if not summary.total_sessions:
        return []

    found = []
    if summary.rest_consistency < CONSISTENCY_FLOOR:
        found.append(Insight(
            kind="inconsistent",
            title="Inconsistent Rest Times",
            description="Try to stick closer to your planned rest times "
                        "for better training consistency.",
        ))
    if summary.skip_rate > SKIP_RATE_CEILING:
        found.append(Insight(
            kind="skipping",
            title="High Skip Rate",
            description=f"You're skipping rest {_round(summary.skip_rate * 100)}% "
                        "of the time. Consider shorter default times.",
        ))
    if summary.performance_correlation > CORRELATION_FLOOR:
        found.append(Insight(
            kind="performance",
            title="Rest Time Helps Performance",
            description="Longer rest periods are positively correlated with "
                        "your performance. Keep it up!",
        ))
    if summary.average_rest_time < SHORT_REST_SECONDS:
        found.append(Insight(
            kind="short-rest",
            title="Short Rest Periods",
            description=f"Your average rest is "
                        f"{format_duration(summary.average_rest_time)}. "
                        "Consider longer rest for strength exercises.",
        ))
    return found
