"""Rest-time suggestions for SmartRest.

Baseline
--------
The baseline is the primary estimate for the next rest interval.  A
historical signal (the user's own past rests for the exercise) wins when
one exists and adaptive rest is enabled; otherwise the user's default
rest time is used.  Nothing ever suggests less than ``MIN_REST_SECONDS``.

Alternatives
------------
Derived from the baseline, one candidate per rule:

    Quick recovery        0.75 x base   0.8 if intensity < 7 else 0.4
    Recommended           base          0.9
    Full recovery         1.25 x base   0.9 if intensity > 7 else 0.6
    Compound movement     max(120, base + 30)   0.85   (compound only)
    Final set             1.5 x base    0.7            (last set only)

Sorted by confidence (stable, so ties keep the order above) and cut to
``MAX_SUGGESTIONS``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..preferences.gateway import UserRestPreferences
from .context import WorkoutContext


logger = logging.getLogger(__name__)


# ── tuning constants ─────────────────────────────────────────────────────

MIN_REST_SECONDS = 15
MAX_SUGGESTIONS = 4
COMPOUND_FLOOR_SECONDS = 120
COMPOUND_BONUS_SECONDS = 30

BaselineSource = Callable[[str, WorkoutContext], Optional[float]]


@dataclass(frozen=True)
class RestSuggestion:
    time: int           # seconds
    reason: str
    icon: str           # symbolic, resolved by whatever renders it
    color: str
    confidence: float   # 0-1


@dataclass(frozen=True)
class Suggestion:
    """Result of one calculation: the base time plus ranked alternatives."""

    base_time: int
    alternatives: list[RestSuggestion] = field(default_factory=list)
    from_history: bool = False


def _round_half_up(value: float) -> int:
    """Round .5 away from zero (67.5 → 68), unlike ``round()``."""
    return int(math.floor(value + 0.5))


# ── pure rules ───────────────────────────────────────────────────────────


def compute_baseline(
    context: WorkoutContext,
    historical_baseline: float | None,
    preferences: UserRestPreferences,
) -> int:
    """Seconds of rest before alternatives are derived.  Always >= 15."""
    if (
        preferences.adaptive_enabled
        and historical_baseline is not None
        and historical_baseline > 0
    ):
        base = _round_half_up(historical_baseline)
    else:
        base = preferences.default_rest_time
    return max(MIN_REST_SECONDS, int(base))


def generate_suggestions(
    base_time: int, context: WorkoutContext
) -> list[RestSuggestion]:
    candidates = [
        RestSuggestion(
            time=_round_half_up(base_time * 0.75),
            reason="Quick recovery",
            icon="zap",
            color="green",
            confidence=0.8 if context.exercise_intensity < 7 else 0.4,
        ),
        RestSuggestion(
            time=base_time,
            reason="Recommended",
            icon="target",
            color="blue",
            confidence=0.9,
        ),
        RestSuggestion(
            time=_round_half_up(base_time * 1.25),
            reason="Full recovery",
            icon="clock",
            color="purple",
            confidence=0.9 if context.exercise_intensity > 7 else 0.6,
        ),
    ]

    if context.is_compound_movement:
        candidates.append(RestSuggestion(
            time=max(COMPOUND_FLOOR_SECONDS, base_time + COMPOUND_BONUS_SECONDS),
            reason="Compound movement",
            icon="dumbbell",
            color="amber",
            confidence=0.85,
        ))

    if context.is_final_set:
        candidates.append(RestSuggestion(
            time=_round_half_up(base_time * 1.5),
            reason="Final set - take your time",
            icon="award",
            color="red",
            confidence=0.7,
        ))

    ranked = sorted(candidates, key=lambda s: s.confidence, reverse=True)
    return ranked[:MAX_SUGGESTIONS]


# ── engine ───────────────────────────────────────────────────────────────


class SuggestionEngine:
    """Combines a historical baseline source with the pure rules above.

    ``baseline_source(user_id, context)`` returns seconds or ``None``.  A
    source that raises is treated as having no signal.
    """

    def __init__(self, baseline_source: BaselineSource | None = None) -> None:
        self._baseline_source = baseline_source

    def historical_baseline(
        self, user_id: str | None, context: WorkoutContext
    ) -> float | None:
        if self._baseline_source is None or not user_id:
            return None
        try:
            return self._baseline_source(user_id, context)
        except Exception:
            logger.warning(
                "Baseline lookup failed for %s, using default rest time",
                context.exercise_name,
                exc_info=True,
            )
            return None

    def suggest(
        self,
        user_id: str | None,
        context: WorkoutContext,
        preferences: UserRestPreferences,
    ) -> Suggestion:
        history = self.historical_baseline(user_id, context)
        base = compute_baseline(context, history, preferences)
        return Suggestion(
            base_time=base,
            alternatives=generate_suggestions(base, context),
            from_history=(
                preferences.adaptive_enabled
                and history is not None
                and history > 0
            ),
        )
