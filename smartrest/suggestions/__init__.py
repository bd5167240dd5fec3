"""Suggestions package."""

from .context import TimeOfDay, WorkoutContext
from .engine import (
    SuggestionEngine,
    Suggestion,
    RestSuggestion,
    compute_baseline,
    generate_suggestions,
    MIN_REST_SECONDS,
    MAX_SUGGESTIONS,
)

__all__ = [
    "TimeOfDay",
    "WorkoutContext",
    "SuggestionEngine",
    "Suggestion",
    "RestSuggestion",
    "compute_baseline",
    "generate_suggestions",
    "MIN_REST_SECONDS",
    "MAX_SUGGESTIONS",
]
