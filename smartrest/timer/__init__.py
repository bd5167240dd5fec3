"""Timer package."""

from .clock import Clock, QtClock, defer_to_event_loop, TICK_INTERVAL_MS
from .engine import (
    RestTimer,
    TimerState,
    TimerPhase,
    TimerMode,
    TimerEvent,
    FeedbackEvent,
    RestInterval,
    DEFAULT_REST_SECONDS,
    MIN_ADJUSTED_SECONDS,
    LOW_TIME_THRESHOLD,
)

__all__ = [
    "Clock",
    "QtClock",
    "defer_to_event_loop",
    "TICK_INTERVAL_MS",
    "RestTimer",
    "TimerState",
    "TimerPhase",
    "TimerMode",
    "TimerEvent",
    "FeedbackEvent",
    "RestInterval",
    "DEFAULT_REST_SECONDS",
    "MIN_ADJUSTED_SECONDS",
    "LOW_TIME_THRESHOLD",
]
