"""What the engine knows about the set that was just performed."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TimeOfDay(Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"

    @classmethod
    def for_hour(cls, hour: int) -> "TimeOfDay":
        if hour < 12:
            return cls.MORNING
        if hour < 17:
            return cls.AFTERNOON
        return cls.EVENING


@dataclass(frozen=True)
class WorkoutContext:
    """Immutable description of one rest interval's surroundings.

    Built by the caller on every set transition and treated as a value:
    the engine never mutates it.
    """

    exercise_name: str
    exercise_type: str = ""
    set_number: int = 1
    total_sets: int = 1
    workout_progress: float = 0.0          # 0-1
    is_compound_movement: bool = False
    exercise_intensity: int = 5            # 1-10
    time_of_day: TimeOfDay = TimeOfDay.AFTERNOON
    user_tends_to_skip: bool = False

    def __post_init__(self) -> None:
        if not 1 <= self.exercise_intensity <= 10:
            raise ValueError(
                f"exercise_intensity must be 1-10, got {self.exercise_intensity}"
            )
        if not 0.0 <= self.workout_progress <= 1.0:
            raise ValueError(
                f"workout_progress must be 0-1, got {self.workout_progress}"
            )
        if self.set_number < 1 or self.total_sets < 1:
            raise ValueError("set_number and total_sets start at 1")

    @property
    def is_final_set(self) -> bool:
        return self.set_number == self.total_sets
