"""SQLAlchemy ORM models for SmartRest."""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Float
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class RestPreferenceRecord(Base):
    """One row of rest-timer preferences per user."""

    __tablename__ = "user_workout_preferences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, unique=True)
    default_rest_time = Column(Integer, nullable=True)
    adaptive_rest_enabled = Column(Boolean, nullable=True)
    auto_start_rest = Column(Boolean, nullable=True)
    gesture_controls_enabled = Column(Boolean, nullable=True)
    rest_notifications_enabled = Column(Boolean, nullable=True)
    fatigue_adjustment_enabled = Column(Boolean, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return (
            f"<RestPreferenceRecord user={self.user_id} "
            f"default={self.default_rest_time}s>"
        )


class RestAnalyticsRecord(Base):
    """How one rest interval was actually used (completed or skipped)."""

    __tablename__ = "rest_time_analytics"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    workout_id = Column(String(64), nullable=False)
    exercise_name = Column(String(255), nullable=False)
    exercise_type = Column(String(64), nullable=False, default="")
    set_number = Column(Integer, nullable=False, default=1)
    suggested_rest_time = Column(Integer, nullable=False)
    actual_rest_time = Column(Integer, nullable=False)
    was_skipped = Column(Boolean, nullable=False, default=False)
    was_extended = Column(Boolean, nullable=False, default=False)
    performance_after_rest = Column(Float, nullable=True)  # 1-10 rating
    workout_progress = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return (
            f"<RestAnalyticsRecord exercise={self.exercise_name} "
            f"actual={self.actual_rest_time}s skipped={self.was_skipped}>"
        )
