"""Per-user rest-timer preferences.

The gateway keeps one in-memory ``UserRestPreferences`` per session and
talks to a ``PreferenceStore`` for persistence:

* ``load`` never raises.  Missing rows, unreadable rows and store
  failures all produce the defaults.
* ``save`` is optimistic.  The in-memory merge is visible immediately;
  the remote write is deferred, is not retried, and a failure never rolls
  the merge back (last writer wins).
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields, replace
from datetime import datetime
from typing import Callable

from ..database.db import get_session
from ..database.models import RestPreferenceRecord
from ..timer.clock import defer_to_event_loop


logger = logging.getLogger(__name__)

DEFAULT_REST_TIME = 90

# dataclass field → column in user_workout_preferences
_COLUMNS: dict[str, str] = {
    "default_rest_time": "default_rest_time",
    "adaptive_enabled": "adaptive_rest_enabled",
    "auto_start": "auto_start_rest",
    "gesture_controls_enabled": "gesture_controls_enabled",
    "rest_notifications_enabled": "rest_notifications_enabled",
    "fatigue_adjustment_enabled": "fatigue_adjustment_enabled",
}


@dataclass
class UserRestPreferences:
    default_rest_time: int = DEFAULT_REST_TIME   # seconds
    adaptive_enabled: bool = True
    auto_start: bool = True
    gesture_controls_enabled: bool = True
    rest_notifications_enabled: bool = True
    fatigue_adjustment_enabled: bool = True

    @classmethod
    def from_columns(cls, row: dict) -> "UserRestPreferences":
        """Build from stored column values; nulls keep the defaults."""
        values = {}
        for attr, column in _COLUMNS.items():
            value = row.get(column)
            if value is not None:
                values[attr] = value
        prefs = cls(**values)
        if not prefs.default_rest_time:
            prefs.default_rest_time = DEFAULT_REST_TIME
        return prefs

    def to_columns(self) -> dict:
        return {column: getattr(self, attr) for attr, column in _COLUMNS.items()}


# ── stores ───────────────────────────────────────────────────────────────


class PreferenceStore:
    """Where preferences live between sessions."""

    def fetch(self, user_id: str) -> dict | None:
        """Column values for *user_id*, or ``None`` when there is no row."""
        raise NotImplementedError

    def upsert(self, user_id: str, values: dict) -> None:
        raise NotImplementedError


class SqlPreferenceStore(PreferenceStore):
    """``user_workout_preferences`` table through the shared ORM session."""

    def fetch(self, user_id: str) -> dict | None:
        with get_session() as db:
            record = (
                db.query(RestPreferenceRecord)
                .filter_by(user_id=user_id)
                .first()
            )
            if record is None:
                return None
            return {column: getattr(record, column) for column in _COLUMNS.values()}

    def upsert(self, user_id: str, values: dict) -> None:
        with get_session() as db:
            record = (
                db.query(RestPreferenceRecord)
                .filter_by(user_id=user_id)
                .first()
            )
            if record is None:
                record = RestPreferenceRecord(user_id=user_id)
                db.add(record)
            for column, value in values.items():
                setattr(record, column, value)
            record.updated_at = datetime.utcnow()


# ── gateway ──────────────────────────────────────────────────────────────


class PreferenceGateway:
    """Loads and saves preferences, degrading to defaults on any failure.

    ``defer`` schedules the remote write; it defaults to the next pass of
    the Qt event loop so ``save`` returns without waiting on storage.
    """

    def __init__(
        self,
        store: PreferenceStore | None = None,
        *,
        defer: Callable[[Callable[[], None]], None] = defer_to_event_loop,
    ) -> None:
        self._store = store if store is not None else SqlPreferenceStore()
        self._defer = defer
        self._preferences = UserRestPreferences()

    @property
    def preferences(self) -> UserRestPreferences:
        return self._preferences

    def load(self, user_id: str | None) -> UserRestPreferences:
        if not user_id:
            self._preferences = UserRestPreferences()
            return self._preferences
        try:
            row = self._store.fetch(user_id)
        except Exception:
            logger.warning(
                "Could not load rest preferences for %s, using defaults",
                user_id,
                exc_info=True,
            )
            row = None
        self._preferences = (
            UserRestPreferences.from_columns(row) if row else UserRestPreferences()
        )
        return self._preferences

    def save(self, user_id: str | None, **changes) -> UserRestPreferences:
        """Merge *changes* now, write them out later."""
        valid = {f.name for f in fields(UserRestPreferences)}
        unknown = set(changes) - valid
        if unknown:
            raise TypeError(f"Unknown preference(s): {', '.join(sorted(unknown))}")

        # rebind rather than mutate so readers holding the old object stay consistent
        self._preferences = replace(self._preferences, **changes)
        if not user_id:
            return self._preferences

        snapshot = self._preferences.to_columns()
        self._defer(lambda: self._write(user_id, snapshot))
        return self._preferences

    def _write(self, user_id: str, values: dict) -> None:
        try:
            self._store.upsert(user_id, values)
        except Exception:
            logger.warning(
                "Saving rest preferences for %s failed; keeping local copy",
                user_id,
                exc_info=True,
            )

    def as_dict(self) -> dict:
        return asdict(self._preferences)
