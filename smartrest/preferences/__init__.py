"""Preferences package."""

from .gateway import (
    PreferenceGateway,
    PreferenceStore,
    SqlPreferenceStore,
    UserRestPreferences,
    DEFAULT_REST_TIME,
)

__all__ = [
    "PreferenceGateway",
    "PreferenceStore",
    "SqlPreferenceStore",
    "UserRestPreferences",
    "DEFAULT_REST_TIME",
]
