"""Engine settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/SmartRest/settings.json

Usage::

    settings = load_settings()
    settings.sound_volume = 50
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path


logger = logging.getLogger(__name__)

# Reuse the app-support directory from db.py
APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "SmartRest"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """Deployment-level knobs.  Per-user choices live in the preference store."""

    # ── storage ───────────────────────────────────────────────────────
    database_url: str | None = None        # None → sqlite file in APP_SUPPORT_DIR

    # ── countdown ─────────────────────────────────────────────────────
    low_time_threshold: int = 10           # seconds; low-time cue at or below
    history_window: int = 20               # past intervals feeding the baseline

    # ── feedback ──────────────────────────────────────────────────────
    sound_cues_enabled: bool = True
    sound_volume: int = 70                 # 0-100

    # ── diagnostics ───────────────────────────────────────────────────
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    try:
        if SETTINGS_PATH.exists():
            data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered)
    except (OSError, ValueError, TypeError):
        logger.warning("Unreadable settings at %s, using defaults", SETTINGS_PATH)
    return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
