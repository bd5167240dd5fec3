"""Audible cues for rest-timer events, synthesised with numpy.

Desktop machines have no haptic engine, so this sink stands in for one:
each feedback tag maps to a short tone played through ``QSoundEffect``.
WAV files are generated once and cached on disk.

Cue names match the timer's feedback tags
-----------------------------------------
- ``start``          — two rising notes
- ``low-time-tick``  — short tick, once per second near the end
- ``stop``           — two falling notes
- ``complete``       — bright four-note arpeggio
- ``skip``           — quick falling pair
- ``adjust``         — subtle click
- ``reset``          — soft single bell
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path
from typing import Callable

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from .haptics import FeedbackSink


logger = logging.getLogger(__name__)

# ── paths ────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "SmartRest"
SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

CUE_NAMES = (
    "start",
    "low-time-tick",
    "stop",
    "complete",
    "skip",
    "adjust",
    "reset",
)

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _envelope(length: int, attack: int, release: int, sustain: float = 0.6) -> np.ndarray:
    """Attack / flat sustain / release envelope, durations in samples."""
    env = np.full(length, sustain, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, sustain, a)
    r = min(release, length - a)
    if r > 0:
        env[length - r:] = np.linspace(sustain, 0.0, r)
    return env


def _tone(freq: float, seconds: float, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(int(SAMPLE_RATE * seconds)) / SAMPLE_RATE
    return amplitude * np.sin(2 * np.pi * freq * t)


def _silence(seconds: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * seconds))


def _notes(freqs: list[float], note_s: float, gap_s: float, amplitude: float = 0.5) -> np.ndarray:
    """Play *freqs* one after another with short gaps."""
    parts: list[np.ndarray] = []
    for freq in freqs:
        tone = _tone(freq, note_s, amplitude)
        parts.append(tone * _envelope(len(tone), attack=80, release=len(tone) // 2))
        parts.append(_silence(gap_s))
    return np.concatenate(parts)


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Mono 16-bit PCM WAV from floats in -1..1."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(pcm.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  CUE GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_start() -> bytes:
    return _to_wav_bytes(_notes([587.33, 880.00], 0.10, 0.03))  # D5, A5


def _generate_low_time_tick() -> bytes:
    tick = _tone(1000.0, 0.03, 0.3)
    tick = tick * _envelope(len(tick), attack=30, release=len(tick) - 30)
    # pad so QSoundEffect doesn't clip the tail
    return _to_wav_bytes(np.concatenate([tick, _silence(0.04)]))


def _generate_stop() -> bytes:
    return _to_wav_bytes(_notes([880.00, 587.33], 0.10, 0.03))  # A5, D5


def _generate_complete() -> bytes:
    arpeggio = _notes([523.25, 659.25, 783.99], 0.09, 0.02)
    final = _tone(1046.50, 0.35)  # C6, held
    final = final * _envelope(len(final), attack=80, release=int(SAMPLE_RATE * 0.25))
    return _to_wav_bytes(np.concatenate([arpeggio, final]))


def _generate_skip() -> bytes:
    return _to_wav_bytes(_notes([659.25, 440.00], 0.06, 0.01, amplitude=0.45))


def _generate_adjust() -> bytes:
    click = _tone(1400.0, 0.012, 0.2)
    return _to_wav_bytes(np.concatenate([click, _silence(0.03)]))


def _generate_reset() -> bytes:
    bell = _tone(440.0, 0.6, 0.35) + _tone(880.0, 0.6, 0.06)
    env = _envelope(
        len(bell),
        attack=int(SAMPLE_RATE * 0.05),
        release=int(SAMPLE_RATE * 0.45),
        sustain=0.3,
    )
    return _to_wav_bytes(bell * env)


_GENERATORS: dict[str, Callable[[], bytes]] = {
    "start": _generate_start,
    "low-time-tick": _generate_low_time_tick,
    "stop": _generate_stop,
    "complete": _generate_complete,
    "skip": _generate_skip,
    "adjust": _generate_adjust,
    "reset": _generate_reset,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SINK
# ═══════════════════════════════════════════════════════════════════════════


class SoundCueSink(QObject, FeedbackSink):
    """Feedback sink that plays a cue per timer event.

    Usage::

        sink = SoundCueSink(parent=self)
        sink.set_volume(70)
        sink.notify("complete")
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    @property
    def supported(self) -> bool:
        """False when disabled or when no cue could be loaded."""
        return self._enabled and bool(self._effects)

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    @property
    def volume(self) -> int:
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _deliver(self, tag: str) -> None:
        effect = self._effects.get(tag)
        if effect is not None:
            effect.play()

    def _ensure_wav_files(self) -> None:
        """Generate any missing WAV files to the cache directory."""
        try:
            self._sounds_dir.mkdir(parents=True, exist_ok=True)
            for name, gen_fn in _GENERATORS.items():
                path = self._sounds_dir / f"{name}.wav"
                if not path.exists():
                    path.write_bytes(gen_fn())
        except OSError:
            logger.warning("Cannot write sound cues to %s", self._sounds_dir, exc_info=True)

    def _load_effects(self) -> None:
        for name in CUE_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
