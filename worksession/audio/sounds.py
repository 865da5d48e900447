"""Completion cues: numpy synthesis + QSoundEffect playback.

Both cues are generated as WAV files with sine-wave synthesis and ADSR
envelopes, then cached to disk so later launches skip the synthesis.

Sound names
-----------
- ``session_end``: bright ascending arpeggio, a work session finished
- ``rest_end``: soft two-note bell, the rest period is over

Playback problems never leave this module.  The timer keeps running and
the status display still shows the completion message.
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

from ..paths import app_data_dir

logger = logging.getLogger(__name__)

SOUND_NAMES = ("session_end", "rest_end")

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _make_envelope(
    length: int,
    attack: int = 200,
    decay: int = 400,
    sustain_level: float = 0.7,
    release: int = 800,
) -> np.ndarray:
    """ADSR envelope (all durations in samples)."""
    env = np.ones(length, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    d_end = min(a + decay, length)
    if decay > 0 and d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    s_end = max(length - release, d_end)
    if s_end > d_end:
        env[d_end:s_end] = sustain_level
    if release > 0 and s_end < length:
        env[s_end:] = np.linspace(sustain_level, 0.0, length - s_end)
    return env


def _sine(freq: float, duration_s: float) -> np.ndarray:
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _silence(duration_s: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * duration_s))


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 array (-1..1) to mono 16-bit PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_session_end() -> bytes:
    """C5→E5→G5→C6, last note held."""
    notes = [523.25, 659.25, 783.99, 1046.50]
    parts: list[np.ndarray] = []
    for i, freq in enumerate(notes):
        if i == len(notes) - 1:
            tone = _sine(freq, 0.35) * 0.5
            env = _make_envelope(len(tone), attack=80, decay=300, sustain_level=0.5, release=600)
            parts.append(tone * env)
        else:
            tone = _sine(freq, 0.10) * 0.5
            env = _make_envelope(len(tone), attack=60, decay=150, sustain_level=0.3, release=200)
            parts.append(tone * env)
            parts.append(_silence(0.02))
    return _to_wav_bytes(np.concatenate(parts))


def _generate_rest_end() -> bytes:
    """Two bell strikes, A4 then E5, with a soft overtone."""
    parts: list[np.ndarray] = []
    for freq in (440.0, 659.25):
        tone = _sine(freq, 0.45) * 0.35 + _sine(freq * 2, 0.45) * 0.08
        env = _make_envelope(
            len(tone),
            attack=int(SAMPLE_RATE * 0.02),
            decay=int(SAMPLE_RATE * 0.15),
            sustain_level=0.25,
            release=int(SAMPLE_RATE * 0.25),
        )
        parts.append(tone * env)
        parts.append(_silence(0.06))
    return _to_wav_bytes(np.concatenate(parts))


_GENERATORS: dict[str, Callable[[], bytes]] = {
    "session_end": _generate_session_end,
    "rest_end": _generate_rest_end,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Synthesises, caches and plays the completion cues.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(70)
        mgr.play_session_end()
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
        enabled: bool = True,
    ) -> None:
        super().__init__(parent)
        self._enabled = enabled
        self._volume = 0.7  # 0.0–1.0
        self._sounds_dir = sounds_dir or app_data_dir() / "sounds"
        self._effects: dict[str, QSoundEffect] = {}

        try:
            self._ensure_wav_files()
            self._load_effects()
        except OSError as exc:
            logger.warning("Audio cues unavailable, falling back to visual only: %s", exc)

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play_session_end(self) -> bool:
        return self.play("session_end")

    def play_rest_end(self) -> bool:
        return self.play("rest_end")

    def play(self, name: str) -> bool:
        """Play a cue by name.  Returns whether playback was started.

        Disabled audio, unknown names and playback errors all return
        False; nothing is raised.
        """
        if not self._enabled:
            return False
        effect = self._effects.get(name)
        if effect is None:
            logger.debug("No audio cue loaded for %r", name)
            return False
        try:
            if effect.status() == QSoundEffect.Status.Error:
                logger.warning("Audio cue %r failed to load", name)
                return False
            effect.play()
        except Exception:
            logger.warning("Failed to play %r", name, exc_info=True)
            return False
        return True

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def available(self) -> bool:
        """True when every cue has a loaded effect."""
        return all(name in self._effects for name in SOUND_NAMES)

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        """Generate any missing WAV files to the cache directory."""
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        for name, gen_fn in _GENERATORS.items():
            path = self._sounds_dir / f"{name}.wav"
            if not path.exists():
                path.write_bytes(gen_fn())

    def _load_effects(self) -> None:
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
