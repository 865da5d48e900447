"""Tests for cue synthesis and the SoundManager playback API.

Covers:
- Each generator produces a valid mono 16-bit WAV
- WAV files are cached to the sounds directory
- Volume / enabled handling
- Playback failures are swallowed and reported as False
"""

from __future__ import annotations

import io
import wave

import pytest
from PyQt6.QtMultimedia import QSoundEffect

from worksession.audio.sounds import (
    SOUND_NAMES,
    SoundManager,
    _generate_rest_end,
    _generate_session_end,
    _make_envelope,
)


class StubEffect:
    """Minimal QSoundEffect stand-in with a controllable outcome."""

    def __init__(self, status=QSoundEffect.Status.Ready, fail=False):
        self._status = status
        self._fail = fail
        self.plays = 0
        self.volume = None

    def status(self):
        return self._status

    def play(self):
        if self._fail:
            raise RuntimeError("audio device went away")
        self.plays += 1

    def setVolume(self, volume):
        self.volume = volume


# ═══════════════════════════════════════════════════════════════════════
#  SYNTHESIS
# ═══════════════════════════════════════════════════════════════════════


class TestSoundGeneration:
    """Test that each generator produces valid WAV bytes."""

    @pytest.mark.parametrize("gen_fn", [_generate_session_end, _generate_rest_end])
    def test_wav_is_parseable(self, gen_fn):
        data = gen_fn()
        assert data[:4] == b"RIFF"
        with wave.open(io.BytesIO(data), "rb") as wf:
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == 44100
            assert wf.getnframes() > 0

    def test_envelope_shape(self):
        env = _make_envelope(1000, attack=100, decay=100, sustain_level=0.5, release=100)
        assert env[0] == 0.0
        assert env[99] == pytest.approx(1.0)
        assert env[500] == pytest.approx(0.5)
        assert env[-1] == pytest.approx(0.0)

    def test_envelope_shorter_than_attack(self):
        env = _make_envelope(50, attack=200)
        assert len(env) == 50
        assert env.max() <= 1.0


# ═══════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestSoundManager:

    def test_wav_files_generated(self, tmp_path):
        SoundManager(parent=None, sounds_dir=tmp_path)
        for name in SOUND_NAMES:
            path = tmp_path / f"{name}.wav"
            assert path.exists(), f"Missing WAV: {name}"
            assert path.stat().st_size > 100

    def test_existing_files_are_reused(self, tmp_path):
        SoundManager(parent=None, sounds_dir=tmp_path)
        path = tmp_path / "session_end.wav"
        before = path.stat().st_mtime_ns
        SoundManager(parent=None, sounds_dir=tmp_path)
        assert path.stat().st_mtime_ns == before

    def test_all_sounds_loaded(self, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        assert mgr.available

    def test_unwritable_dir_leaves_manager_usable(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        mgr = SoundManager(parent=None, sounds_dir=blocker / "sounds")
        assert not mgr.available
        assert mgr.play_session_end() is False

    @pytest.mark.parametrize("level,expected", [(30, 30), (200, 100), (-10, 0)])
    def test_set_volume(self, tmp_path, level, expected):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        mgr.set_volume(level)
        assert mgr.volume == expected

    def test_set_volume_reaches_effects(self, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        stub = StubEffect()
        mgr._effects["session_end"] = stub
        mgr.set_volume(40)
        assert stub.volume == pytest.approx(0.4)

    def test_set_enabled(self, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path, enabled=False)
        assert mgr.enabled is False
        mgr.set_enabled(True)
        assert mgr.enabled is True

    def test_play_unknown_name(self, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        assert mgr.play("fanfare") is False

    def test_play_while_disabled(self, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path, enabled=False)
        stub = StubEffect()
        mgr._effects["session_end"] = stub
        assert mgr.play_session_end() is False
        assert stub.plays == 0

    def test_play_starts_effect(self, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        stub = StubEffect()
        mgr._effects["rest_end"] = stub
        assert mgr.play_rest_end() is True
        assert stub.plays == 1

    def test_effect_in_error_state(self, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        mgr._effects["session_end"] = StubEffect(status=QSoundEffect.Status.Error)
        assert mgr.play_session_end() is False

    def test_playback_exception_is_swallowed(self, tmp_path, caplog):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        mgr._effects["session_end"] = StubEffect(fail=True)
        with caplog.at_level("WARNING", logger="worksession.audio.sounds"):
            assert mgr.play_session_end() is False
        assert "session_end" in caplog.text
