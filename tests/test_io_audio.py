from __future__ import annotations

import numpy as np
import pytest

from audiodiag.io.audio import downmix, load_audio, probe_audio
from audiodiag.io.extract import ExtractionError, SoundfileMetricExtractor
from audiodiag.io.snapshot import SILENCE_FLOOR_DB
from audiodiag.types import AudioBuffer
from tests.conftest import sine, write_wav


def test_load_audio_keeps_channels(tmp_path):
    tone = sine(440.0, 0.1)
    path = write_wav(tmp_path, "tone.wav", np.stack([tone, tone * 0.5], axis=1))
    audio = load_audio(str(path))
    assert audio.channels == 2
    assert audio.samples.shape == (4800, 2)
    assert audio.backend == "soundfile"
    info = probe_audio(str(path))
    assert info.channels == 2
    assert info.channel_layout == "stereo"
    assert info.duration == pytest.approx(0.1)


def test_downmix_averages_channels():
    samples = np.array([[1.0, -1.0], [0.5, 0.5]])
    audio = AudioBuffer(samples=samples, fs=48000, duration=2 / 48000, channels=2, backend="test")
    assert np.allclose(downmix(audio), [0.0, 0.5])


def test_snapshot_of_dual_mono_file(tmp_path):
    tone = sine(440.0, 1.0)
    path = write_wav(tmp_path, "dual.wav", np.stack([tone, tone], axis=1))
    snap = SoundfileMetricExtractor().snapshot(str(path))
    assert snap.diff.diff_peak_db == SILENCE_FLOOR_DB
    assert snap.diff.diff_rms_db == SILENCE_FLOOR_DB
    assert snap.correlation.correlation == pytest.approx(1.0)
    assert snap.channels.left_rms_db == pytest.approx(-15.05, abs=0.05)


def test_snapshot_of_stereo_file(tmp_path):
    left = sine(440.0, 1.0)
    right = sine(660.0, 1.0, amplitude=0.1)
    path = write_wav(tmp_path, "stereo.wav", np.stack([left, right], axis=1))
    snap = SoundfileMetricExtractor().snapshot(str(path))
    assert snap.diff.diff_rms_db > -30.0
    assert abs(snap.correlation.correlation) < 0.1
    assert snap.channels.left_rms_db - snap.channels.right_rms_db == pytest.approx(7.96, abs=0.05)


def test_snapshot_requires_stereo(tmp_path):
    path = write_wav(tmp_path, "mono.wav", sine(440.0, 0.5))
    with pytest.raises(ExtractionError, match="stereo"):
        SoundfileMetricExtractor().snapshot(str(path))


def test_rms_windows_skip_digital_silence(tmp_path):
    signal = np.concatenate([sine(440.0, 1.0), np.zeros(24000)])
    path = write_wav(tmp_path, "tail.wav", signal)
    extractor = SoundfileMetricExtractor()
    windows = extractor.rms_windows(str(path))
    assert len(windows) == 10
    assert all(w == pytest.approx(-15.05, abs=0.05) for w in windows)
    assert extractor.program_level_db(str(path)) < windows[0]


def test_silent_file_has_no_program_level(tmp_path):
    path = write_wav(tmp_path, "silent.wav", np.zeros(4800))
    extractor = SoundfileMetricExtractor()
    assert extractor.program_level_db(str(path)) is None
    assert extractor.rms_windows(str(path)) == []


def test_missing_file_raises_extraction_error(tmp_path):
    extractor = SoundfileMetricExtractor()
    missing = str(tmp_path / "missing.wav")
    with pytest.raises(ExtractionError):
        extractor.rms_windows(missing)
    with pytest.raises(ExtractionError):
        extractor.probe(missing)


def test_undecodable_file_raises_extraction_error(tmp_path):
    path = tmp_path / "garbage.wav"
    path.write_bytes(b"this is not audio")
    with pytest.raises(ExtractionError):
        SoundfileMetricExtractor().snapshot(str(path))
