from __future__ import annotations

import numpy as np
import pytest

from audiodiag.metrics.correlation import mean_correlation, windowed_correlation_coefficients
from audiodiag.metrics.levels import peak_dbfs_mono, rms_dbfs_mono, windowed_rms_dbfs


def test_peak_and_rms_of_full_scale_square():
    x = np.array([1.0, -1.0, 1.0, -1.0])
    assert peak_dbfs_mono(x) == pytest.approx(0.0)
    assert rms_dbfs_mono(x) == pytest.approx(0.0)


def test_silence_is_negative_infinity():
    assert rms_dbfs_mono(np.zeros(8)) == float("-inf")


def test_levels_reject_stereo_input():
    with pytest.raises(ValueError):
        rms_dbfs_mono(np.zeros((4, 2)))


def test_windowed_rms_keeps_order_and_partial_tail():
    x = np.concatenate([np.full(10, 0.5), np.full(10, 0.05), np.full(5, 0.5)])
    levels = windowed_rms_dbfs(x, 100.0, window_seconds=0.1)
    assert len(levels) == 3
    assert levels[0] == pytest.approx(-6.02, abs=0.01)
    assert levels[1] == pytest.approx(-26.02, abs=0.01)
    assert levels[2] == pytest.approx(levels[0])


def test_windowed_correlation_identical_and_inverted():
    rng = np.random.default_rng(0)
    x = rng.standard_normal(4800)
    same = np.stack([x, x], axis=1)
    inverted = np.stack([x, -x], axis=1)
    assert np.allclose(windowed_correlation_coefficients(same, 4800.0), 1.0)
    assert mean_correlation(inverted, 4800.0) == pytest.approx(-1.0)


def test_correlation_undefined_for_silent_channel():
    x = np.stack([np.ones(4800) * np.sin(np.arange(4800)), np.zeros(4800)], axis=1)
    assert windowed_correlation_coefficients(x, 4800.0).size == 0
    assert mean_correlation(x, 4800.0) is None


def test_short_input_uses_single_window():
    rng = np.random.default_rng(1)
    x = rng.standard_normal(100)
    corr = windowed_correlation_coefficients(np.stack([x, x], axis=1), 48000.0)
    assert corr.size == 1
