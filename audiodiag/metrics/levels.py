"""Peak, RMS and windowed RMS level metrics."""
from __future__ import annotations

import numpy as np


def _validate_mono(x: np.ndarray) -> np.ndarray:
    """Validate and coerce mono audio arrays."""
    x = np.asarray(x, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError("Expected 1D mono audio array.")
    if x.size == 0:
        raise ValueError("Expected non-empty audio array.")
    return x


def _to_db(amplitude: float) -> float:
    if amplitude <= 0:
        return float("-inf")
    return float(20.0 * np.log10(amplitude))


def peak_dbfs_mono(x: np.ndarray) -> float:
    """Compute sample peak in dBFS for mono audio."""
    x = _validate_mono(x)
    return _to_db(float(np.max(np.abs(x))))


def rms_dbfs_mono(x: np.ndarray) -> float:
    """Compute RMS level in dBFS for mono audio."""
    x = _validate_mono(x)
    return _to_db(float(np.sqrt(np.mean(x ** 2))))


def windowed_rms_dbfs(
    x: np.ndarray,
    fs: float,
    *,
    window_seconds: float = 0.1,
) -> list[float]:
    """
    Short-term RMS per non-overlapping window, in time order.

    Windows of digital silence have no measurable noise floor and are
    skipped; a trailing partial window is kept.
    """
    x = _validate_mono(x)
    if fs <= 0:
        raise ValueError("Sample rate must be positive.")
    if window_seconds <= 0:
        raise ValueError("window_seconds must be positive.")
    frame_len = max(1, int(round(window_seconds * fs)))
    levels: list[float] = []
    for start in range(0, x.size, frame_len):
        frame = x[start:start + frame_len]
        level = _to_db(float(np.sqrt(np.mean(frame ** 2))))
        if np.isfinite(level):
            levels.append(level)
    return levels
