from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import soundfile as sf

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def build_snapshot_dict(
    *,
    diff_peak_db: float | None = None,
    diff_rms_db: float | None = None,
    sum_peak_db: float | None = None,
    sum_rms_db: float | None = None,
    left_rms_db: float | None = None,
    right_rms_db: float | None = None,
    correlation: float | None = None,
) -> dict:
    return {
        "diff": {"diff_peak_db": diff_peak_db, "diff_rms_db": diff_rms_db},
        "sum": {"sum_peak_db": sum_peak_db, "sum_rms_db": sum_rms_db},
        "channels": {"left_rms_db": left_rms_db, "right_rms_db": right_rms_db},
        "correlation": {"correlation": correlation},
    }


def write_wav(tmp_path: Path, name: str, samples: np.ndarray, fs: int = 48000) -> Path:
    path = tmp_path / name
    sf.write(path, samples, fs, subtype="FLOAT")
    return path


def sine(freq_hz: float, seconds: float, fs: int = 48000, amplitude: float = 0.25) -> np.ndarray:
    t = np.arange(int(seconds * fs)) / fs
    return amplitude * np.sin(2.0 * np.pi * freq_hz * t)
