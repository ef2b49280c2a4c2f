"""Noise floor statistics over a windowed RMS sequence."""
from __future__ import annotations

import math
from typing import Iterable, Sequence

from audiodiag.thresholds.noise_modulation import (
    REFERENCE,
    build_noise_modulation_config,
)
from audiodiag.types import CorrelationMetrics, NoiseFloorMetrics


def _finite_windows(rms_windows: Iterable[float | None] | None) -> list[float]:
    """Drop missing/non-finite readings while keeping time order."""
    if rms_windows is None:
        return []
    return [float(v) for v in rms_windows if v is not None and math.isfinite(v)]


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def calculate_variance(values: Sequence[float]) -> float:
    """Population variance (mean squared deviation from the mean)."""
    if not values:
        return 0.0
    mean = _mean(values)
    return sum((v - mean) ** 2 for v in values) / len(values)


def default_noise_floor_metrics() -> NoiseFloorMetrics:
    return NoiseFloorMetrics(
        noise_floor_db=REFERENCE["typical_noise_floor_db"],
        modulation_depth_db=0.0,
        quiet_window_count=0,
        variance_db=0.0,
    )


def quiet_threshold_db(program_level_db: float | None, cfg: dict) -> float:
    """Absolute quiet threshold, lowered to sit below a known program level."""
    threshold = cfg["quiet_threshold_db"]
    if program_level_db is not None and math.isfinite(program_level_db):
        threshold = min(threshold, program_level_db - cfg["relative_quiet_offset_db"])
    return threshold


def analyze_noise_floor_variation(
    rms_windows: Iterable[float | None] | None,
    program_level_db: float | None = None,
    config: dict | None = None,
) -> NoiseFloorMetrics:
    """
    Measure how much the noise floor moves across quiet windows.

    Args:
        rms_windows: Evenly spaced RMS readings in dB, in time order.
        program_level_db: Overall program RMS; when given, the quiet
            threshold is kept at least ``relative_quiet_offset_db`` below it.
        config: Optional noise modulation configuration overrides.

    Returns:
        NoiseFloorMetrics. Too few windows, or too few quiet windows to
        cover the minimum quiet duration, yields the reference defaults.
    """
    cfg = build_noise_modulation_config(config)["noise_floor"]
    windows = _finite_windows(rms_windows)
    if len(windows) < cfg["min_window_count"]:
        return default_noise_floor_metrics()

    threshold = quiet_threshold_db(program_level_db, cfg)
    quiet = [v for v in windows if v < threshold]
    required = max(
        cfg["min_quiet_windows"],
        math.ceil(cfg["min_quiet_duration_ms"] / cfg["window_ms"]),
    )
    if len(quiet) < required:
        return default_noise_floor_metrics()

    lowest = min(quiet)
    highest = max(quiet)
    return NoiseFloorMetrics(
        noise_floor_db=_mean(quiet),
        modulation_depth_db=highest - lowest,
        quiet_window_count=len(quiet),
        variance_db=calculate_variance(quiet),
        min_noise_floor_db=lowest,
        max_noise_floor_db=highest,
    )


def _program_noise_correlation(windows: Sequence[float], cfg: dict) -> float:
    """
    Crude program/noise coupling indicator in [0, 1].

    Compares quiet windows that immediately follow loud program with all
    quiet windows; a noise floor that sits higher right after loud passages
    tracks the program envelope.
    """
    loud_level = cfg["loud_level_db"]
    quiet_level = cfg["quiet_level_db"]
    fallback = REFERENCE["typical_noise_floor_db"]

    loud = [v for v in windows if v > loud_level]
    avg_loud = _mean(loud) if loud else loud_level
    quiet_after_loud = [
        cur for prev, cur in zip(windows, windows[1:])
        if prev > avg_loud and cur < quiet_level
    ]
    general_quiet = [v for v in windows if v < quiet_level]
    avg_after_loud = _mean(quiet_after_loud) if quiet_after_loud else fallback
    avg_quiet = _mean(general_quiet) if general_quiet else fallback
    indicator = (avg_after_loud - avg_quiet) / 10.0
    return max(0.0, min(1.0, indicator))


def analyze_modulation_correlation(
    rms_windows: Iterable[float | None] | None,
    config: dict | None = None,
) -> CorrelationMetrics:
    """
    Look for breathing and pumping around loud-to-quiet transitions.

    A transition is a drop larger than ``transition_drop_db`` between
    consecutive windows that has a following window. Breathing: the drop
    lands in quiet and the next window rises by more than
    ``breathing_rise_db`` while staying below the pre-drop level. Pumping:
    the next window surges by more than ``pumping_surge_db`` past the
    pre-drop level. Rates are fractions of transitions.
    """
    cfg = build_noise_modulation_config(config)["correlation"]
    windows = _finite_windows(rms_windows)
    if len(windows) < cfg["min_window_count"]:
        return CorrelationMetrics()

    transitions = 0
    breathing = 0
    pumping = 0
    for i in range(1, len(windows) - 1):
        before, at, after = windows[i - 1], windows[i], windows[i + 1]
        drop = before - at
        if drop <= cfg["transition_drop_db"]:
            continue
        transitions += 1
        rise = after - at
        if at < cfg["quiet_level_db"] and cfg["breathing_rise_db"] < rise < drop:
            breathing += 1
        elif rise > cfg["pumping_surge_db"] and after > before:
            pumping += 1

    breathing_rate = breathing / transitions if transitions else 0.0
    pumping_rate = pumping / transitions if transitions else 0.0
    return CorrelationMetrics(
        program_noise_correlation=_program_noise_correlation(windows, cfg),
        breathing_event_rate=breathing_rate,
        pumping_event_rate=pumping_rate,
        has_breathing=breathing_rate > cfg["breathing_threshold"],
        has_pumping=pumping_rate > cfg["pumping_threshold"],
    )
