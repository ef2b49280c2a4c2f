"""Noise floor modulation thresholds."""
from __future__ import annotations

from audiodiag.thresholds.merge import merge_config

REFERENCE = {
    "typical_noise_floor_db": -60.0,
    "vinyl_noise_floor_db": -45.0,
    "digital_silence_db": -96.0,
}

# Bucket order matters: each boundary is the lower edge of the named status.
DEPTH_LEVELS = ("minimal", "noticeable", "obvious", "severe")

DEFAULT_NOISE_MODULATION_CONFIG = {
    "noise_floor": {
        "quiet_threshold_db": -45.0,
        "relative_quiet_offset_db": 30.0,
        "min_window_count": 5,
        "min_quiet_windows": 2,
        "min_quiet_duration_ms": 100.0,
        "window_ms": 100.0,
    },
    "modulation_depth": {
        "minimal": 3.0,
        "noticeable": 6.0,
        "obvious": 10.0,
        "severe": 15.0,
    },
    "correlation": {
        "min_window_count": 10,
        "transition_drop_db": 10.0,
        "quiet_level_db": -40.0,
        "loud_level_db": -30.0,
        "breathing_rise_db": 3.0,
        "pumping_surge_db": 6.0,
        "breathing_threshold": 0.5,
        "pumping_threshold": 0.4,
    },
    "gating": {
        "variance_threshold": 5.0,
    },
    "status_boost": {
        "offset_db": 2.0,
        "max_steps": 1,
    },
    "score": {
        "depth_weight": 40.0,
        "variance_weight": 20.0,
        "variance_scale": 8.0,
        "correlation_weight": 20.0,
        "event_weight": 20.0,
    },
}

_INT_KEYS = {
    ("noise_floor", "min_window_count"),
    ("noise_floor", "min_quiet_windows"),
    ("correlation", "min_window_count"),
    ("status_boost", "max_steps"),
}


def depth_boundaries(cfg: dict) -> tuple[float, ...]:
    """Return the modulation depth table as an ascending tuple."""
    depth = cfg["modulation_depth"]
    return tuple(float(depth[level]) for level in DEPTH_LEVELS)


def _coerce(section: str, key: str, value) -> float | int:
    if (section, key) in _INT_KEYS:
        return int(value)
    return float(value)


def _validate(cfg: dict) -> None:
    errors: list[str] = []
    bounds = depth_boundaries(cfg)
    if bounds[0] <= 0:
        errors.append("modulation_depth.minimal must be > 0.")
    for lower, upper in zip(bounds, bounds[1:]):
        if upper <= lower:
            errors.append("modulation_depth thresholds must be strictly increasing.")
            break

    nf = cfg["noise_floor"]
    if nf["window_ms"] <= 0:
        errors.append("noise_floor.window_ms must be > 0.")
    if nf["min_quiet_windows"] < 2:
        errors.append("noise_floor.min_quiet_windows must be >= 2.")

    corr = cfg["correlation"]
    for key in ("breathing_threshold", "pumping_threshold"):
        if corr[key] < 0:
            errors.append(f"correlation.{key} must be >= 0.")
    if corr["transition_drop_db"] <= 0:
        errors.append("correlation.transition_drop_db must be > 0.")

    boost = cfg["status_boost"]
    if boost["offset_db"] < 0:
        errors.append("status_boost.offset_db must be >= 0.")
    if boost["max_steps"] < 0:
        errors.append("status_boost.max_steps must be >= 0.")

    score = cfg["score"]
    if score["variance_scale"] <= 0:
        errors.append("score.variance_scale must be > 0.")
    for key in ("depth_weight", "variance_weight", "correlation_weight", "event_weight"):
        if score[key] < 0:
            errors.append(f"score.{key} must be >= 0.")
    if errors:
        raise ValueError("; ".join(errors))


def build_noise_modulation_config(overrides: dict | None = None) -> dict:
    """Return merged noise modulation configuration with defaults applied."""
    merged = merge_config(DEFAULT_NOISE_MODULATION_CONFIG, overrides)
    cfg: dict = {}
    for section, defaults in DEFAULT_NOISE_MODULATION_CONFIG.items():
        values = merged.get(section)
        if not isinstance(values, dict):
            raise ValueError(f"{section} configuration must be an object.")
        cfg[section] = {
            key: _coerce(section, key, values.get(key, default))
            for key, default in defaults.items()
        }
    _validate(cfg)
    return cfg
