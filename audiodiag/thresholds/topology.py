"""Channel topology thresholds."""
from __future__ import annotations

from audiodiag.thresholds.merge import merge_config


DEFAULT_TOPOLOGY_THRESHOLDS = {
    "dual_mono": {
        "silence_db": -90.0,
        "low_diff_rms_db": -60.0,
        "high_correlation": 0.995,
        "moderate_diff_rms_db": -50.0,
        "moderate_correlation": 0.95,
    },
    "mid_side": {
        "correlation_min": -0.3,
        "correlation_max": 0.15,
        "level_difference_db": 10.0,
        "min_level_difference_db": 6.0,
    },
    "stereo": {
        "width_minimum": 0.05,
        "correlation_min": 0.3,
        "correlation_max": 0.99,
        "narrow_width": 0.2,
        "wide_width": 0.8,
    },
}


def _validate(cfg: dict) -> None:
    errors: list[str] = []
    dual = cfg["dual_mono"]
    if dual["moderate_diff_rms_db"] < dual["low_diff_rms_db"]:
        errors.append("dual_mono.moderate_diff_rms_db must be >= low_diff_rms_db.")
    for key in ("high_correlation", "moderate_correlation"):
        if not -1.0 <= dual[key] <= 1.0:
            errors.append(f"dual_mono.{key} must be within [-1, 1].")

    ms = cfg["mid_side"]
    if ms["correlation_min"] > ms["correlation_max"]:
        errors.append("mid_side.correlation_min must be <= correlation_max.")
    if ms["min_level_difference_db"] > ms["level_difference_db"]:
        errors.append("mid_side.min_level_difference_db must be <= level_difference_db.")

    stereo = cfg["stereo"]
    if not 0.0 < stereo["width_minimum"] < 1.0:
        errors.append("stereo.width_minimum must be within (0, 1).")
    if stereo["correlation_min"] >= stereo["correlation_max"]:
        errors.append("stereo.correlation_min must be < correlation_max.")
    if errors:
        raise ValueError("; ".join(errors))


def build_topology_config(overrides: dict | None = None) -> dict:
    """Return merged topology thresholds with defaults applied."""
    merged = merge_config(DEFAULT_TOPOLOGY_THRESHOLDS, overrides)
    cfg: dict = {}
    for section, defaults in DEFAULT_TOPOLOGY_THRESHOLDS.items():
        values = merged.get(section)
        if not isinstance(values, dict):
            raise ValueError(f"{section} thresholds must be an object.")
        cfg[section] = {
            key: float(values.get(key, default)) for key, default in defaults.items()
        }
    _validate(cfg)
    return cfg
