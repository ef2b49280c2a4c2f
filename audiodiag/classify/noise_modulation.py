"""Noise floor modulation classification, scoring and advice."""
from __future__ import annotations

import math
from bisect import bisect_right
from dataclasses import replace
from typing import Any, Mapping

from audiodiag.thresholds.noise_modulation import (
    build_noise_modulation_config,
    depth_boundaries,
)
from audiodiag.types import (
    CorrelationMetrics,
    ModulationClassification,
    ModulationType,
    NoiseFloorMetrics,
    NoiseModulationStatus,
)

# Ascending severity; index i is the bucket above the i-th depth boundary.
STATUS_ORDER = (
    NoiseModulationStatus.CLEAN,
    NoiseModulationStatus.MINIMAL,
    NoiseModulationStatus.NOTICEABLE,
    NoiseModulationStatus.OBVIOUS,
    NoiseModulationStatus.SEVERE,
)

STATUS_DESCRIPTIONS = {
    NoiseModulationStatus.CLEAN: "No noise floor modulation detected - consistent background level",
    NoiseModulationStatus.MINIMAL: "Minimal noise modulation - unlikely to be audible in normal listening",
    NoiseModulationStatus.NOTICEABLE: "Noticeable noise modulation - may be audible during quiet passages",
    NoiseModulationStatus.OBVIOUS: "Obvious breathing/pumping artifacts - clearly audible in quiet sections",
    NoiseModulationStatus.SEVERE: "Severe noise modulation - distracting artifacts throughout",
}

_BREATHING_ADVICE = (
    "Breathing artifacts detected - use slower release times on the dynamics processor",
    "Use parallel compression instead of heavy direct compression",
)
_PUMPING_ADVICE = (
    "Pumping artifacts detected - reduce the compression ratio or rebalance attack and release times",
    "Consider multi-band compression or a lookahead limiter to avoid sudden level surges",
)

TYPE_RECOMMENDATIONS = {
    ModulationType.NONE: (),
    ModulationType.BREATHING: _BREATHING_ADVICE,
    ModulationType.PUMPING: _PUMPING_ADVICE,
    ModulationType.GATING_ARTIFACTS: (
        "Gating artifacts detected - review the gate/expander threshold and range settings",
        "Prefer gentle expansion over hard gating and lengthen the gate release",
    ),
    ModulationType.MIXED: _BREATHING_ADVICE + _PUMPING_ADVICE,
}

CLEAN_RECOMMENDATION = "No noise floor modulation detected - audio maintains a consistent background"
UNCLASSIFIED_RECOMMENDATION = (
    "Noise floor varies without a recognised artifact pattern - review quiet passages by ear"
)
NOISE_REDUCTION_RECOMMENDATION = "Significant noise modulation may benefit from noise reduction processing"
SEVERE_RECOMMENDATION = "Severe artifacts present - consider sourcing less processed material"


def _field(source: Any, name: str, default):
    """Read ``name`` from a mapping or dataclass, treating None as missing."""
    if source is None:
        return default
    if isinstance(source, Mapping):
        value = source.get(name)
    else:
        value = getattr(source, name, None)
    return default if value is None else value


def _number(source: Any, name: str) -> float:
    value = _field(source, name, 0.0)
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def _flag(source: Any, name: str) -> bool:
    return bool(_field(source, name, False))


def _enum_field(source: Any, name: str, enum_cls, default):
    """Coerce a status/type field; unrecognised values fall back to ``default``."""
    try:
        return enum_cls(_field(source, name, default))
    except ValueError:
        return default


def detect_modulation_type(
    noise_metrics: NoiseFloorMetrics | Mapping | None,
    correlation_metrics: CorrelationMetrics | Mapping | None,
    config: dict | None = None,
) -> ModulationType:
    """Pick the artifact type; the first matching guard wins."""
    cfg = build_noise_modulation_config(config)
    depth = _number(noise_metrics, "modulation_depth_db")
    variance = _number(noise_metrics, "variance_db")
    breathing = _flag(correlation_metrics, "has_breathing")
    pumping = _flag(correlation_metrics, "has_pumping")

    if depth < cfg["modulation_depth"]["minimal"]:
        return ModulationType.NONE
    if breathing and pumping:
        return ModulationType.MIXED
    if breathing:
        return ModulationType.BREATHING
    if pumping:
        return ModulationType.PUMPING
    if variance > cfg["gating"]["variance_threshold"]:
        return ModulationType.GATING_ARTIFACTS
    # Deep modulation with no recognised pattern stays NONE until calibrated.
    return ModulationType.NONE


def classify_status(
    modulation_depth_db: float | None,
    artifact_flags: CorrelationMetrics | Mapping | None = None,
    config: dict | None = None,
) -> NoiseModulationStatus:
    """
    Bucket modulation depth into a status.

    Breathing or pumping boosts the depth by ``status_boost.offset_db``
    before lookup; the boost can advance at most ``status_boost.max_steps``
    buckets past the unboosted result.
    """
    cfg = build_noise_modulation_config(config)
    bounds = depth_boundaries(cfg)
    depth = 0.0
    if modulation_depth_db is not None and math.isfinite(modulation_depth_db):
        depth = float(modulation_depth_db)

    index = bisect_right(bounds, depth)
    if _flag(artifact_flags, "has_breathing") or _flag(artifact_flags, "has_pumping"):
        boost = cfg["status_boost"]
        boosted = bisect_right(bounds, depth + boost["offset_db"])
        index = min(boosted, index + boost["max_steps"])
    return STATUS_ORDER[index]


def calculate_modulation_score(
    noise_metrics: NoiseFloorMetrics | Mapping | None,
    correlation_metrics: CorrelationMetrics | Mapping | None,
    config: dict | None = None,
) -> int:
    """
    Weighted 0-100 severity score.

    Each factor is normalised to [0, 1] and weighted: modulation depth
    against the SEVERE boundary, variance against ``variance_scale``,
    program/noise correlation, and the larger of the two event rates.
    """
    if noise_metrics is None or correlation_metrics is None:
        return 0
    cfg = build_noise_modulation_config(config)
    weights = cfg["score"]
    severe = cfg["modulation_depth"]["severe"]

    depth_norm = min(max(_number(noise_metrics, "modulation_depth_db"), 0.0) / severe, 1.0)
    variance_norm = min(
        max(_number(noise_metrics, "variance_db"), 0.0) / weights["variance_scale"], 1.0
    )
    correlation_norm = min(max(_number(correlation_metrics, "program_noise_correlation"), 0.0), 1.0)
    event_rate = max(
        _number(correlation_metrics, "breathing_event_rate"),
        _number(correlation_metrics, "pumping_event_rate"),
        0.0,
    )
    event_norm = min(event_rate, 1.0)

    score = (
        depth_norm * weights["depth_weight"]
        + variance_norm * weights["variance_weight"]
        + correlation_norm * weights["correlation_weight"]
        + event_norm * weights["event_weight"]
    )
    return int(min(100, max(0, round(score))))


def classify_metrics(
    noise_metrics: NoiseFloorMetrics | Mapping,
    correlation_metrics: CorrelationMetrics | Mapping,
    config: dict | None = None,
) -> ModulationClassification:
    """Compose status, type, score, description and advice."""
    cfg = build_noise_modulation_config(config)
    depth = _number(noise_metrics, "modulation_depth_db")
    status = classify_status(depth, correlation_metrics, cfg)
    classification = ModulationClassification(
        status=status,
        modulation_type=detect_modulation_type(noise_metrics, correlation_metrics, cfg),
        modulation_score=calculate_modulation_score(noise_metrics, correlation_metrics, cfg),
        noise_floor_db=_number(noise_metrics, "noise_floor_db"),
        modulation_depth_db=depth,
        has_breathing=_flag(correlation_metrics, "has_breathing"),
        has_pumping=_flag(correlation_metrics, "has_pumping"),
        description=STATUS_DESCRIPTIONS[status],
    )
    return _with_recommendations(classification, cfg)


def classify(metrics: Mapping | None, config: dict | None = None) -> ModulationClassification:
    """
    Classify from a mapping of pre-computed metrics.

    Recognised keys: ``modulation_depth_db``, ``noise_floor_db``,
    ``variance_db``, ``has_breathing``, ``has_pumping``,
    ``breathing_event_rate``, ``pumping_event_rate`` and
    ``program_noise_correlation``. Missing keys default to zero/False;
    ``None`` yields a CLEAN classification with empty defaults.
    """
    if metrics is None:
        return ModulationClassification()
    return classify_metrics(metrics, metrics, config)


def _with_recommendations(
    classification: ModulationClassification,
    cfg: dict,
) -> ModulationClassification:
    return replace(
        classification,
        recommendations=generate_recommendations(classification, cfg),
    )


def generate_recommendations(
    classification: ModulationClassification | Mapping | None,
    config: dict | None = None,
) -> tuple[str, ...]:
    """Ordered remediation advice keyed on status and modulation type."""
    if classification is None:
        return ()
    cfg = build_noise_modulation_config(config)
    status = _enum_field(classification, "status", NoiseModulationStatus, NoiseModulationStatus.CLEAN)
    modulation_type = _enum_field(
        classification, "modulation_type", ModulationType, ModulationType.NONE
    )
    depth = _number(classification, "modulation_depth_db")

    if status == NoiseModulationStatus.CLEAN:
        return (CLEAN_RECOMMENDATION,)

    recommendations = list(TYPE_RECOMMENDATIONS[modulation_type])
    if modulation_type == ModulationType.NONE:
        recommendations.append(UNCLASSIFIED_RECOMMENDATION)
    if depth > cfg["modulation_depth"]["obvious"]:
        recommendations.append(NOISE_REDUCTION_RECOMMENDATION)
    if status == NoiseModulationStatus.SEVERE:
        recommendations.append(SEVERE_RECOMMENDATION)
    return tuple(recommendations)
