from __future__ import annotations
from dataclasses import asdict

from audiodiag.classify.topology import is_mono_compatible, topology_description
from audiodiag.types import ModulationAnalysis, TopologyResult
from audiodiag.utils.serialize import q, sha256_hex_canonical_json, to_jsonable

DB_STEP = 0.01
RATIO_STEP = 0.001

_RATIO_KEYS = {
    "correlation",
    "stereo_width",
    "program_noise_correlation",
    "breathing_event_rate",
    "pumping_event_rate",
    "confidence",
}


def _quantize_mapping(values: dict) -> dict:
    """Quantize numeric entries: ratios to 0.001, everything else as dB."""
    out = {}
    for key, value in values.items():
        if not isinstance(value, float):
            out[key] = value
        else:
            out[key] = q(value, RATIO_STEP if key in _RATIO_KEYS else DB_STEP)
    return out


def topology_to_dict(result: TopologyResult) -> dict:
    """Serialize a TopologyResult."""
    return {
        "topology": result.topology.value,
        "confidence": result.confidence.value,
        "confidence_score": q(result.confidence.score, RATIO_STEP),
        "channel_count": result.channel_count,
        "channel_layout": result.channel_layout,
        "description": topology_description(result.topology),
        "mono_compatible": is_mono_compatible(result.topology),
        "details": _quantize_mapping(to_jsonable(dict(result.details))),
        "notes": list(result.notes),
    }


def modulation_to_dict(analysis: ModulationAnalysis) -> dict:
    """Serialize a ModulationAnalysis including its source statistics."""
    c = analysis.classification
    classification = _quantize_mapping({
        "status": c.status.value,
        "modulation_type": c.modulation_type.value,
        "modulation_score": c.modulation_score,
        "noise_floor_db": c.noise_floor_db,
        "modulation_depth_db": c.modulation_depth_db,
        "has_breathing": c.has_breathing,
        "has_pumping": c.has_pumping,
    })
    classification["description"] = c.description
    classification["recommendations"] = list(c.recommendations)
    return {
        "classification": classification,
        "confidence": q(analysis.confidence, RATIO_STEP),
        "window_count": analysis.window_count,
        "program_level_db": q(analysis.program_level_db, DB_STEP),
        "noise_floor": (
            _quantize_mapping(asdict(analysis.noise)) if analysis.noise is not None else None
        ),
        "correlation": (
            _quantize_mapping(asdict(analysis.correlation))
            if analysis.correlation is not None
            else None
        ),
        "duration_s": q(analysis.duration, RATIO_STEP),
        "analysis_time_ms": analysis.analysis_time_ms,
        "error": analysis.error,
    }


def build_diagnostics_report_dict(
    *,
    engine: dict,
    input_meta: dict,
    topology: TopologyResult | None = None,
    noise_modulation: ModulationAnalysis | None = None,
) -> dict:
    """
    Build a diagnostics report dictionary with quantized values and an
    integrity hash.

    Args:
        engine: Engine metadata (name, version).
        input_meta: Input file metadata (path, analysis mode).
        topology: Channel topology result, if run.
        noise_modulation: Noise modulation analysis, if run.

    Returns:
        Report dictionary. ``integrity.report_hash_sha256`` covers the
        canonical JSON of the report with the hash field empty.
    """
    report = {
        "schema_version": "1.0",
        "engine": engine,
        "input": input_meta,
        "topology": topology_to_dict(topology) if topology is not None else None,
        "noise_modulation": (
            modulation_to_dict(noise_modulation) if noise_modulation is not None else None
        ),
        "integrity": {"report_hash_sha256": ""},
    }
    report["integrity"]["report_hash_sha256"] = sha256_hex_canonical_json(report)
    return report
