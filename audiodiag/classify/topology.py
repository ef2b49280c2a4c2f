"""Channel topology classification from stereo level statistics.

Detectors are independent predicates over an ``AnalysisSnapshot``;
``classify_topology`` applies them most-specific first. A dual-mono file
also has zero stereo width, and the mid-side signature (low correlation
with a large channel level asymmetry) is stricter than width alone, so the
order is dual-mono, mid-side, true-stereo, then fallback.
"""
from __future__ import annotations

import math

from audiodiag.thresholds.topology import build_topology_config
from audiodiag.types import (
    AnalysisSnapshot,
    ChannelTopology,
    Confidence,
    DualMonoResult,
    MidSideResult,
    TopologyResult,
    TrueStereoResult,
)

TOPOLOGY_DESCRIPTIONS = {
    ChannelTopology.MONO: "Mono (single channel)",
    ChannelTopology.STEREO: "Stereo (distinct left/right)",
    ChannelTopology.DUAL_MONO: "Dual-mono (identical channels)",
    ChannelTopology.MID_SIDE: "Mid-Side encoded stereo",
    ChannelTopology.MULTICHANNEL: "Multichannel surround",
    ChannelTopology.UNKNOWN: "Unknown channel configuration",
}

MONO_COMPATIBLE = frozenset({ChannelTopology.MONO, ChannelTopology.DUAL_MONO})


def _present(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


def _at_most(value: float | None, limit: float) -> bool:
    return _present(value) and value <= limit


def _at_least(value: float | None, limit: float) -> bool:
    return _present(value) and value >= limit


def detect_dual_mono(
    snapshot: AnalysisSnapshot,
    config: dict | None = None,
) -> DualMonoResult:
    """Detect identical left/right content from a silent difference signal."""
    cfg = build_topology_config(config)["dual_mono"]
    diff = snapshot.diff
    corr = snapshot.correlation.correlation

    if _at_most(diff.diff_peak_db, cfg["silence_db"]) and _at_most(
        diff.diff_rms_db, cfg["silence_db"]
    ):
        return DualMonoResult(True, Confidence.HIGH)
    if _at_most(diff.diff_rms_db, cfg["low_diff_rms_db"]) and _at_least(
        corr, cfg["high_correlation"]
    ):
        return DualMonoResult(True, Confidence.HIGH)
    if _at_most(diff.diff_rms_db, cfg["moderate_diff_rms_db"]) and _at_least(
        corr, cfg["moderate_correlation"]
    ):
        return DualMonoResult(True, Confidence.MEDIUM)
    return DualMonoResult(False, Confidence.HIGH)


def channel_level_difference(snapshot: AnalysisSnapshot) -> float | None:
    """Absolute left/right RMS difference in dB, or None if either is missing."""
    left = snapshot.channels.left_rms_db
    right = snapshot.channels.right_rms_db
    if not (_present(left) and _present(right)):
        return None
    return abs(left - right)


def detect_mid_side(
    snapshot: AnalysisSnapshot,
    config: dict | None = None,
) -> MidSideResult:
    """
    Detect Mid-Side encoding stored as left/right.

    One channel carries the mid (sum) signal and the other the much quieter
    side (difference) signal, so the channels are weakly correlated and
    sit far apart in level.
    """
    cfg = build_topology_config(config)["mid_side"]
    corr = snapshot.correlation.correlation
    level_difference = channel_level_difference(snapshot)
    details = {}
    if level_difference is not None:
        details["level_difference"] = level_difference
    if _present(corr):
        details["correlation"] = corr

    low_correlation = (
        _present(corr) and cfg["correlation_min"] <= corr <= cfg["correlation_max"]
    )
    if not low_correlation or level_difference is None:
        return MidSideResult(False, Confidence.HIGH, details)
    if level_difference >= cfg["level_difference_db"]:
        return MidSideResult(True, Confidence.MEDIUM, details)
    if level_difference >= cfg["min_level_difference_db"]:
        return MidSideResult(True, Confidence.LOW, details)
    return MidSideResult(False, Confidence.HIGH, details)


def stereo_width(snapshot: AnalysisSnapshot) -> float:
    """Linear amplitude ratio of difference to sum level; 0 when unknown."""
    diff_rms = snapshot.diff.diff_rms_db
    sum_rms = snapshot.sum.sum_rms_db
    if not (_present(diff_rms) and _present(sum_rms)):
        return 0.0
    return float(10.0 ** ((diff_rms - sum_rms) / 20.0))


def detect_true_stereo(
    snapshot: AnalysisSnapshot,
    config: dict | None = None,
) -> TrueStereoResult:
    """Detect distinct left/right content from stereo width and correlation."""
    cfg = build_topology_config(config)["stereo"]
    width = stereo_width(snapshot)
    if width < cfg["width_minimum"]:
        return TrueStereoResult(False, width, Confidence.LOW)

    corr = snapshot.correlation.correlation
    if _present(corr) and cfg["correlation_min"] < corr < cfg["correlation_max"]:
        return TrueStereoResult(True, width, Confidence.HIGH)
    return TrueStereoResult(True, width, Confidence.MEDIUM)


def _is_sparse(snapshot: AnalysisSnapshot) -> bool:
    width_known = _present(snapshot.diff.diff_rms_db) and _present(snapshot.sum.sum_rms_db)
    return not width_known and not _present(snapshot.correlation.correlation)


def topology_from_channel_count(channel_count: int) -> TopologyResult:
    """
    Topology implied by the container's channel count alone.

    Two channels are assumed to be stereo at LOW confidence; only a full
    analysis can tell dual-mono, mid-side and true stereo apart.
    """
    if channel_count == 1:
        return TopologyResult(
            ChannelTopology.MONO,
            Confidence.HIGH,
            channel_count=1,
            notes=("Single channel audio detected",),
        )
    if channel_count == 2:
        return TopologyResult(
            ChannelTopology.STEREO,
            Confidence.LOW,
            channel_count=2,
            notes=("Two channels - run full analysis to resolve the stereo topology",),
        )
    if channel_count > 2:
        return TopologyResult(
            ChannelTopology.MULTICHANNEL,
            Confidence.HIGH,
            channel_count=channel_count,
            notes=(f"{channel_count}-channel audio",),
        )
    return TopologyResult(
        ChannelTopology.UNKNOWN,
        Confidence.LOW,
        channel_count=channel_count,
        notes=("Channel count unavailable",),
    )


def classify_topology(
    snapshot: AnalysisSnapshot,
    channel_count: int = 2,
    config: dict | None = None,
) -> TopologyResult:
    """
    Classify channel topology, returning the first confirmed hypothesis.

    Args:
        snapshot: Level and correlation statistics for a stereo file.
        channel_count: Number of channels in the source container.
        config: Optional topology threshold overrides.

    Returns:
        TopologyResult with topology, confidence, explanatory details and
        notes.
    """
    if channel_count != 2:
        return topology_from_channel_count(channel_count)

    cfg = build_topology_config(config)
    corr = snapshot.correlation.correlation

    dual_mono = detect_dual_mono(snapshot, cfg)
    if dual_mono.is_dual_mono:
        return TopologyResult(
            ChannelTopology.DUAL_MONO,
            dual_mono.confidence,
            details={
                "diff_peak_db": snapshot.diff.diff_peak_db,
                "diff_rms_db": snapshot.diff.diff_rms_db,
                "correlation": corr,
            },
            notes=("Channels appear identical (dual-mono)",),
        )

    mid_side = detect_mid_side(snapshot, cfg)
    if mid_side.is_mid_side:
        notes = ["Mid-Side encoding detected"]
        if mid_side.confidence == Confidence.LOW:
            notes.append("M/S detection confidence is low - verify manually")
        return TopologyResult(
            ChannelTopology.MID_SIDE,
            mid_side.confidence,
            details={
                "level_difference": mid_side.details.get("level_difference"),
                "correlation": corr,
                "left_rms_db": snapshot.channels.left_rms_db,
                "right_rms_db": snapshot.channels.right_rms_db,
            },
            notes=tuple(notes),
        )

    stereo = detect_true_stereo(snapshot, cfg)
    details = {
        "stereo_width": stereo.stereo_width,
        "correlation": corr,
        "diff_rms_db": snapshot.diff.diff_rms_db,
        "sum_rms_db": snapshot.sum.sum_rms_db,
    }
    if stereo.is_true_stereo:
        notes = ["True stereo content detected"]
        if stereo.stereo_width < cfg["stereo"]["narrow_width"]:
            notes.append("Narrow stereo image")
        elif stereo.stereo_width > cfg["stereo"]["wide_width"]:
            notes.append("Wide stereo image")
        return TopologyResult(
            ChannelTopology.STEREO,
            stereo.confidence,
            details=details,
            notes=tuple(notes),
        )

    if _is_sparse(snapshot):
        return TopologyResult(
            ChannelTopology.UNKNOWN,
            Confidence.LOW,
            details=details,
            notes=("Insufficient statistics to determine topology",),
        )
    return TopologyResult(
        ChannelTopology.STEREO,
        Confidence.MEDIUM,
        details=details,
        notes=("Stereo file with limited stereo content",),
    )


def is_mono_compatible(topology: ChannelTopology) -> bool:
    """True when folding down to mono loses nothing."""
    return topology in MONO_COMPATIBLE


def topology_description(topology) -> str:
    """Human-readable description; unrecognised values map to UNKNOWN."""
    try:
        return TOPOLOGY_DESCRIPTIONS[ChannelTopology(topology)]
    except ValueError:
        return TOPOLOGY_DESCRIPTIONS[ChannelTopology.UNKNOWN]
