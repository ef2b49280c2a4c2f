from __future__ import annotations

import pytest

from audiodiag.classify.topology import (
    TOPOLOGY_DESCRIPTIONS,
    channel_level_difference,
    classify_topology,
    detect_dual_mono,
    detect_mid_side,
    detect_true_stereo,
    is_mono_compatible,
    stereo_width,
    topology_description,
    topology_from_channel_count,
)
from audiodiag.io.snapshot import snapshot_from_dict
from audiodiag.types import AnalysisSnapshot, ChannelTopology, Confidence
from tests.conftest import build_snapshot_dict


def _snap(**kwargs) -> AnalysisSnapshot:
    return snapshot_from_dict(build_snapshot_dict(**kwargs))


def test_silent_difference_is_dual_mono_high():
    snap = _snap(diff_peak_db=-100.0, diff_rms_db=-100.0, correlation=1.0)
    result = detect_dual_mono(snap)
    assert result.is_dual_mono
    assert result.confidence == Confidence.HIGH

    topo = classify_topology(snap)
    assert topo.topology == ChannelTopology.DUAL_MONO
    assert topo.confidence == Confidence.HIGH


def test_dual_mono_moderate_evidence_is_medium():
    snap = _snap(diff_peak_db=-40.0, diff_rms_db=-55.0, correlation=0.97)
    result = detect_dual_mono(snap)
    assert result.is_dual_mono
    assert result.confidence == Confidence.MEDIUM


def test_dual_mono_requires_present_correlation():
    snap = _snap(diff_peak_db=-40.0, diff_rms_db=-65.0)
    assert not detect_dual_mono(snap).is_dual_mono


def test_mid_side_level_asymmetry():
    snap = _snap(left_rms_db=-10.0, right_rms_db=-25.0, correlation=0.1)
    result = detect_mid_side(snap)
    assert result.is_mid_side
    assert result.confidence == Confidence.MEDIUM
    assert result.details["level_difference"] > 10

    topo = classify_topology(snap)
    assert topo.topology == ChannelTopology.MID_SIDE


def test_mid_side_small_asymmetry_is_low_confidence():
    snap = _snap(left_rms_db=-10.0, right_rms_db=-17.0, correlation=0.0)
    result = detect_mid_side(snap)
    assert result.is_mid_side
    assert result.confidence == Confidence.LOW
    topo = classify_topology(snap)
    assert any("verify manually" in note for note in topo.notes)


def test_mid_side_rejected_with_high_correlation():
    snap = _snap(left_rms_db=-10.0, right_rms_db=-25.0, correlation=0.8)
    assert not detect_mid_side(snap).is_mid_side


def test_true_stereo_high_confidence():
    snap = _snap(diff_rms_db=-15.0, sum_rms_db=-10.0, correlation=0.7)
    result = detect_true_stereo(snap)
    assert result.is_true_stereo
    assert result.confidence == Confidence.HIGH
    assert result.stereo_width > 0

    topo = classify_topology(snap)
    assert topo.topology == ChannelTopology.STEREO
    assert topo.confidence == Confidence.HIGH


def test_narrow_image_is_not_true_stereo():
    snap = _snap(diff_rms_db=-60.0, sum_rms_db=-10.0, correlation=0.99)
    result = detect_true_stereo(snap)
    assert not result.is_true_stereo
    assert result.stereo_width < 0.05


def test_stereo_width_value():
    snap = _snap(diff_rms_db=-20.0, sum_rms_db=-10.0)
    assert stereo_width(snap) == pytest.approx(0.316, abs=0.01)


def test_stereo_width_missing_is_zero():
    assert stereo_width(_snap(diff_rms_db=-20.0)) == 0.0


def test_channel_level_difference_missing():
    assert channel_level_difference(_snap(left_rms_db=-10.0)) is None


def test_channel_count_shortcuts():
    empty = AnalysisSnapshot()
    mono = classify_topology(empty, channel_count=1)
    assert mono.topology == ChannelTopology.MONO
    assert mono.confidence == Confidence.HIGH
    surround = classify_topology(empty, channel_count=6)
    assert surround.topology == ChannelTopology.MULTICHANNEL
    assert surround.channel_count == 6


def test_empty_snapshot_is_unknown_low():
    topo = classify_topology(AnalysisSnapshot())
    assert topo.topology == ChannelTopology.UNKNOWN
    assert topo.confidence == Confidence.LOW


def test_limited_stereo_content_fallback():
    snap = _snap(diff_peak_db=-30.0, diff_rms_db=-40.0, sum_rms_db=-10.0, correlation=0.9)
    topo = classify_topology(snap)
    assert topo.topology == ChannelTopology.STEREO
    assert topo.confidence == Confidence.MEDIUM


def test_dual_mono_takes_priority_over_mid_side():
    snap = _snap(
        diff_peak_db=-120.0,
        diff_rms_db=-120.0,
        left_rms_db=-10.0,
        right_rms_db=-25.0,
        correlation=0.1,
    )
    assert classify_topology(snap).topology == ChannelTopology.DUAL_MONO


def test_threshold_override_changes_outcome():
    snap = _snap(diff_rms_db=-15.0, sum_rms_db=-10.0, correlation=0.7)
    topo = classify_topology(snap, config={"stereo": {"width_minimum": 0.9}})
    assert topo.topology == ChannelTopology.STEREO
    assert topo.confidence == Confidence.MEDIUM


def test_descriptions_cover_every_topology():
    assert set(TOPOLOGY_DESCRIPTIONS) == set(ChannelTopology)
    assert topology_description("not-a-topology") == TOPOLOGY_DESCRIPTIONS[ChannelTopology.UNKNOWN]
    assert topology_description("MONO") == TOPOLOGY_DESCRIPTIONS[ChannelTopology.MONO]


def test_mono_compatibility():
    assert is_mono_compatible(ChannelTopology.DUAL_MONO)
    assert is_mono_compatible(ChannelTopology.MONO)
    assert not is_mono_compatible(ChannelTopology.STEREO)


def test_true_stereo_without_correlation_is_medium():
    result = detect_true_stereo(_snap(diff_rms_db=-15.0, sum_rms_db=-10.0))
    assert result.is_true_stereo
    assert result.confidence == Confidence.MEDIUM


def test_mid_side_rejected_when_levels_are_close():
    snap = _snap(left_rms_db=-10.0, right_rms_db=-13.0, correlation=0.0)
    assert not detect_mid_side(snap).is_mid_side


def test_detectors_reject_empty_snapshot():
    snap = AnalysisSnapshot()
    assert not detect_dual_mono(snap).is_dual_mono
    assert not detect_mid_side(snap).is_mid_side


@pytest.mark.parametrize(
    "channels,topology,confidence",
    [
        (1, ChannelTopology.MONO, Confidence.HIGH),
        (2, ChannelTopology.STEREO, Confidence.LOW),
        (8, ChannelTopology.MULTICHANNEL, Confidence.HIGH),
        (0, ChannelTopology.UNKNOWN, Confidence.LOW),
    ],
)
def test_topology_from_channel_count(channels, topology, confidence):
    result = topology_from_channel_count(channels)
    assert result.topology == topology
    assert result.confidence == confidence
    assert result.channel_count == channels
