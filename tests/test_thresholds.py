from __future__ import annotations

import json

import pytest

from audiodiag.thresholds.loader import build_threshold_config, load_threshold_config
from audiodiag.thresholds.merge import merge_config
from audiodiag.thresholds.noise_modulation import (
    DEFAULT_NOISE_MODULATION_CONFIG,
    build_noise_modulation_config,
    depth_boundaries,
)
from audiodiag.thresholds.topology import DEFAULT_TOPOLOGY_THRESHOLDS, build_topology_config


def test_merge_config_is_recursive_and_pure():
    base = {"a": {"x": 1, "y": 2}, "b": 3}
    merged = merge_config(base, {"a": {"y": 5}})
    assert merged == {"a": {"x": 1, "y": 5}, "b": 3}
    assert base == {"a": {"x": 1, "y": 2}, "b": 3}
    assert merge_config(base, None) is base


def test_defaults_round_trip():
    assert build_topology_config() == DEFAULT_TOPOLOGY_THRESHOLDS
    cfg = build_noise_modulation_config()
    assert depth_boundaries(cfg) == (3.0, 6.0, 10.0, 15.0)
    assert cfg["noise_floor"]["min_window_count"] == DEFAULT_NOISE_MODULATION_CONFIG["noise_floor"]["min_window_count"]
    assert isinstance(cfg["correlation"]["min_window_count"], int)


def test_depth_table_must_ascend():
    with pytest.raises(ValueError, match="strictly increasing"):
        build_noise_modulation_config({"modulation_depth": {"noticeable": 12.0}})


def test_depth_minimal_must_be_positive():
    with pytest.raises(ValueError, match="minimal"):
        build_noise_modulation_config({"modulation_depth": {"minimal": 0.0}})


def test_topology_validation():
    with pytest.raises(ValueError, match="correlation_min"):
        build_topology_config({"mid_side": {"correlation_min": 0.5, "correlation_max": 0.1}})
    with pytest.raises(ValueError, match="must be an object"):
        build_topology_config({"stereo": 0.5})


def test_build_threshold_config_collects_errors():
    with pytest.raises(ValueError) as excinfo:
        build_threshold_config({
            "bogus": {},
            "noise_modulation": {"modulation_depth": {"severe": 1.0}},
        })
    message = str(excinfo.value)
    assert "unknown section: bogus" in message
    assert "noise_modulation:" in message


def test_load_threshold_config(tmp_path):
    path = tmp_path / "thresholds.json"
    path.write_text(
        json.dumps({"topology": {"stereo": {"width_minimum": 0.1}}}),
        encoding="utf-8",
    )
    cfg = load_threshold_config(str(path))
    assert cfg["topology"]["stereo"]["width_minimum"] == 0.1
    assert cfg["topology"]["stereo"]["correlation_min"] == 0.3
    assert depth_boundaries(cfg["noise_modulation"]) == (3.0, 6.0, 10.0, 15.0)
