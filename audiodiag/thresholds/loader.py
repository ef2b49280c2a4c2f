from __future__ import annotations
import json

from audiodiag.thresholds.noise_modulation import build_noise_modulation_config
from audiodiag.thresholds.topology import build_topology_config

KNOWN_SECTIONS = ("topology", "noise_modulation")


def build_threshold_config(j: dict | None = None) -> dict:
    """
    Build the full threshold configuration from a parsed JSON document.

    Args:
        j: Mapping with optional ``topology`` and ``noise_modulation``
            override sections. ``None`` yields the defaults.

    Returns:
        Dictionary with fully merged ``topology`` and ``noise_modulation``
        sections.

    Raises:
        ValueError: If the document has unknown sections or any section
            fails validation. All problems are reported together.
    """
    j = j or {}
    if not isinstance(j, dict):
        raise ValueError("threshold configuration must be a JSON object.")
    errors: list[str] = []
    for key in j:
        if key not in KNOWN_SECTIONS:
            errors.append(f"unknown section: {key}")

    cfg: dict = {}
    try:
        cfg["topology"] = build_topology_config(j.get("topology"))
    except (TypeError, ValueError) as exc:
        errors.append(f"topology: {exc}")
    try:
        cfg["noise_modulation"] = build_noise_modulation_config(j.get("noise_modulation"))
    except (TypeError, ValueError) as exc:
        errors.append(f"noise_modulation: {exc}")

    if errors:
        raise ValueError("; ".join(errors))
    return cfg


def load_threshold_config(path: str) -> dict:
    """Load threshold overrides from a JSON file and merge with defaults."""
    with open(path, "r", encoding="utf-8") as f:
        j = json.load(f)
    return build_threshold_config(j)
