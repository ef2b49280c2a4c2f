"""Boundary parsing for metric snapshots produced by extraction."""
from __future__ import annotations
from typing import Any
import math

from audiodiag.types import (
    AnalysisSnapshot,
    ChannelLevels,
    CorrelationStats,
    DiffLevels,
    SumLevels,
)

# Digital silence reads as -inf dB; keep it finite and below every threshold.
SILENCE_FLOOR_DB = -144.0

SNAPSHOT_FIELDS = {
    "diff": ("diff_peak_db", "diff_rms_db"),
    "sum": ("sum_peak_db", "sum_rms_db"),
    "channels": ("left_rms_db", "right_rms_db"),
    "correlation": ("correlation",),
}


class MalformedSnapshotError(ValueError):
    """A snapshot is structurally incomplete (groups or fields absent)."""


def _optional_number(v: Any, path: str, errors: list[str]) -> float | None:
    if v is None:
        return None
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        errors.append(f"{path} must be a number or null.")
        return None
    v = float(v)
    if math.isnan(v):
        return None
    if v == float("-inf"):
        return SILENCE_FLOOR_DB
    if math.isinf(v):
        errors.append(f"{path} must be finite.")
        return None
    return v


def snapshot_from_dict(j: dict) -> AnalysisSnapshot:
    """
    Build an AnalysisSnapshot from a nested mapping.

    Every group in ``SNAPSHOT_FIELDS`` and every field inside it must be
    present; a field may be ``null`` to mark a missing measurement. NaN is
    normalised to ``None`` and -inf to ``SILENCE_FLOOR_DB``.
    Correlation outside [-1, 1] is rejected.

    Raises:
        MalformedSnapshotError: Listing every structural problem found.
    """
    if not isinstance(j, dict):
        raise MalformedSnapshotError("snapshot must be an object.")
    errors: list[str] = []
    values: dict[str, dict[str, float | None]] = {}

    for group, fields in SNAPSHOT_FIELDS.items():
        if group not in j:
            errors.append(f"missing key: {group}")
            continue
        section = j[group]
        if not isinstance(section, dict):
            errors.append(f"{group} must be an object.")
            continue
        values[group] = {}
        for name in fields:
            if name not in section:
                errors.append(f"missing key: {group}.{name}")
                continue
            values[group][name] = _optional_number(section[name], f"{group}.{name}", errors)

    corr = values.get("correlation", {}).get("correlation")
    if corr is not None and not -1.0 <= corr <= 1.0:
        errors.append("correlation.correlation must be within [-1, 1].")

    if errors:
        raise MalformedSnapshotError("; ".join(errors))

    return AnalysisSnapshot(
        diff=DiffLevels(**values["diff"]),
        sum=SumLevels(**values["sum"]),
        channels=ChannelLevels(**values["channels"]),
        correlation=CorrelationStats(**values["correlation"]),
    )


def snapshot_to_dict(snapshot: AnalysisSnapshot) -> dict:
    """Inverse of ``snapshot_from_dict``."""
    return {
        group: {name: getattr(getattr(snapshot, group), name) for name in fields}
        for group, fields in SNAPSHOT_FIELDS.items()
    }
