from __future__ import annotations


def merge_config(base: dict, overrides: dict | None) -> dict:
    """Recursively overlay ``overrides`` on ``base`` without mutating either."""
    if not overrides:
        return base
    merged = {**base}
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merged[key] = merge_config(base[key], value)
        else:
            merged[key] = value
    return merged
