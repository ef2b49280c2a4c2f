"""Async facades: decode an audio file, then classify."""

from audiodiag.analysis.noise_modulation import (
    analyze_noise_modulation,
    quick_check_noise_modulation,
)
from audiodiag.analysis.topology import detect_topology, quick_check_topology

__all__ = [
    "analyze_noise_modulation",
    "quick_check_noise_modulation",
    "detect_topology",
    "quick_check_topology",
]
