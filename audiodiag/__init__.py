"""
audiodiag - Audio Diagnostics

Channel topology and noise-floor modulation classification for audio files.
"""
from audiodiag.version import __version__
from audiodiag.types import (
    ChannelTopology,
    Confidence,
    NoiseModulationStatus,
    ModulationType,
    AnalysisSnapshot,
    TopologyResult,
    NoiseFloorMetrics,
    CorrelationMetrics,
    ModulationClassification,
    ModulationAnalysis,
)

__all__ = [
    "__version__",
    "ChannelTopology",
    "Confidence",
    "NoiseModulationStatus",
    "ModulationType",
    "AnalysisSnapshot",
    "TopologyResult",
    "NoiseFloorMetrics",
    "CorrelationMetrics",
    "ModulationClassification",
    "ModulationAnalysis",
]
