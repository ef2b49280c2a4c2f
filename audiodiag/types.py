from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

import numpy as np


class ChannelTopology(str, Enum):
    MONO = "MONO"
    STEREO = "STEREO"
    DUAL_MONO = "DUAL_MONO"
    MID_SIDE = "MID_SIDE"
    MULTICHANNEL = "MULTICHANNEL"
    UNKNOWN = "UNKNOWN"


class Confidence(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def score(self) -> float:
        """Numeric confidence; LOW stays at or below the degraded-mode cutoff."""
        return CONFIDENCE_SCORES[self]


CONFIDENCE_SCORES = {
    Confidence.HIGH: 0.9,
    Confidence.MEDIUM: 0.7,
    Confidence.LOW: 0.4,
}


class NoiseModulationStatus(str, Enum):
    CLEAN = "CLEAN"
    MINIMAL = "MINIMAL"
    NOTICEABLE = "NOTICEABLE"
    OBVIOUS = "OBVIOUS"
    SEVERE = "SEVERE"


class ModulationType(str, Enum):
    NONE = "NONE"
    BREATHING = "BREATHING"
    PUMPING = "PUMPING"
    GATING_ARTIFACTS = "GATING_ARTIFACTS"
    MIXED = "MIXED"


@dataclass(frozen=True)
class AudioBuffer:
    samples: np.ndarray
    fs: float
    duration: float
    channels: int
    backend: str
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AudioInfo:
    channels: int
    channel_layout: str = "unknown"
    duration: float | None = None


@dataclass(frozen=True)
class DiffLevels:
    diff_peak_db: float | None = None
    diff_rms_db: float | None = None


@dataclass(frozen=True)
class SumLevels:
    sum_peak_db: float | None = None
    sum_rms_db: float | None = None


@dataclass(frozen=True)
class ChannelLevels:
    left_rms_db: float | None = None
    right_rms_db: float | None = None


@dataclass(frozen=True)
class CorrelationStats:
    correlation: float | None = None


@dataclass(frozen=True)
class AnalysisSnapshot:
    diff: DiffLevels = field(default_factory=DiffLevels)
    sum: SumLevels = field(default_factory=SumLevels)
    channels: ChannelLevels = field(default_factory=ChannelLevels)
    correlation: CorrelationStats = field(default_factory=CorrelationStats)


@dataclass(frozen=True)
class DualMonoResult:
    is_dual_mono: bool
    confidence: Confidence


@dataclass(frozen=True)
class MidSideResult:
    is_mid_side: bool
    confidence: Confidence
    details: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TrueStereoResult:
    is_true_stereo: bool
    stereo_width: float
    confidence: Confidence


@dataclass(frozen=True)
class TopologyResult:
    topology: ChannelTopology
    confidence: Confidence
    details: Mapping[str, Any] = field(default_factory=dict)
    channel_count: int = 2
    notes: tuple[str, ...] = ()
    channel_layout: str = "unknown"


@dataclass(frozen=True)
class NoiseFloorMetrics:
    noise_floor_db: float
    modulation_depth_db: float = 0.0
    quiet_window_count: int = 0
    variance_db: float = 0.0
    min_noise_floor_db: float | None = None
    max_noise_floor_db: float | None = None


@dataclass(frozen=True)
class CorrelationMetrics:
    program_noise_correlation: float = 0.0
    breathing_event_rate: float = 0.0
    pumping_event_rate: float = 0.0
    has_breathing: bool = False
    has_pumping: bool = False


@dataclass(frozen=True)
class ModulationClassification:
    status: NoiseModulationStatus = NoiseModulationStatus.CLEAN
    modulation_type: ModulationType = ModulationType.NONE
    modulation_score: int = 0
    noise_floor_db: float = 0.0
    modulation_depth_db: float = 0.0
    has_breathing: bool = False
    has_pumping: bool = False
    description: str = ""
    recommendations: tuple[str, ...] = ()


@dataclass(frozen=True)
class ModulationAnalysis:
    """Facade result: classification plus the statistics it was built from."""
    classification: ModulationClassification
    confidence: float
    window_count: int = 0
    noise: NoiseFloorMetrics | None = None
    correlation: CorrelationMetrics | None = None
    program_level_db: float | None = None
    error: str | None = None
    duration: float | None = None
    analysis_time_ms: int | None = None

    @property
    def status(self) -> NoiseModulationStatus:
        return self.classification.status
