"""Metric extraction from audio files."""
from __future__ import annotations
import logging
import os
from typing import Protocol

import numpy as np

from audiodiag.io.audio import downmix, load_audio, probe_audio
from audiodiag.io.snapshot import SILENCE_FLOOR_DB
from audiodiag.metrics.correlation import mean_correlation
from audiodiag.metrics.levels import peak_dbfs_mono, rms_dbfs_mono, windowed_rms_dbfs
from audiodiag.types import (
    AnalysisSnapshot,
    AudioBuffer,
    AudioInfo,
    ChannelLevels,
    CorrelationStats,
    DiffLevels,
    SumLevels,
)

logger = logging.getLogger(__name__)


class ExtractionError(RuntimeError):
    """The audio file could not be decoded or measured."""


class MetricExtractor(Protocol):
    def probe(self, path: str) -> AudioInfo: ...

    def snapshot(self, path: str) -> AnalysisSnapshot: ...

    def rms_windows(self, path: str, window_seconds: float = 0.1) -> list[float]: ...

    def program_level_db(self, path: str) -> float | None: ...


def _floored(level_db: float) -> float:
    if not np.isfinite(level_db):
        return SILENCE_FLOOR_DB
    return float(level_db)


class SoundfileMetricExtractor:
    """
    Extract snapshot statistics and RMS windows with soundfile/numpy.

    Each call decodes the file afresh. Decoder failures surface as
    ExtractionError chained to the original exception.
    """

    def __init__(self, *, correlation_frame_seconds: float = 0.5, correlation_hop_seconds: float = 0.25):
        self.correlation_frame_seconds = correlation_frame_seconds
        self.correlation_hop_seconds = correlation_hop_seconds

    def _load(self, path: str) -> AudioBuffer:
        if not os.path.exists(path):
            raise ExtractionError(f"audio file not found: {path}")
        try:
            audio = load_audio(path)
        except (OSError, RuntimeError, ValueError) as exc:
            raise ExtractionError(f"failed to decode {path}: {exc}") from exc
        if audio.samples.shape[0] == 0:
            raise ExtractionError(f"no audio frames in {path}")
        for w in audio.warnings:
            logger.debug("%s: %s", path, w)
        return audio

    def probe(self, path: str) -> AudioInfo:
        if not os.path.exists(path):
            raise ExtractionError(f"audio file not found: {path}")
        try:
            return probe_audio(path)
        except (OSError, RuntimeError, ValueError) as exc:
            raise ExtractionError(f"failed to probe {path}: {exc}") from exc

    def snapshot(self, path: str) -> AnalysisSnapshot:
        audio = self._load(path)
        if audio.channels != 2:
            raise ExtractionError(
                f"snapshot requires stereo audio, got {audio.channels} channel(s)"
            )
        left = audio.samples[:, 0]
        right = audio.samples[:, 1]
        diff = left - right
        mid = 0.5 * (left + right)
        return AnalysisSnapshot(
            diff=DiffLevels(
                diff_peak_db=_floored(peak_dbfs_mono(diff)),
                diff_rms_db=_floored(rms_dbfs_mono(diff)),
            ),
            sum=SumLevels(
                sum_peak_db=_floored(peak_dbfs_mono(mid)),
                sum_rms_db=_floored(rms_dbfs_mono(mid)),
            ),
            channels=ChannelLevels(
                left_rms_db=_floored(rms_dbfs_mono(left)),
                right_rms_db=_floored(rms_dbfs_mono(right)),
            ),
            correlation=CorrelationStats(
                correlation=mean_correlation(
                    audio.samples,
                    audio.fs,
                    frame_seconds=self.correlation_frame_seconds,
                    hop_seconds=self.correlation_hop_seconds,
                )
            ),
        )

    def rms_windows(self, path: str, window_seconds: float = 0.1) -> list[float]:
        audio = self._load(path)
        return windowed_rms_dbfs(downmix(audio), audio.fs, window_seconds=window_seconds)

    def program_level_db(self, path: str) -> float | None:
        audio = self._load(path)
        level = rms_dbfs_mono(downmix(audio))
        if not np.isfinite(level):
            return None
        return level
