"""Async noise-floor modulation analysis over audio files."""
from __future__ import annotations
import asyncio
import logging
import time
from dataclasses import replace

from audiodiag.classify.noise_floor import (
    analyze_modulation_correlation,
    analyze_noise_floor_variation,
)
from audiodiag.classify.noise_modulation import classify_metrics
from audiodiag.io.extract import ExtractionError, MetricExtractor, SoundfileMetricExtractor
from audiodiag.types import ModulationAnalysis, ModulationClassification

logger = logging.getLogger(__name__)

MIN_CONFIDENT_WINDOWS = 10
FULL_CONFIDENCE = 0.85
FULL_LOW_CONFIDENCE = 0.4
QUICK_CONFIDENCE = 0.75
QUICK_LOW_CONFIDENCE = 0.3


def _classify_windows(
    windows: list[float],
    program_level_db: float | None,
    config: dict | None,
) -> ModulationAnalysis:
    noise = analyze_noise_floor_variation(windows, program_level_db, config)
    correlation = analyze_modulation_correlation(windows, config)
    classification = classify_metrics(noise, correlation, config)
    return ModulationAnalysis(
        classification=classification,
        confidence=0.0,
        window_count=len(windows),
        noise=noise,
        correlation=correlation,
        program_level_db=program_level_db,
    )


def _full(path: str, extractor: MetricExtractor, config: dict | None) -> ModulationAnalysis:
    windows = extractor.rms_windows(path)
    program_level_db = extractor.program_level_db(path)
    duration = extractor.probe(path).duration
    logger.debug("%s: %d RMS windows, program level %s dB", path, len(windows), program_level_db)
    result = replace(_classify_windows(windows, program_level_db, config), duration=duration)
    confident = len(windows) > MIN_CONFIDENT_WINDOWS and program_level_db is not None
    return _with_confidence(result, FULL_CONFIDENCE if confident else FULL_LOW_CONFIDENCE)


def _quick(path: str, extractor: MetricExtractor, config: dict | None) -> ModulationAnalysis:
    windows = extractor.rms_windows(path)
    logger.debug("%s: %d RMS windows", path, len(windows))
    result = _classify_windows(windows, None, config)
    confident = len(windows) > MIN_CONFIDENT_WINDOWS
    return _with_confidence(result, QUICK_CONFIDENCE if confident else QUICK_LOW_CONFIDENCE)


def _with_confidence(result: ModulationAnalysis, confidence: float) -> ModulationAnalysis:
    return replace(result, confidence=confidence)


def _elapsed_ms(started: float) -> int:
    return int(round((time.perf_counter() - started) * 1000.0))


async def analyze_noise_modulation(
    path: str,
    *,
    extractor: MetricExtractor | None = None,
    config: dict | None = None,
) -> ModulationAnalysis:
    """
    Full noise-floor modulation analysis of ``path``.

    Decodes the file for RMS windows and the program level, reads the
    duration from the header, then runs the noise floor, correlation and
    classification stages.

    Raises:
        ExtractionError: If the file cannot be decoded.
    """
    extractor = extractor or SoundfileMetricExtractor()
    started = time.perf_counter()
    result = await asyncio.to_thread(_full, path, extractor, config)
    return replace(result, analysis_time_ms=_elapsed_ms(started))


async def quick_check_noise_modulation(
    path: str,
    *,
    extractor: MetricExtractor | None = None,
    config: dict | None = None,
) -> ModulationAnalysis:
    """Single-pass check; never raises on extraction failure."""
    extractor = extractor or SoundfileMetricExtractor()
    started = time.perf_counter()
    try:
        result = await asyncio.to_thread(_quick, path, extractor, config)
        return replace(result, analysis_time_ms=_elapsed_ms(started))
    except ExtractionError as exc:
        logger.warning("noise modulation quick check degraded for %s: %s", path, exc)
        return ModulationAnalysis(
            classification=ModulationClassification(),
            confidence=0.0,
            error=str(exc),
            analysis_time_ms=_elapsed_ms(started),
        )
