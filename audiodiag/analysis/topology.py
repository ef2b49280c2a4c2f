"""Async topology detection over audio files."""
from __future__ import annotations
import asyncio
import logging
from dataclasses import replace

from audiodiag.classify.topology import classify_topology, topology_from_channel_count
from audiodiag.io.extract import ExtractionError, MetricExtractor, SoundfileMetricExtractor
from audiodiag.types import AnalysisSnapshot, ChannelTopology, Confidence, TopologyResult

logger = logging.getLogger(__name__)


def _measure(path: str, extractor: MetricExtractor, config: dict | None) -> TopologyResult:
    info = extractor.probe(path)
    logger.debug("%s: %d channel(s), layout %s", path, info.channels, info.channel_layout)
    if info.channels != 2:
        result = classify_topology(AnalysisSnapshot(), info.channels, config)
    else:
        result = classify_topology(extractor.snapshot(path), info.channels, config)
    return replace(result, channel_layout=info.channel_layout)


def _probe_only(path: str, extractor: MetricExtractor) -> TopologyResult:
    info = extractor.probe(path)
    result = topology_from_channel_count(info.channels)
    return replace(result, channel_layout=info.channel_layout)


async def detect_topology(
    path: str,
    *,
    extractor: MetricExtractor | None = None,
    config: dict | None = None,
) -> TopologyResult:
    """
    Decode ``path`` and classify its channel topology.

    Raises:
        ExtractionError: If the file cannot be probed or decoded.
    """
    extractor = extractor or SoundfileMetricExtractor()
    return await asyncio.to_thread(_measure, path, extractor, config)


async def quick_check_topology(
    path: str,
    *,
    extractor: MetricExtractor | None = None,
) -> TopologyResult:
    """
    Header-only check: topology implied by the channel count.

    Nothing is decoded; two-channel files come back as STEREO at LOW
    confidence. A probe failure yields UNKNOWN/LOW instead of raising.
    """
    extractor = extractor or SoundfileMetricExtractor()
    try:
        return await asyncio.to_thread(_probe_only, path, extractor)
    except ExtractionError as exc:
        logger.warning("topology quick check degraded for %s: %s", path, exc)
        return TopologyResult(
            ChannelTopology.UNKNOWN,
            Confidence.LOW,
            details={"error": str(exc)},
            channel_count=0,
            notes=("Audio could not be analyzed",),
        )
