"""Audio decoding for statistic extraction."""
from __future__ import annotations
import json
import logging
import shutil
import subprocess
import warnings as py_warnings
import numpy as np
from audiodiag.types import AudioBuffer, AudioInfo

logger = logging.getLogger(__name__)


def _decode_soundfile(path: str) -> tuple[np.ndarray, float, list[str]]:
    """Decode using soundfile (libsndfile)."""
    try:
        import soundfile as sf
    except ImportError as exc:
        raise RuntimeError("soundfile backend not available.") from exc

    with py_warnings.catch_warnings(record=True) as w:
        py_warnings.simplefilter("always")
        data, fs = sf.read(path, always_2d=True, dtype="float64")
    warn_list = [str(wi.message) for wi in w]
    return data, float(fs), warn_list


def _ffprobe_info(path: str) -> dict:
    """Return the first audio stream and container format from ffprobe."""
    ffprobe = shutil.which("ffprobe")
    if not ffprobe:
        raise RuntimeError("ffprobe not found for ffmpeg backend.")
    cmd = [
        ffprobe,
        "-v", "error",
        "-select_streams", "a:0",
        "-show_entries", "stream=sample_rate,channels,channel_layout:format=duration",
        "-of", "json",
        path,
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
    if proc.returncode != 0:
        raise ValueError(f"ffprobe failed: {proc.stderr.strip()}")
    info = json.loads(proc.stdout)
    streams = info.get("streams", [])
    if not streams:
        raise ValueError("ffprobe reported no audio streams.")
    stream = dict(streams[0])
    stream["duration"] = info.get("format", {}).get("duration")
    return stream


def _decode_ffmpeg(path: str) -> tuple[np.ndarray, float, list[str]]:
    """Decode using ffmpeg to raw float32 PCM."""
    ffmpeg = shutil.which("ffmpeg")
    if not ffmpeg:
        raise RuntimeError("ffmpeg backend not available.")
    stream = _ffprobe_info(path)
    fs, ch = int(stream["sample_rate"]), int(stream["channels"])
    cmd = [
        ffmpeg,
        "-v", "warning",
        "-i", path,
        "-f", "f32le",
        "-acodec", "pcm_f32le",
        "-vn",
        "pipe:1",
    ]
    proc = subprocess.run(cmd, capture_output=True, check=False)
    warn_list = [line for line in proc.stderr.decode("utf-8", errors="replace").splitlines() if line.strip()]
    if proc.returncode != 0:
        raise ValueError("ffmpeg decode failed.")
    data = np.frombuffer(proc.stdout, dtype=np.float32)
    if ch > 0:
        n = (data.size // ch) * ch
        if n != data.size:
            warn_list.append("ffmpeg: trimmed partial frame at end of stream.")
            data = data[:n]
        data = data.reshape(-1, ch)
    return data.astype(np.float64), float(fs), warn_list


def load_audio(path: str) -> AudioBuffer:
    """
    Load an audio file as float64 frames shaped (n, channels).

    Decodes WAV, FLAC and AIFF via soundfile and falls back to ffmpeg
    when soundfile cannot read the file. The native channel count is kept.
    """
    warnings_list: list[str] = []
    backend = "soundfile"
    try:
        data, fs, warn_list = _decode_soundfile(path)
        warnings_list.extend(warn_list)
    except Exception as exc:
        logger.debug("soundfile could not decode %s: %s", path, exc)
        warnings_list.append(f"soundfile decode failed: {exc}")
        backend = "ffmpeg"
        data, fs, warn_list = _decode_ffmpeg(path)
        warnings_list.extend(warn_list)

    data = np.asarray(data, dtype=np.float64)
    if data.ndim == 1:
        data = data.reshape(-1, 1)
    if data.ndim != 2:
        raise ValueError("Decoded audio must be 1D or 2D array.")
    return AudioBuffer(
        samples=data,
        fs=float(fs),
        duration=data.shape[0] / float(fs),
        channels=int(data.shape[1]),
        backend=backend,
        warnings=warnings_list,
    )


# Layouts ffmpeg assumes when a container does not store one.
DEFAULT_CHANNEL_LAYOUTS = {
    1: "mono",
    2: "stereo",
    3: "2.1",
    4: "4.0",
    5: "5.0",
    6: "5.1",
    7: "6.1",
    8: "7.1",
}


def probe_audio(path: str) -> AudioInfo:
    """Read channel count, layout and duration from the header without decoding."""
    try:
        import soundfile as sf
        info = sf.info(path)
        channels = int(info.channels)
        return AudioInfo(
            channels=channels,
            channel_layout=DEFAULT_CHANNEL_LAYOUTS.get(channels, "unknown"),
            duration=float(info.duration),
        )
    except Exception as exc:
        logger.debug("soundfile could not probe %s: %s", path, exc)
    stream = _ffprobe_info(path)
    duration = stream.get("duration")
    return AudioInfo(
        channels=int(stream.get("channels") or 0),
        channel_layout=stream.get("channel_layout") or "unknown",
        duration=float(duration) if duration is not None else None,
    )


def downmix(audio: AudioBuffer) -> np.ndarray:
    """Average all channels into a mono signal."""
    if audio.channels == 1:
        return audio.samples[:, 0]
    return np.mean(audio.samples, axis=1).astype(np.float64)
