"""Pipeline for extracting spectral/harmonic features from audio files."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import librosa

from ..features import SpectralFeaturesExtractor, statistics
from ..global_config import (
    DEFAULT_FRAME_DURATION,
    DEFAULT_HIGH_PITCH,
    DEFAULT_HOP_DURATION,
    DEFAULT_LOW_PITCH,
    DEFAULT_PEAK_COUNT,
    RAW_AUDIO_DIR,
)

logger = logging.getLogger(__name__)

AUDIO_SUFFIXES = frozenset({".wav", ".flac", ".ogg", ".mp3"})


def _resolve_audio_files(files: list[Path] | None, raw_audio_dir: Path) -> list[Path]:
    """Return list of audio paths: explicit files if given, else all audio in raw_audio_dir."""
    if files:
        return [Path(p).resolve() for p in files]
    if not raw_audio_dir.exists():
        return []
    return sorted(p for p in raw_audio_dir.iterdir() if p.suffix.lower() in AUDIO_SUFFIXES)


def build_extractor(
    sr: int,
    *,
    features: str,
    harmonic_features: str | None = None,
    frame_duration: float = DEFAULT_FRAME_DURATION,
    hop_duration: float = DEFAULT_HOP_DURATION,
    fft_size: int = 0,
    parameters: Mapping[str, Any] | None = None,
    peak_count: int = DEFAULT_PEAK_COUNT,
    low_pitch: float = DEFAULT_LOW_PITCH,
    high_pitch: float = DEFAULT_HIGH_PITCH,
) -> SpectralFeaturesExtractor:
    """Build a validated extractor for one sampling rate.

    Unknown feature tokens raise here rather than mid-run.
    """
    extractor = SpectralFeaturesExtractor(
        sr,
        features,
        frame_duration=frame_duration,
        hop_duration=hop_duration,
        fft_size=fft_size,
        parameters=parameters,
        strict=True,
    )
    if harmonic_features:
        extractor.include_harmonic_features(
            harmonic_features,
            peak_count=peak_count,
            low_pitch=low_pitch,
            high_pitch=high_pitch,
            strict=True,
        )
    return extractor


def _failure_result(message: str) -> dict:
    return {
        "success": False,
        "total": 0,
        "succeeded": 0,
        "failed": 0,
        "skipped": 0,
        "message": message,
        "items": [],
        "failures": [],
    }


def run_features(
    *,
    audio_files: list[Path] | None = None,
    raw_audio_dir: Path = RAW_AUDIO_DIR,
    features: str = "all",
    harmonic_features: str | None = None,
    frame_duration: float = DEFAULT_FRAME_DURATION,
    hop_duration: float = DEFAULT_HOP_DURATION,
    fft_size: int = 0,
    parameters: Mapping[str, Any] | None = None,
    peak_count: int = DEFAULT_PEAK_COUNT,
    low_pitch: float = DEFAULT_LOW_PITCH,
    high_pitch: float = DEFAULT_HIGH_PITCH,
    workers: int | None = None,
) -> dict:
    """Extract features for audio file(s) and summarize them per file.

    If audio_files is None or empty, uses all audio files in raw_audio_dir.
    Each file is loaded mono at its native sampling rate. With ``workers``
    greater than 1 the frames are split over replicated extractors.

    The feature configuration is validated against a 44.1 kHz extractor
    before any file is loaded, so an unknown token fails the whole run.

    Returns:
        Dict with success, total, succeeded, failed, skipped, message, items, failures.
        Each successful item carries ``num_frames``, ``sample_rate``,
        ``feature_count`` and per-feature ``stats``.
    """
    try:
        build_extractor(
            44100,
            features=features,
            harmonic_features=harmonic_features,
            frame_duration=frame_duration,
            hop_duration=hop_duration,
            fft_size=fft_size,
            parameters=parameters,
            peak_count=peak_count,
            low_pitch=low_pitch,
            high_pitch=high_pitch,
        )
    except ValueError as e:
        return _failure_result(f"Invalid feature configuration: {e}")

    paths = _resolve_audio_files(audio_files, raw_audio_dir)
    if not paths:
        return {
            "success": True,
            "total": 0,
            "succeeded": 0,
            "failed": 0,
            "skipped": 0,
            "message": "No audio files to process.",
            "items": [],
            "failures": [],
        }

    extractors: dict[int, SpectralFeaturesExtractor] = {}
    succeeded = 0
    failed = 0
    items: list[dict] = []
    failures: list[dict] = []

    for audio_path in paths:
        if not audio_path.exists():
            failed += 1
            failures.append({"item": str(audio_path), "reason": "File not found"})
            items.append({"file": str(audio_path), "status": "failed", "detail": "File not found"})
            continue

        try:
            y, sr = librosa.load(audio_path, sr=None, mono=True)
            sr = int(sr)
            extractor = extractors.get(sr)
            if extractor is None:
                extractor = build_extractor(
                    sr,
                    features=features,
                    harmonic_features=harmonic_features,
                    frame_duration=frame_duration,
                    hop_duration=hop_duration,
                    fft_size=fft_size,
                    parameters=parameters,
                    peak_count=peak_count,
                    low_pitch=low_pitch,
                    high_pitch=high_pitch,
                )
                extractors[sr] = extractor

            t0 = time.perf_counter()
            if len(y) <= extractor.frame_size:
                vectors = []
            elif workers and workers > 1:
                vectors = extractor.compute_parallel(y, workers=workers)
            else:
                vectors = extractor.compute(y)
            elapsed = time.perf_counter() - t0

            succeeded += 1
            items.append({
                "file": audio_path.name,
                "status": "success",
                "sample_rate": sr,
                "duration_sec": float(len(y) / sr),
                "num_frames": len(vectors),
                "feature_count": extractor.feature_count,
                "fft_size": extractor.fft_size,
                "elapsed_s": elapsed,
                "stats": statistics(vectors, extractor.feature_descriptions),
            })
        except Exception as e:
            logger.warning("Feature extraction failed for %s: %s", audio_path, e)
            failed += 1
            failures.append({"item": str(audio_path), "reason": str(e)})
            items.append({"file": audio_path.name, "status": "failed", "detail": str(e)})

    return {
        "success": failed == 0,
        "total": len(paths),
        "succeeded": succeeded,
        "failed": failed,
        "skipped": 0,
        "message": f"Processed {len(paths)} file(s). Succeeded: {succeeded}, failed: {failed}.",
        "items": items,
        "failures": failures,
    }
