"""Configurable spectral (and optional harmonic) feature extractor.

Per frame the extractor zero-pads the frame into an FFT block, takes its
magnitude spectrum, projects it onto the configured center frequencies and
evaluates each spectral routine. When harmonic features are enabled it then
estimates the pitch (or reads it from a precomputed pitch track), locates
harmonic peaks in the full spectrum and evaluates each harmonic routine.

All working buffers are allocated once per instance and reused for every
frame, so an instance must not be used from several threads at once. Use
``replicate()`` (or ``compute_parallel``) to run in parallel.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from ..global_config import (
    DEFAULT_FRAME_DURATION,
    DEFAULT_HIGH_PITCH,
    DEFAULT_HOP_DURATION,
    DEFAULT_LOW_PITCH,
    DEFAULT_PEAK_COUNT,
)
from . import harmonic
from .base import FeatureExtractor
from .catalog import (
    FEATURE_SET,
    HARMONIC_SET,
    HarmonicRoutine,
    SpectralRoutine,
    resolve_harmonic,
    resolve_spectral,
    split_feature_list,
)
from .config import SpectralParameters, resolve_parameters
from .errors import UnknownFeatureError, ensure_valid_range
from .frequency_map import FrequencyMap
from .pitch import make_pitch_estimator
from .transforms import magnitude_spectrum, next_power_of_two
from .vector import FeatureVector

logger = logging.getLogger(__name__)

PitchEstimator = Callable[[np.ndarray], float]


@dataclass(frozen=True)
class FeatureEntry:
    """One output column: its name and the routine computing it.

    ``routine`` is None when ``description`` did not resolve to a known
    feature. ``custom`` marks routines added by the caller rather than
    resolved from the catalog.
    """

    description: str
    routine: Callable[..., float] | None
    custom: bool = False


class _Buffers:
    """Per-instance scratch arrays reused across frames."""

    __slots__ = ("block", "zero_block", "spectrum", "mapped")

    def __init__(self, fft_size: int, n_frequencies: int) -> None:
        self.block = np.zeros(fft_size, dtype=np.float64)
        self.zero_block = np.zeros(fft_size, dtype=np.float64)
        self.spectrum = np.zeros(fft_size // 2 + 1, dtype=np.float64)
        self.mapped = np.zeros(n_frequencies, dtype=np.float64)


def _merge_custom(original: list[FeatureEntry], resolved: list[FeatureEntry]) -> list[FeatureEntry]:
    """Interleave re-resolved catalog entries with the custom entries of ``original``.

    ``resolved`` holds one entry per non-custom entry of ``original``, in order.
    """
    catalog_entries = iter(resolved)
    return [entry if entry.custom else next(catalog_entries) for entry in original]


class HarmonicPipeline:
    """Harmonic stage: pitch, harmonic peaks and harmonic routines.

    Args:
        entries: Harmonic feature entries in output order.
        peak_count: Number of harmonics to locate per frame.
        pitch_estimator: ``spectrum -> pitch`` callable used without a pitch track.
        low_pitch: Lower edge of the default estimator's search band (Hz).
        high_pitch: Upper edge of the default estimator's search band (Hz).
    """

    def __init__(
        self,
        entries: list[FeatureEntry],
        peak_count: int,
        pitch_estimator: PitchEstimator,
        low_pitch: float,
        high_pitch: float,
    ) -> None:
        if peak_count < 1:
            raise ValueError(f"peak_count must be >= 1, got {peak_count}")
        self.entries = entries
        self.peak_count = int(peak_count)
        self.pitch_estimator = pitch_estimator
        self.low_pitch = float(low_pitch)
        self.high_pitch = float(high_pitch)
        self.peaks = np.zeros(self.peak_count, dtype=np.intp)
        self.peak_frequencies = np.zeros(self.peak_count, dtype=np.float64)

    @property
    def descriptions(self) -> list[str]:
        return [e.description for e in self.entries]

    def compute(self, spectrum: np.ndarray, pitch: float, sampling_rate: int, out: np.ndarray) -> None:
        """Locate harmonic peaks of ``pitch`` and write each harmonic feature into ``out``."""
        harmonic.peaks(spectrum, self.peaks, self.peak_frequencies, sampling_rate, pitch)
        for j, entry in enumerate(self.entries):
            out[j] = entry.routine(spectrum, self.peaks, self.peak_frequencies)


class SpectralFeaturesExtractor(FeatureExtractor):
    """Extractor of spectral and (optionally) harmonic features.

    At least one spectral feature must be given. Harmonic features are
    enabled separately with ``include_harmonic_features`` and always follow
    the spectral ones in the output.

    Args:
        sampling_rate: Sampling rate (Hz).
        features: Delimited feature list (``, + - ; :``) or a sequence of
            feature names. ``"all"`` / ``"full"`` select ``FEATURE_SET``.
        frame_duration: Frame length in seconds (default 0.0256).
        hop_duration: Hop length in seconds (default 0.010).
        fft_size: FFT size; when smaller than the frame, the next power of
            two >= frame size is used instead.
        frequencies: Optional center frequencies (Hz) to project spectra onto.
            By default every FFT bin is used.
        parameters: ``SpectralParameters`` or a mapping with the keys
            ``minLevel``, ``noiseFrequency``, ``rolloffPercent``.
        strict: Raise ``UnknownFeatureError`` at construction for unknown
            tokens instead of at the first ``compute_from`` call.

    Raises:
        ValueError: If no feature is given or a frequency is out of range.
        UnknownFeatureError: With ``strict=True``, for an unknown token.
    """

    FEATURE_SET = FEATURE_SET
    HARMONIC_SET = HARMONIC_SET

    def __init__(
        self,
        sampling_rate: int,
        features: str | Sequence[str],
        frame_duration: float = DEFAULT_FRAME_DURATION,
        hop_duration: float = DEFAULT_HOP_DURATION,
        fft_size: int = 0,
        frequencies: Sequence[float] | np.ndarray | None = None,
        parameters: SpectralParameters | Mapping[str, Any] | None = None,
        strict: bool = False,
    ) -> None:
        super().__init__(sampling_rate, frame_duration, hop_duration)

        self._parameters = resolve_parameters(parameters)

        tokens = split_feature_list(features, FEATURE_SET)
        if not tokens:
            raise ValueError("At least one spectral feature must be specified")
        routines, descriptions = resolve_spectral(tokens, self._parameters)
        self._spectral = [FeatureEntry(d, r) for d, r in zip(descriptions, routines)]

        if fft_size >= self.frame_size:
            self._fft_size = int(fft_size)
        else:
            self._fft_size = next_power_of_two(self.frame_size)
            if fft_size:
                logger.debug(
                    "fft_size %d is smaller than frame size %d, using %d",
                    fft_size, self.frame_size, self._fft_size,
                )

        self._frequency_map = FrequencyMap(self.sampling_rate, self._fft_size, frequencies)
        self._buffers = _Buffers(self._fft_size, self._frequency_map.size)
        self._harmonic: HarmonicPipeline | None = None
        self._pitch_track: np.ndarray | None = None

        logger.debug(
            "Spectral extractor: sr=%d frame=%d hop=%d fft=%d features=%s",
            self.sampling_rate, self.frame_size, self.hop_size, self._fft_size, descriptions,
        )
        if strict:
            self.validate()

    # --- configuration -----------------------------------------------------

    @property
    def feature_descriptions(self) -> list[str]:
        names = [e.description for e in self._spectral]
        if self._harmonic is not None:
            names.extend(self._harmonic.descriptions)
        return names

    @property
    def spectral_descriptions(self) -> list[str]:
        return [e.description for e in self._spectral]

    @property
    def harmonic_descriptions(self) -> list[str]:
        return self._harmonic.descriptions if self._harmonic is not None else []

    @property
    def fft_size(self) -> int:
        return self._fft_size

    @property
    def frequencies(self) -> np.ndarray:
        return self._frequency_map.frequencies()

    @property
    def frequency_map(self) -> FrequencyMap:
        return self._frequency_map

    @property
    def parameters(self) -> SpectralParameters:
        return self._parameters

    @property
    def has_harmonic_features(self) -> bool:
        return self._harmonic is not None

    @property
    def peak_count(self) -> int:
        return self._harmonic.peak_count if self._harmonic is not None else 0

    @property
    def pitch_track(self) -> np.ndarray | None:
        return self._pitch_track

    def add_feature(self, name: str, routine: SpectralRoutine) -> None:
        """Append a spectral feature computed by ``routine(spectrum, frequencies)``.

        The new column goes after the existing spectral features and before
        any harmonic ones.
        """
        self._spectral.append(FeatureEntry(name, routine, custom=True))

    def include_harmonic_features(
        self,
        features: str | Sequence[str],
        peak_count: int = DEFAULT_PEAK_COUNT,
        pitch_estimator: PitchEstimator | None = None,
        low_pitch: float = DEFAULT_LOW_PITCH,
        high_pitch: float = DEFAULT_HIGH_PITCH,
        strict: bool = False,
    ) -> None:
        """Enable harmonic features.

        Calling this again replaces the previously enabled harmonic features.

        Args:
            features: Delimited harmonic feature list or sequence of names.
                ``"all"`` / ``"full"`` select ``HARMONIC_SET``.
            peak_count: Number of harmonic peaks to locate (default 10).
            pitch_estimator: ``spectrum -> pitch`` callable. Defaults to
                spectral peak picking within ``[low_pitch, high_pitch]``.
            low_pitch: Lower pitch bound in Hz (default 80).
            high_pitch: Upper pitch bound in Hz (default 400).
            strict: Raise ``UnknownFeatureError`` now for unknown tokens.
        """
        tokens = split_feature_list(features, HARMONIC_SET)
        routines, descriptions = resolve_harmonic(tokens)
        if pitch_estimator is None:
            pitch_estimator = make_pitch_estimator(self.sampling_rate, low_pitch, high_pitch)
        if self._harmonic is not None:
            logger.debug("Replacing harmonic features %s", self._harmonic.descriptions)

        self._harmonic = HarmonicPipeline(
            [FeatureEntry(d, r) for d, r in zip(descriptions, routines)],
            peak_count,
            pitch_estimator,
            low_pitch,
            high_pitch,
        )
        logger.debug("Harmonic features enabled: %s (peaks=%d)", descriptions, peak_count)
        if strict:
            self.validate()

    def add_harmonic_feature(self, name: str, routine: HarmonicRoutine) -> None:
        """Append a harmonic feature computed by ``routine(spectrum, peaks, peak_frequencies)``.

        Does nothing when harmonic features were never enabled.
        """
        if self._harmonic is None:
            logger.debug("Harmonic features not enabled, ignoring %r", name)
            return
        self._harmonic.entries.append(FeatureEntry(name, routine, custom=True))

    def set_pitch_track(self, pitch_track: Sequence[float] | np.ndarray | None) -> None:
        """Use precomputed pitches (one per hop) instead of estimating them.

        Pass None to go back to live estimation.
        """
        self._pitch_track = None if pitch_track is None else np.asarray(pitch_track, dtype=np.float64)

    def validate(self) -> None:
        """Raise UnknownFeatureError for the first feature without a routine."""
        entries = list(self._spectral)
        if self._harmonic is not None:
            entries.extend(self._harmonic.entries)
        for entry in entries:
            if entry.routine is None:
                raise UnknownFeatureError(entry.description)

    # --- computation -------------------------------------------------------

    def compute_from(self, samples: np.ndarray, start: int, end: int) -> list[FeatureVector]:
        """Compute one feature vector per frame starting in ``[start, end)``.

        Frames start at ``start``, ``start + hop_size``, ... and are kept while
        ``position + frame_size < end``; a trailing partial frame is dropped.

        Args:
            samples: 1-D signal.
            start: First sample position.
            end: End sample position (exclusive), at most ``len(samples)``.

        Returns:
            Feature vectors stamped with ``position / sampling_rate`` seconds.

        Raises:
            InvalidRangeError: If ``start >= end``.
            UnknownFeatureError: If a configured feature token is unknown.
            ValueError: If the range exceeds the signal or the pitch track.
        """
        ensure_valid_range(start, end, "starting pos", "ending pos")
        self.validate()

        samples = np.asarray(samples)
        if samples.ndim != 1:
            raise ValueError(f"samples must be 1-D, got shape {samples.shape}")
        if start < 0 or end > samples.shape[0]:
            raise ValueError(
                f"range [{start}, {end}) exceeds signal of {samples.shape[0]} samples"
            )

        frame_size = self.frame_size
        hop_size = self.hop_size
        n_frames = max(0, (end - frame_size - start - 1) // hop_size + 1)

        buf = self._buffers
        freqs = self._frequency_map.frequencies()
        spectral = self._spectral
        n_spectral = len(spectral)
        harmonic_stage = self._harmonic
        feature_count = n_spectral + (len(harmonic_stage.entries) if harmonic_stage else 0)

        pitch_track = self._pitch_track if harmonic_stage is not None else None
        pitch_pos = start // hop_size
        if pitch_track is not None and pitch_pos + n_frames > pitch_track.shape[0]:
            raise ValueError(
                f"pitch track has {pitch_track.shape[0]} values, "
                f"hop index {pitch_pos + n_frames - 1} is required"
            )

        vectors: list[FeatureVector] = []
        i = start
        while i + frame_size < end:
            np.copyto(buf.block, buf.zero_block)
            buf.block[:frame_size] = samples[i : i + frame_size]

            magnitude_spectrum(buf.block, out=buf.spectrum)
            self._frequency_map.project(buf.spectrum, out=buf.mapped)

            values = np.empty(feature_count, dtype=np.float64)
            for j, entry in enumerate(spectral):
                values[j] = entry.routine(buf.mapped, freqs)

            if harmonic_stage is not None:
                if pitch_track is None:
                    pitch = harmonic_stage.pitch_estimator(buf.spectrum)
                else:
                    pitch = pitch_track[pitch_pos]
                pitch_pos += 1
                harmonic_stage.compute(buf.spectrum, pitch, self.sampling_rate, values[n_spectral:])

            vectors.append(FeatureVector(values, i / self.sampling_rate))
            i += hop_size

        return vectors

    # --- replication -------------------------------------------------------

    def is_parallelizable(self) -> bool:
        return True

    def replicate(self) -> SpectralFeaturesExtractor:
        """Independent copy with the same configuration and fresh buffers.

        Catalog features are re-resolved from their descriptions; custom
        routines are carried over as-is at their original positions.
        Harmonic features are re-enabled with the same peak count and pitch
        estimator. The pitch track is shared by reference (it is only ever
        read).
        """
        frequencies = None if self._frequency_map.is_identity else self._frequency_map.frequencies()
        # construction always leaves at least one catalog entry
        copy = SpectralFeaturesExtractor(
            self.sampling_rate,
            [e.description for e in self._spectral if not e.custom],
            self.frame_duration,
            self.hop_duration,
            self._fft_size,
            frequencies,
            self._parameters,
        )
        copy._spectral = _merge_custom(self._spectral, copy._spectral)

        if self._harmonic is not None:
            h = self._harmonic
            copy.include_harmonic_features(
                [e.description for e in h.entries if not e.custom],
                h.peak_count,
                h.pitch_estimator,
                h.low_pitch,
                h.high_pitch,
            )
            copy._harmonic.entries = _merge_custom(h.entries, copy._harmonic.entries)

        copy._pitch_track = self._pitch_track
        logger.debug("Replicated extractor with features %s", copy.feature_descriptions)
        return copy

    def describe(self) -> dict[str, Any]:
        info = super().describe()
        info.update({
            "fft_size": self._fft_size,
            "frequency_count": self._frequency_map.size,
            "harmonic": self._harmonic is not None,
            "peak_count": self.peak_count,
            "parameters": self._parameters.as_dict(),
        })
        return info
