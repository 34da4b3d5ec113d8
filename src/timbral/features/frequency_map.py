"""Frequency axis onto which each frame's spectrum is projected."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np


class FrequencyMap:
    """Precomputed frequency axis for one extractor configuration.

    Without explicit center frequencies the map is the identity over the
    FFT bins: bin ``k`` sits at ``k * resolution`` for ``k`` in
    ``[0, fft_size // 2]``. With explicit center frequencies, bin ``i`` of the
    projected spectrum is read from full-spectrum bin
    ``floor(freq[i] / resolution) + 1``.

    The axis and the lookup table are computed once and are read-only.
    """

    def __init__(
        self,
        sampling_rate: int,
        fft_size: int,
        frequencies: Sequence[float] | np.ndarray | None = None,
    ) -> None:
        if sampling_rate <= 0:
            raise ValueError(f"sampling_rate must be positive, got {sampling_rate}")
        if fft_size < 2:
            raise ValueError(f"fft_size must be >= 2, got {fft_size}")
        self.sampling_rate = int(sampling_rate)
        self.fft_size = int(fft_size)
        self.resolution = self.sampling_rate / self.fft_size
        self.spectrum_size = self.fft_size // 2 + 1

        if frequencies is None:
            freqs = np.arange(self.spectrum_size, dtype=np.float64) * self.resolution
            positions = None
        else:
            freqs = np.array(frequencies, dtype=np.float64)
            if freqs.ndim != 1 or freqs.size == 0:
                raise ValueError("frequencies must be a non-empty 1-D sequence")
            if np.any(freqs < 0):
                raise ValueError("frequencies must be non-negative")
            positions = (np.floor(freqs / self.resolution) + 1).astype(np.intp)
            if positions.max() >= self.spectrum_size:
                bad = int(np.argmax(positions >= self.spectrum_size))
                raise ValueError(
                    f"frequency {freqs[bad]} Hz maps to bin {positions[bad]}, "
                    f"beyond the last spectrum bin ({self.spectrum_size - 1})"
                )
            positions.flags.writeable = False

        freqs.flags.writeable = False
        self._frequencies = freqs
        self._positions = positions

    @property
    def is_identity(self) -> bool:
        return self._positions is None

    @property
    def size(self) -> int:
        return int(self._frequencies.shape[0])

    def frequencies(self) -> np.ndarray:
        """Center frequencies (Hz), read-only."""
        return self._frequencies

    @property
    def positions(self) -> np.ndarray | None:
        """Full-spectrum bin index per center frequency (None for the identity map)."""
        return self._positions

    def project(self, spectrum: np.ndarray, out: np.ndarray | None = None) -> np.ndarray:
        """Project a full magnitude spectrum onto the center frequencies.

        Args:
            spectrum: Full magnitude spectrum of ``fft_size // 2 + 1`` bins.
            out: Optional buffer of ``size`` elements to write into.

        Returns:
            The projected spectrum (``out`` when given).
        """
        if out is None:
            out = np.empty(self.size, dtype=np.float64)
        if self._positions is None:
            np.copyto(out, spectrum)
        else:
            np.take(spectrum, self._positions, out=out)
        return out
