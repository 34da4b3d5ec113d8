"""Pitch estimation from a single magnitude spectrum."""

import numpy as np


def from_spectral_peaks(spectrum, sampling_rate, low=80.0, high=400.0):
    """Estimate pitch as the first prominent spectral peak in ``[low, high]``.

    A bin counts as a peak when it is strictly larger than its two
    neighbours on each side.

    Parameters
    ----------
    spectrum : np.ndarray
        Full magnitude spectrum (``fft_size // 2 + 1`` bins).
    sampling_rate : int
        Sampling rate (Hz).
    low : float
        Lower edge of the pitch search band (Hz, default 80).
    high : float
        Upper edge of the pitch search band (Hz, default 400).

    Returns
    -------
    float
        Pitch in Hz; the band's lower edge when no peak is found.
    """
    n_bins = spectrum.shape[0]
    resolution = sampling_rate / (2.0 * (n_bins - 1))
    start = max(int(low / resolution) + 1, 2)
    end = min(int(high / resolution) + 1, n_bins - 3)

    s = spectrum
    for k in range(start, end + 1):
        if s[k] > s[k - 1] and s[k] > s[k - 2] and s[k] > s[k + 1] and s[k] > s[k + 2]:
            return float(k * resolution)
    return float(start * resolution)


def make_pitch_estimator(sampling_rate, low=80.0, high=400.0):
    """Bind ``from_spectral_peaks`` to a sampling rate and a pitch band.

    Returns a ``spectrum -> pitch`` callable.
    """
    if low >= high:
        raise ValueError(f"low pitch ({low}) must be below high pitch ({high})")

    def estimate(spectrum):
        return from_spectral_peaks(spectrum, sampling_rate, low, high)

    return estimate
