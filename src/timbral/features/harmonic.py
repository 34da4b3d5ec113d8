"""Harmonic descriptors computed from a spectrum and its harmonic peaks.

Harmonic functions receive the full (unmapped) magnitude spectrum, the bin
position of each harmonic peak and the peak frequencies. Peak slot ``i``
holds harmonic ``i + 1``. A slot with position 0 is unresolved (the harmonic
did not fit below Nyquist) and is skipped.
"""

import numpy as np

EPS = 1e-10


def peaks(spectrum, peak_positions, peak_frequencies, sampling_rate, pitch):
    """Locate harmonic peaks of ``pitch`` in ``spectrum``, in place.

    For harmonic ``h`` the search window is centered on bin
    ``h * pitch / resolution`` with half-width ``pitch / (2 * resolution)``.
    The strongest bin in the window becomes the peak. Once a window crosses
    Nyquist, that slot and all later ones are left unresolved.

    Parameters
    ----------
    spectrum : np.ndarray
        Full magnitude spectrum (``fft_size // 2 + 1`` bins).
    peak_positions : np.ndarray
        Integer output buffer; one slot per harmonic.
    peak_frequencies : np.ndarray
        Float output buffer, same length as ``peak_positions``.
    sampling_rate : int
        Sampling rate (Hz).
    pitch : float
        Fundamental frequency (Hz); NaN, infinite or non-positive values
        (unvoiced frames) leave every slot unresolved.
    """
    peak_positions[:] = 0
    peak_frequencies[:] = 0.0
    n_bins = spectrum.shape[0]
    if not np.isfinite(pitch) or pitch <= 0 or n_bins < 2:
        return
    resolution = sampling_rate / (2.0 * (n_bins - 1))
    region = max(1, int(pitch / (2 * resolution)))

    for i in range(peak_positions.shape[0]):
        center = int((i + 1) * pitch / resolution)
        lo = max(center - region, 1)
        hi = center + region
        if hi >= n_bins:
            break
        pos = lo + int(np.argmax(spectrum[lo : hi + 1]))
        peak_positions[i] = pos
        peak_frequencies[i] = pos * resolution


def _resolved(peak_positions):
    return peak_positions > 0


def centroid(spectrum, peak_positions, peak_frequencies):
    """Harmonic centroid: magnitude-weighted mean of the peak frequencies."""
    mask = _resolved(peak_positions)
    amps = spectrum[peak_positions[mask]]
    total = float(np.sum(amps))
    if total < EPS:
        return 0.0
    return float(np.dot(peak_frequencies[mask], amps) / total)


def spread(spectrum, peak_positions, peak_frequencies):
    """Harmonic spread: magnitude-weighted std-dev of peak frequencies around the centroid."""
    mask = _resolved(peak_positions)
    amps = spectrum[peak_positions[mask]]
    total = float(np.sum(amps))
    if total < EPS:
        return 0.0
    c = centroid(spectrum, peak_positions, peak_frequencies)
    return float(np.sqrt(np.dot((peak_frequencies[mask] - c) ** 2, amps) / total))


def inharmonicity(spectrum, peak_positions, peak_frequencies):
    """Energy-weighted deviation of the peaks from exact multiples of the first peak.

    Returns 0 when the first harmonic is unresolved or the peaks are silent.
    """
    if peak_positions.shape[0] == 0 or peak_positions[0] <= 0:
        return 0.0
    f0 = float(peak_frequencies[0])
    if f0 < EPS:
        return 0.0
    mask = _resolved(peak_positions)
    harmonic_no = np.arange(1, peak_positions.shape[0] + 1)[mask]
    energy = spectrum[peak_positions[mask]] ** 2
    total = float(np.sum(energy))
    if total < EPS:
        return 0.0
    deviation = np.abs(peak_frequencies[mask] - harmonic_no * f0)
    return float(2.0 * np.dot(deviation, energy) / (f0 * total))


def odd_to_even_ratio(spectrum, peak_positions):
    """Ratio of odd-harmonic to even-harmonic magnitude sums."""
    amps = np.where(_resolved(peak_positions), spectrum[peak_positions], 0.0)
    odd = float(np.sum(amps[0::2]))
    even = float(np.sum(amps[1::2]))
    if even < EPS:
        return 0.0
    return odd / even


def tristimulus(spectrum, peak_positions, n):
    """Tristimulus component ``n`` (1, 2 or 3).

    T1 is the first harmonic, T2 harmonics 2-4 and T3 harmonics 5 and up,
    each divided by the magnitude sum of all harmonics.
    """
    amps = np.where(_resolved(peak_positions), spectrum[peak_positions], 0.0)
    total = float(np.sum(amps))
    if total < EPS:
        return 0.0
    if n == 1:
        part = amps[:1]
    elif n == 2:
        part = amps[1:4]
    elif n == 3:
        part = amps[4:]
    else:
        raise ValueError(f"tristimulus component must be 1, 2 or 3, got {n}")
    return float(np.sum(part) / total)
