"""Spectral shape descriptors of a single magnitude spectrum.

Every function takes one frame's magnitude spectrum, sampled at the given
center frequencies, and returns a float. The DC bin (index 0) is ignored.
Silent spectra give 0 unless noted otherwise (flatness and crest give 1).
"""

import numpy as np

EPS = 1e-10


def centroid(spectrum, frequencies):
    """Spectral centroid: magnitude-weighted mean frequency.

    Parameters
    ----------
    spectrum : np.ndarray
        Magnitude spectrum.
    frequencies : np.ndarray
        Center frequency (Hz) of each spectrum bin.
    """
    s = spectrum[1:]
    total = float(np.sum(s))
    if total < EPS:
        return 0.0
    return float(np.dot(frequencies[1:], s) / total)


def spread(spectrum, frequencies):
    """Spectral spread: magnitude-weighted standard deviation around the centroid.

    Parameters
    ----------
    spectrum : np.ndarray
        Magnitude spectrum.
    frequencies : np.ndarray
        Center frequency (Hz) of each spectrum bin.
    """
    s = spectrum[1:]
    total = float(np.sum(s))
    if total < EPS:
        return 0.0
    c = centroid(spectrum, frequencies)
    return float(np.sqrt(np.dot((frequencies[1:] - c) ** 2, s) / total))


def flatness(spectrum, min_level=EPS):
    """Spectral flatness (Wiener entropy): geometric over arithmetic mean.

    Magnitudes are floored at ``min_level``, so a silent spectrum gives 1.

    Parameters
    ----------
    spectrum : np.ndarray
        Magnitude spectrum.
    min_level : float
        Floor applied to magnitudes before taking logs (default 1e-10).
    """
    s = np.maximum(spectrum[1:], min_level)
    if s.size == 0:
        return 0.0
    mean = float(np.mean(s))
    if mean <= 0:
        return 0.0
    return float(np.exp(np.mean(np.log(s))) / mean)


def noiseness(spectrum, frequencies, noise_frequency=3000.0):
    """Share of spectral energy above ``noise_frequency``.

    Parameters
    ----------
    spectrum : np.ndarray
        Magnitude spectrum.
    frequencies : np.ndarray
        Center frequency (Hz) of each spectrum bin.
    noise_frequency : float
        Boundary frequency in Hz (default 3000).
    """
    energy = spectrum[1:] ** 2
    total = float(np.sum(energy))
    if total < EPS:
        return 0.0
    noise = float(np.sum(energy[frequencies[1:] > noise_frequency]))
    return noise / total


def rolloff(spectrum, frequencies, rolloff_percent=0.85):
    """Frequency below which ``rolloff_percent`` of the magnitude sum lies.

    Parameters
    ----------
    spectrum : np.ndarray
        Magnitude spectrum.
    frequencies : np.ndarray
        Center frequency (Hz) of each spectrum bin.
    rolloff_percent : float
        Target fraction of the magnitude sum (default 0.85).
    """
    s = spectrum[1:]
    if s.size == 0:
        return 0.0
    cumulative = np.cumsum(s)
    threshold = cumulative[-1] * rolloff_percent
    idx = int(np.searchsorted(cumulative, threshold, side="left"))
    idx = min(idx, s.size - 1)
    return float(frequencies[idx + 1])


def crest(spectrum):
    """Spectral crest: peak magnitude over mean magnitude (1 when silent)."""
    s = spectrum[1:]
    total = float(np.sum(s))
    if total < EPS:
        return 1.0
    return float(np.max(s) * s.size / total)


def entropy(spectrum):
    """Shannon entropy of the normalized spectrum, scaled to [0, 1]."""
    s = spectrum[1:]
    total = float(np.sum(s))
    if total < EPS or s.size < 2:
        return 0.0
    p = s / total
    p = p[p > EPS]
    return float(-np.sum(p * np.log2(p)) / np.log2(s.size))


def decrease(spectrum):
    """Spectral decrease: average slope relative to the first non-DC bin."""
    s = spectrum[1:]
    if s.size < 2:
        return 0.0
    level = float(np.sum(s[1:]))
    if level < EPS:
        return 0.0
    k = np.arange(1, s.size)
    return float(np.sum((s[1:] - s[0]) / k) / level)


def contrast(spectrum, frequencies, band_no, min_frequency=200.0, alpha=0.2):
    """Spectral contrast of one octave band.

    Band ``b`` spans ``[min_frequency * 2**(b-1), min_frequency * 2**b)``.
    The contrast is the log10 ratio between the mean of the strongest and
    the mean of the weakest ``alpha`` share of the band's magnitudes.

    Parameters
    ----------
    spectrum : np.ndarray
        Magnitude spectrum.
    frequencies : np.ndarray
        Center frequency (Hz) of each spectrum bin.
    band_no : int
        1-based octave band index.
    min_frequency : float
        Lower edge of band 1 in Hz (default 200).
    alpha : float
        Share of band bins averaged for the peak and the valley (default 0.2).
    """
    if band_no < 1:
        raise ValueError(f"band_no must be >= 1, got {band_no}")
    low = min_frequency * 2.0 ** (band_no - 1)
    high = low * 2.0
    mask = (frequencies >= low) & (frequencies < high)
    mask[0] = False
    band = np.sort(spectrum[mask])
    if band.size == 0:
        return 0.0
    n = max(1, int(round(alpha * band.size)))
    valley = float(np.mean(band[:n]))
    peak = float(np.mean(band[-n:]))
    if peak < EPS:
        return 0.0
    return float(np.log10(peak / max(valley, EPS)))
