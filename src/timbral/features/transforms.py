"""FFT helpers for frame-level spectra."""

import numpy as np
from scipy import fft as sp_fft


def next_power_of_two(n):
    """Smallest power of two >= n (1 for n <= 1)."""
    n = int(n)
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


def magnitude_spectrum(block, out=None):
    """Magnitude spectrum of a real block.

    Parameters
    ----------
    block : np.ndarray
        Time-domain block of length ``fft_size``.
    out : np.ndarray or None
        Optional buffer of length ``fft_size // 2 + 1`` to write into.

    Returns
    -------
    np.ndarray
        Unnormalized ``|rfft(block)|``; ``out`` when it was given.
    """
    X = sp_fft.rfft(block)
    if out is None:
        return np.abs(X)
    if out.shape != X.shape:
        raise ValueError(f"out must have shape {X.shape}, got {out.shape}")
    np.abs(X, out=out)
    return out
