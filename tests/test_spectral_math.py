"""Tests for spectral, harmonic and pitch math helpers."""

from __future__ import annotations

import numpy as np
import pytest

from timbral.features import harmonic, pitch, spectral
from timbral.features.transforms import magnitude_spectrum, next_power_of_two

FREQS = np.arange(11) * 100.0


class TestSpectral:
    def test_silent_spectrum(self) -> None:
        z = np.zeros(11)
        assert spectral.centroid(z, FREQS) == 0.0
        assert spectral.spread(z, FREQS) == 0.0
        assert spectral.noiseness(z, FREQS) == 0.0
        assert spectral.crest(z) == 1.0
        assert spectral.flatness(z) == pytest.approx(1.0)
        assert spectral.entropy(z) == 0.0
        assert spectral.decrease(z) == 0.0
        assert spectral.contrast(z, FREQS, 1) == 0.0

    def test_centroid_and_spread_of_single_bin(self) -> None:
        s = np.zeros(11)
        s[4] = 2.0
        assert spectral.centroid(s, FREQS) == pytest.approx(400.0)
        assert spectral.spread(s, FREQS) == pytest.approx(0.0)

    def test_spread_of_two_bins(self) -> None:
        s = np.zeros(11)
        s[2] = s[6] = 1.0
        assert spectral.centroid(s, FREQS) == pytest.approx(400.0)
        assert spectral.spread(s, FREQS) == pytest.approx(200.0)

    def test_dc_bin_ignored(self) -> None:
        s = np.zeros(11)
        s[0] = 100.0
        s[5] = 1.0
        assert spectral.centroid(s, FREQS) == pytest.approx(500.0)

    def test_flat_spectrum(self) -> None:
        s = np.ones(11)
        assert spectral.flatness(s) == pytest.approx(1.0)
        assert spectral.crest(s) == pytest.approx(1.0)
        assert spectral.entropy(s) == pytest.approx(1.0)
        assert spectral.decrease(s) == pytest.approx(0.0)
        assert spectral.rolloff(s, FREQS) == pytest.approx(900.0)

    def test_peaky_spectrum_is_not_flat(self) -> None:
        s = np.full(11, 1e-3)
        s[3] = 1.0
        assert spectral.flatness(s) < 0.1
        assert spectral.crest(s) > 5.0
        assert spectral.entropy(s) < 0.5

    def test_rolloff_percent(self) -> None:
        s = np.ones(11)
        assert spectral.rolloff(s, FREQS, 0.5) == pytest.approx(500.0)
        assert spectral.rolloff(s, FREQS, 1.0) == pytest.approx(1000.0)

    def test_noiseness(self) -> None:
        freqs = np.arange(11) * 1000.0
        s = np.zeros(11)
        s[[1, 5]] = 1.0
        assert spectral.noiseness(s, freqs) == pytest.approx(0.5)
        assert spectral.noiseness(s, freqs, noise_frequency=500.0) == pytest.approx(1.0)

    def test_decrease_sign(self) -> None:
        falling = np.array([0.0, 10.0, 8.0, 6.0, 4.0, 2.0])
        rising = falling[::-1].copy()
        rising[0] = 0.0
        assert spectral.decrease(falling) < 0
        assert spectral.decrease(rising) > 0

    def test_contrast(self) -> None:
        freqs = np.arange(257) * 31.25
        s = np.full(257, 0.01)
        band = (freqs >= 200) & (freqs < 400)
        idx = np.flatnonzero(band)
        s[idx[len(idx) // 2]] = 1.0
        assert spectral.contrast(s, freqs, 1) > 0.5
        assert spectral.contrast(np.ones(257), freqs, 1) == pytest.approx(0.0)
        with pytest.raises(ValueError):
            spectral.contrast(s, freqs, 0)


class TestTransforms:
    @pytest.mark.parametrize("n, expected", [(1, 1), (2, 2), (3, 4), (400, 512), (512, 512), (513, 1024)])
    def test_next_power_of_two(self, n: int, expected: int) -> None:
        assert next_power_of_two(n) == expected

    def test_magnitude_spectrum_into_buffer(self) -> None:
        n = 512
        block = np.sin(2 * np.pi * 32 * np.arange(n) / n)
        out = np.zeros(n // 2 + 1)
        got = magnitude_spectrum(block, out=out)
        assert got is out
        assert int(np.argmax(out)) == 32
        assert out[32] == pytest.approx(n / 2)

    def test_magnitude_spectrum_shape_mismatch(self) -> None:
        with pytest.raises(ValueError):
            magnitude_spectrum(np.zeros(8), out=np.zeros(4))


def _harmonic_spectrum(n_bins: int = 257, f0_bin: int = 8, count: int = 10) -> np.ndarray:
    s = np.zeros(n_bins)
    for h in range(1, count + 1):
        s[f0_bin * h] = 1.0 / h
    return s


class TestHarmonic:
    SR = 16000  # 257 bins -> 31.25 Hz resolution

    def test_peaks_on_exact_harmonics(self) -> None:
        s = _harmonic_spectrum()
        positions = np.zeros(10, dtype=np.intp)
        freqs = np.zeros(10)
        harmonic.peaks(s, positions, freqs, self.SR, 250.0)
        np.testing.assert_array_equal(positions, 8 * np.arange(1, 11))
        np.testing.assert_allclose(freqs, 250.0 * np.arange(1, 11))

    def test_peaks_beyond_nyquist_unresolved(self) -> None:
        s = _harmonic_spectrum(count=3)
        positions = np.full(5, 99, dtype=np.intp)
        freqs = np.full(5, 99.0)
        harmonic.peaks(s, positions, freqs, self.SR, 4000.0)
        # half-width 64 bins: harmonic 1 at bin 128 fits, harmonic 2 at bin 256 does not
        assert positions[0] > 0
        assert list(positions[1:]) == [0, 0, 0, 0]
        assert list(freqs[1:]) == [0.0, 0.0, 0.0, 0.0]

    @pytest.mark.parametrize("pitch", [np.nan, np.inf, -np.inf])
    def test_non_finite_pitch_leaves_slots_unresolved(self, pitch: float) -> None:
        positions = np.full(4, 7, dtype=np.intp)
        freqs = np.full(4, 7.0)
        harmonic.peaks(_harmonic_spectrum(), positions, freqs, self.SR, pitch)
        assert not positions.any()
        assert not freqs.any()

    def test_zero_pitch_leaves_slots_unresolved(self) -> None:
        positions = np.full(4, 7, dtype=np.intp)
        freqs = np.full(4, 7.0)
        harmonic.peaks(_harmonic_spectrum(), positions, freqs, self.SR, 0.0)
        assert not positions.any()
        assert not freqs.any()

    def test_descriptors(self) -> None:
        s = _harmonic_spectrum()
        positions = 8 * np.arange(1, 11)
        freqs = 250.0 * np.arange(1, 11)
        amps = 1.0 / np.arange(1, 11)

        assert harmonic.centroid(s, positions, freqs) == pytest.approx(np.dot(freqs, amps) / amps.sum())
        assert harmonic.spread(s, positions, freqs) > 0
        assert harmonic.inharmonicity(s, positions, freqs) == pytest.approx(0.0)
        assert harmonic.odd_to_even_ratio(s, positions) == pytest.approx(amps[0::2].sum() / amps[1::2].sum())
        t = [harmonic.tristimulus(s, positions, n) for n in (1, 2, 3)]
        assert t[0] == pytest.approx(1.0 / amps.sum())
        assert sum(t) == pytest.approx(1.0)
        with pytest.raises(ValueError):
            harmonic.tristimulus(s, positions, 4)

    def test_inharmonic_partials(self) -> None:
        s = _harmonic_spectrum()
        positions = 8 * np.arange(1, 11)
        freqs = 250.0 * np.arange(1, 11) * 1.02
        freqs[0] = 250.0
        assert harmonic.inharmonicity(s, positions, freqs) > 0

    def test_unresolved_slots_ignored(self) -> None:
        s = _harmonic_spectrum()
        s[0] = 100.0  # DC must not leak in through unresolved slots
        positions = np.array([8, 16, 0, 0])
        freqs = np.array([250.0, 500.0, 0.0, 0.0])
        assert harmonic.centroid(s, positions, freqs) == pytest.approx((250.0 + 500.0 * 0.5) / 1.5)
        assert harmonic.tristimulus(s, positions, 3) == 0.0


class TestPitch:
    def test_first_peak_in_band(self) -> None:
        s = _harmonic_spectrum()
        assert pitch.from_spectral_peaks(s, 16000, 80.0, 400.0) == pytest.approx(250.0)

    def test_no_peak_returns_band_start(self) -> None:
        s = np.zeros(257)
        got = pitch.from_spectral_peaks(s, 16000, 80.0, 400.0)
        assert got == pytest.approx((int(80.0 / 31.25) + 1) * 31.25)

    def test_estimator_factory(self) -> None:
        estimate = pitch.make_pitch_estimator(16000, 80.0, 400.0)
        assert estimate(_harmonic_spectrum()) == pytest.approx(250.0)
        with pytest.raises(ValueError):
            pitch.make_pitch_estimator(16000, 400.0, 80.0)
