from __future__ import annotations

import wave
from pathlib import Path

import numpy as np
import pytest

SR = 16000


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """
    A dedicated temp root directory for each test.
    All filesystem writes in tests should be under this root (or tmp_path directly).
    """
    root = tmp_path / "proj"
    (root / "data" / "raw" / "audio").mkdir(parents=True)
    return root


@pytest.fixture(autouse=True)
def chdir_to_project_root(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Automatically change working directory to project_root for all tests.
    This ensures relative-path operations go into the temp directory by default.
    """
    monkeypatch.chdir(project_root)


@pytest.fixture
def sr() -> int:
    return SR


@pytest.fixture
def noise() -> np.ndarray:
    """One second of reproducible white noise at 16 kHz."""
    rng = np.random.default_rng(1234)
    return rng.standard_normal(SR)


@pytest.fixture
def harmonic_tone() -> np.ndarray:
    """One second of a 250 Hz tone with 10 harmonics of amplitude 1/h.

    250 Hz and its multiples fall exactly on FFT bins for a 512-point FFT at 16 kHz.
    """
    t = np.arange(SR) / SR
    return sum(np.sin(2 * np.pi * 250.0 * h * t) / h for h in range(1, 11))


def _write_wav(path: Path, y: np.ndarray, sr: int = SR) -> None:
    """Write a mono 16-bit WAV so librosa can load it."""
    peak = float(np.max(np.abs(y))) if y.size else 0.0
    scaled = y / peak * 0.5 if peak > 0 else y
    buf = (scaled * 32767).astype(np.int16)
    with wave.open(str(path), "wb") as w:
        w.setnchannels(1)
        w.setsampwidth(2)
        w.setframerate(sr)
        w.writeframes(buf.tobytes())


@pytest.fixture
def write_wav():
    """Return a helper that writes a mono 16-bit WAV file."""
    return _write_wav
