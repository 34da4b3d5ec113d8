"""Tests for the feature-extraction pipeline over audio files."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from timbral.pipeline.features import _resolve_audio_files, build_extractor, run_features


class TestFeaturesHelpers:
    """Unit tests for pipeline helpers."""

    def test_resolve_audio_files_explicit(self, tmp_path: Path) -> None:
        a = tmp_path / "a.wav"
        a.touch()
        got = _resolve_audio_files([a], tmp_path)
        assert got == [a.resolve()]

    def test_resolve_audio_files_default_folder(self, tmp_path: Path) -> None:
        (tmp_path / "one.wav").touch()
        (tmp_path / "two.flac").touch()
        (tmp_path / "notes.txt").touch()
        got = _resolve_audio_files(None, tmp_path)
        assert [p.name for p in got] == ["one.wav", "two.flac"]

    def test_resolve_audio_files_nonexistent_folder(self, tmp_path: Path) -> None:
        assert _resolve_audio_files(None, tmp_path / "missing") == []

    def test_build_extractor_is_strict(self) -> None:
        with pytest.raises(ValueError, match="bogus"):
            build_extractor(16000, features="centroid,bogus")

    def test_build_extractor_with_harmonics(self) -> None:
        ext = build_extractor(16000, features="centroid", harmonic_features="t1+t2+t3", peak_count=5)
        assert ext.feature_count == 4
        assert ext.peak_count == 5


class TestRunFeatures:
    """Integration-style tests for run_features (use tmp paths)."""

    def test_single_file(self, tmp_path: Path, noise: np.ndarray, write_wav) -> None:
        wav = tmp_path / "noise.wav"
        write_wav(wav, noise[:8000])

        result = run_features(audio_files=[wav], raw_audio_dir=tmp_path)

        assert result["success"] is True
        assert result["total"] == 1
        assert result["succeeded"] == 1
        item = result["items"][0]
        assert item["file"] == "noise.wav"
        assert item["status"] == "success"
        assert item["sample_rate"] == 16000
        assert item["num_frames"] == 48
        assert item["feature_count"] == 14
        assert item["fft_size"] == 512
        assert item["duration_sec"] == pytest.approx(0.5)
        assert [row["feature"] for row in item["stats"]][:3] == ["centroid", "spread", "flatness"]
        for row in item["stats"]:
            assert row["min"] <= row["mean"] <= row["max"]

    def test_harmonic_features(self, tmp_path: Path, harmonic_tone: np.ndarray, write_wav) -> None:
        wav = tmp_path / "tone.wav"
        write_wav(wav, harmonic_tone)

        result = run_features(
            audio_files=[wav],
            features="centroid",
            harmonic_features="all",
            frame_duration=0.032,
        )

        assert result["success"] is True
        item = result["items"][0]
        assert item["feature_count"] == 8
        names = [row["feature"] for row in item["stats"]]
        assert names == ["centroid", "centroid", "spread", "inharmonicity", "oer", "t1", "t2", "t3"]

    def test_parallel_matches_sequential(self, tmp_path: Path, noise: np.ndarray, write_wav) -> None:
        wav = tmp_path / "noise.wav"
        write_wav(wav, noise)

        seq = run_features(audio_files=[wav], features="centroid,rolloff")
        par = run_features(audio_files=[wav], features="centroid,rolloff", workers=3)

        assert par["success"] is True
        assert par["items"][0]["stats"] == seq["items"][0]["stats"]

    def test_parameters_forwarded(self, tmp_path: Path, noise: np.ndarray, write_wav) -> None:
        wav = tmp_path / "noise.wav"
        write_wav(wav, noise[:8000])

        low = run_features(audio_files=[wav], features="rolloff", parameters={"rolloffPercent": 0.2})
        high = run_features(audio_files=[wav], features="rolloff", parameters={"rolloffPercent": 0.95})

        assert low["items"][0]["stats"][0]["mean"] < high["items"][0]["stats"][0]["mean"]

    def test_signal_shorter_than_frame(self, tmp_path: Path, noise: np.ndarray, write_wav) -> None:
        wav = tmp_path / "short.wav"
        write_wav(wav, noise[:200])

        result = run_features(audio_files=[wav])

        assert result["success"] is True
        assert result["items"][0]["num_frames"] == 0
        assert result["items"][0]["stats"] == []

    def test_default_folder(self, project_root: Path, noise: np.ndarray, write_wav) -> None:
        raw = project_root / "data" / "raw" / "audio"
        write_wav(raw / "a.wav", noise[:4000])
        write_wav(raw / "b.wav", noise[4000:8000])

        result = run_features(audio_files=None, raw_audio_dir=raw, features="centroid")

        assert result["success"] is True
        assert result["total"] == 2
        assert [item["file"] for item in result["items"]] == ["a.wav", "b.wav"]

    def test_missing_file_reported(self, tmp_path: Path) -> None:
        result = run_features(audio_files=[tmp_path / "missing.wav"])

        assert result["success"] is False
        assert result["failed"] == 1
        assert result["failures"][0]["reason"] == "File not found"

    def test_unknown_feature_fails_run(self, tmp_path: Path, noise: np.ndarray, write_wav) -> None:
        wav = tmp_path / "noise.wav"
        write_wav(wav, noise[:8000])

        result = run_features(audio_files=[wav], features="centroid,bogus")

        assert result["success"] is False
        assert result["message"].startswith("Invalid feature configuration")
        assert "bogus" in result["message"]
        assert result["items"] == []

    def test_unknown_parameter_fails_run(self, tmp_path: Path) -> None:
        result = run_features(audio_files=[], parameters={"nope": 1.0})
        assert result["success"] is False
        assert "Unknown parameter" in result["message"]

    def test_no_files_returns_ok_empty_message(self, tmp_path: Path) -> None:
        result = run_features(audio_files=None, raw_audio_dir=tmp_path)
        assert result["success"] is True
        assert result["total"] == 0
        assert "No audio files" in result["message"]
