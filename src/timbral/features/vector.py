"""Feature vectors and helpers over sequences of them."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class FeatureVector:
    """Features of one frame.

    Attributes:
        features: Feature values in feature-description order (a read-only
            copy of the array passed in).
        time_position: Frame start time in seconds.
    """

    features: np.ndarray
    time_position: float

    def __post_init__(self) -> None:
        features = np.array(self.features, dtype=np.float64)
        features.flags.writeable = False
        object.__setattr__(self, "features", features)

    def __len__(self) -> int:
        return int(self.features.shape[0])


def to_matrix(vectors: Sequence[FeatureVector]) -> np.ndarray:
    """Stack feature vectors into a (frames, features) array."""
    if not vectors:
        return np.zeros((0, 0), dtype=np.float64)
    return np.vstack([v.features for v in vectors])


def time_positions(vectors: Sequence[FeatureVector]) -> np.ndarray:
    """Time position (seconds) of each feature vector."""
    return np.array([v.time_position for v in vectors], dtype=np.float64)


def statistics(vectors: Sequence[FeatureVector], descriptions: Sequence[str]) -> list[dict]:
    """Per-feature min / max / mean / std over a vector sequence.

    Spectral and harmonic features may share a name (e.g. ``centroid``), so
    the result is a list in feature order rather than a name-keyed dict.

    Args:
        vectors: Feature vectors, all of length ``len(descriptions)``.
        descriptions: Feature names.

    Returns:
        One ``{"feature", "min", "max", "mean", "std"}`` dict per feature;
        empty when there are no vectors.
    """
    if not vectors:
        return []
    X = to_matrix(vectors)
    if X.shape[1] != len(descriptions):
        raise ValueError(
            f"Got {len(descriptions)} descriptions for {X.shape[1]} features"
        )
    return [
        {
            "feature": name,
            "min": float(np.min(X[:, j])),
            "max": float(np.max(X[:, j])),
            "mean": float(np.mean(X[:, j])),
            "std": float(np.std(X[:, j])),
        }
        for j, name in enumerate(descriptions)
    ]
