"""Frame-based feature extractor base class."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import numpy as np

from .errors import ensure_valid_range
from .vector import FeatureVector

logger = logging.getLogger(__name__)


class FeatureExtractor(ABC):
    """Common frame/hop geometry and driving logic for feature extractors.

    Subclasses implement ``compute_from`` for a sample range, and
    ``replicate`` if they can run in parallel.

    Args:
        sampling_rate: Sampling rate of the signals to process (Hz).
        frame_duration: Frame length in seconds.
        hop_duration: Distance between consecutive frame starts in seconds.
    """

    def __init__(self, sampling_rate: int, frame_duration: float, hop_duration: float) -> None:
        if sampling_rate <= 0:
            raise ValueError(f"sampling_rate must be positive, got {sampling_rate}")
        if frame_duration <= 0:
            raise ValueError(f"frame_duration must be positive, got {frame_duration}")
        if hop_duration <= 0:
            raise ValueError(f"hop_duration must be positive, got {hop_duration}")

        self.sampling_rate = int(sampling_rate)
        self.frame_duration = float(frame_duration)
        self.hop_duration = float(hop_duration)
        self.frame_size = int(sampling_rate * frame_duration)
        self.hop_size = int(sampling_rate * hop_duration)
        if self.frame_size < 1 or self.hop_size < 1:
            raise ValueError(
                f"frame ({self.frame_size}) and hop ({self.hop_size}) must span at least one sample"
            )

    @property
    @abstractmethod
    def feature_descriptions(self) -> list[str]:
        """Names of the features, in output order."""

    @property
    def feature_count(self) -> int:
        return len(self.feature_descriptions)

    @abstractmethod
    def compute_from(self, samples: np.ndarray, start: int, end: int) -> list[FeatureVector]:
        """Compute feature vectors for frames starting in ``[start, end)``."""

    def compute(self, samples: np.ndarray) -> list[FeatureVector]:
        """Compute feature vectors over the whole signal."""
        return self.compute_from(samples, 0, len(samples))

    def is_parallelizable(self) -> bool:
        return False

    def replicate(self) -> FeatureExtractor:
        """Independent copy safe to run alongside this instance."""
        raise NotImplementedError(f"{type(self).__name__} cannot be replicated")

    def chunk_ranges(self, start: int, end: int, chunks: int) -> list[tuple[int, int]]:
        """Split ``[start, end)`` into hop-aligned ranges for parallel runs.

        Chunk ``k`` holds the frames starting in ``[s_k, s_{k+1})``; its end is
        ``min(s_{k+1} + frame_size, end)`` so no frame is lost or duplicated at
        a seam. Every ``s_k`` is ``start`` plus a multiple of ``hop_size``.

        Args:
            start: First sample position.
            end: End sample position (exclusive).
            chunks: Desired number of chunks (fewer are returned for short ranges).

        Returns:
            List of ``(chunk_start, chunk_end)`` tuples in signal order.
        """
        ensure_valid_range(start, end, "start", "end")
        # frames satisfy pos + frame_size < end
        n_frames = max(0, (end - self.frame_size - start - 1) // self.hop_size + 1)
        chunks = max(1, min(int(chunks), n_frames))
        if chunks == 1:
            return [(start, end)]

        per_chunk, extra = divmod(n_frames, chunks)
        ranges: list[tuple[int, int]] = []
        frame_no = 0
        for k in range(chunks):
            count = per_chunk + (1 if k < extra else 0)
            chunk_start = start + frame_no * self.hop_size
            frame_no += count
            if k == chunks - 1:
                chunk_end = end
            else:
                chunk_end = min(start + frame_no * self.hop_size + self.frame_size, end)
            ranges.append((chunk_start, chunk_end))
        return ranges

    def compute_parallel(
        self,
        samples: np.ndarray,
        start: int = 0,
        end: int | None = None,
        workers: int | None = None,
    ) -> list[FeatureVector]:
        """Compute feature vectors using replicated extractors in a thread pool.

        The result is identical to ``compute_from(samples, start, end)``.

        Args:
            samples: Signal samples.
            start: First sample position (default 0).
            end: End sample position (default ``len(samples)``).
            workers: Number of worker threads (default: CPU count).

        Returns:
            Feature vectors in time order.
        """
        end = len(samples) if end is None else end
        ensure_valid_range(start, end, "start", "end")
        if not self.is_parallelizable():
            return self.compute_from(samples, start, end)

        n_workers = workers or os.cpu_count() or 1
        ranges = self.chunk_ranges(start, end, n_workers)
        logger.debug("Parallel run over %d chunk(s): %s", len(ranges), ranges)
        if len(ranges) == 1:
            return self.compute_from(samples, start, end)

        replicas = [self.replicate() for _ in ranges]
        with ThreadPoolExecutor(max_workers=len(ranges)) as pool:
            futures = [
                pool.submit(replica.compute_from, samples, s, e)
                for replica, (s, e) in zip(replicas, ranges)
            ]
            results = [f.result() for f in futures]

        vectors: list[FeatureVector] = []
        for chunk in results:
            vectors.extend(chunk)
        return vectors

    def describe(self) -> dict[str, Any]:
        """Configuration summary for logging and CLI output."""
        return {
            "sampling_rate": self.sampling_rate,
            "frame_size": self.frame_size,
            "hop_size": self.hop_size,
            "feature_count": self.feature_count,
            "features": list(self.feature_descriptions),
        }
