"""Feature-extraction exception types."""

from __future__ import annotations


class FeatureError(Exception):
    """Base exception for feature-extraction errors."""


class UnknownFeatureError(FeatureError, ValueError):
    """Raised when a feature token does not name any known routine.

    Attributes:
        token: The offending token exactly as it appeared in the feature list.
    """

    def __init__(self, token: str) -> None:
        super().__init__(f"Unknown feature: {token}")
        self.token = token


class InvalidRangeError(FeatureError, ValueError):
    """Raised when a sample range is empty or reversed."""


def ensure_valid_range(start: int, end: int, start_name: str = "start", end_name: str = "end") -> None:
    """Raise InvalidRangeError unless ``start < end``.

    Args:
        start: First sample position of the range.
        end: Position one past the last sample of the range.
        start_name: Label for ``start`` in the error message.
        end_name: Label for ``end`` in the error message.

    Raises:
        InvalidRangeError: If ``start >= end``.
    """
    if start >= end:
        raise InvalidRangeError(
            f"{start_name} ({start}) must be less than {end_name} ({end})"
        )
