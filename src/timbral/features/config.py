"""Tunable parameters consumed while resolving spectral features.

Parameters are read once, when feature tokens are bound to routines, and
never consulted again during extraction.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any, Final

# Accepted spellings -> dataclass field
PARAMETER_KEYS: Final[dict[str, str]] = {
    "minLevel": "min_level",
    "min_level": "min_level",
    "noiseFrequency": "noise_frequency",
    "noise_frequency": "noise_frequency",
    "rolloffPercent": "rolloff_percent",
    "rolloff_percent": "rolloff_percent",
}


@dataclass(frozen=True)
class SpectralParameters:
    """Parameters for the parameterized spectral features.

    Attributes:
        min_level: Magnitude floor used by flatness (avoids log(0)).
        noise_frequency: Frequency (Hz) above which energy counts as noise.
        rolloff_percent: Fraction of the magnitude sum that rolloff targets.
    """

    min_level: float = 1e-10
    noise_frequency: float = 3000.0
    rolloff_percent: float = 0.85

    def __post_init__(self) -> None:
        if self.min_level <= 0:
            raise ValueError(f"min_level must be positive, got {self.min_level}")
        if self.noise_frequency < 0:
            raise ValueError(f"noise_frequency must be non-negative, got {self.noise_frequency}")
        if not 0.0 < self.rolloff_percent <= 1.0:
            raise ValueError(f"rolloff_percent must lie in (0, 1], got {self.rolloff_percent}")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> SpectralParameters:
        """Build parameters from a name -> value mapping.

        Both the camelCase keys (``minLevel``, ``noiseFrequency``,
        ``rolloffPercent``) and their snake_case spellings are accepted.
        Missing keys keep their defaults.

        Raises:
            ValueError: If the mapping holds an unrecognized key.
        """
        if not mapping:
            return cls()
        values: dict[str, float] = {}
        for key, value in mapping.items():
            field_name = PARAMETER_KEYS.get(key)
            if field_name is None:
                raise ValueError(
                    f"Unknown parameter: {key!r}. "
                    f"Known parameters: {', '.join(sorted(PARAMETER_KEYS))}"
                )
            values[field_name] = float(value)
        return cls(**values)

    def as_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def resolve_parameters(parameters: SpectralParameters | Mapping[str, Any] | None) -> SpectralParameters:
    """Return ``parameters`` as a SpectralParameters instance."""
    if isinstance(parameters, SpectralParameters):
        return parameters
    return SpectralParameters.from_mapping(parameters)
