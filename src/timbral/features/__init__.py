"""Frame-level spectral and harmonic feature extraction package."""

from .catalog import FEATURE_SET, HARMONIC_SET, catalog, resolve_harmonic, resolve_spectral
from .config import SpectralParameters
from .errors import FeatureError, InvalidRangeError, UnknownFeatureError
from .extractor import FeatureEntry, HarmonicPipeline, SpectralFeaturesExtractor
from .frequency_map import FrequencyMap
from .vector import FeatureVector, statistics, time_positions, to_matrix

__all__ = [
    "FEATURE_SET",
    "HARMONIC_SET",
    "FeatureEntry",
    "FeatureError",
    "FeatureVector",
    "FrequencyMap",
    "HarmonicPipeline",
    "InvalidRangeError",
    "SpectralFeaturesExtractor",
    "SpectralParameters",
    "UnknownFeatureError",
    "catalog",
    "resolve_harmonic",
    "resolve_spectral",
    "statistics",
    "time_positions",
    "to_matrix",
]
