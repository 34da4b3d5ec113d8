"""Feature catalog: maps feature-name tokens to extractor routines.

A feature list is a delimited string (``, + - ; :``) of case-insensitive
tokens. Each token is looked up once, in a static alias table, and turned
into a tagged ``FeatureSpec`` (kind plus any band number). Specs are then
bound to concrete routines through a fixed dispatch table, closing over the
relevant ``SpectralParameters`` values. Extraction never matches strings.

Tokens that do not name a known feature resolve to ``None`` (the unresolved
marker); the extractor reports them when it is first asked to compute.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Final

import numpy as np

from . import harmonic, spectral
from .config import SpectralParameters

logger = logging.getLogger(__name__)

SpectralRoutine = Callable[[np.ndarray, np.ndarray], float]
HarmonicRoutine = Callable[[np.ndarray, np.ndarray, np.ndarray], float]

# Canonical catalogs that "all" / "full" expand to
FEATURE_SET: Final[str] = (
    "centroid, spread, flatness, noiseness, rolloff, crest, entropy, decrease, c1+c2+c3+c4+c5+c6"
)
HARMONIC_SET: Final[str] = "centroid, spread, inharmonicity, oer, t1+t2+t3"

DELIMITERS: Final[str] = ",+-;:"
_SPLIT_RE = re.compile(r"[,+\-;:]")
_NUMBERED_RE = re.compile(r"^([a-z]+)(\d+)$")
_EXPAND_KEYWORDS = frozenset({"all", "full"})


class SpectralKind(Enum):
    CENTROID = "centroid"
    SPREAD = "spread"
    FLATNESS = "flatness"
    NOISENESS = "noiseness"
    ROLLOFF = "rolloff"
    CREST = "crest"
    ENTROPY = "entropy"
    DECREASE = "decrease"
    CONTRAST = "contrast"


class HarmonicKind(Enum):
    CENTROID = "centroid"
    SPREAD = "spread"
    INHARMONICITY = "inharmonicity"
    ODD_EVEN_RATIO = "oddevenratio"
    TRISTIMULUS = "tristimulus"


SPECTRAL_ALIASES: Final[dict[str, SpectralKind]] = {
    "sc": SpectralKind.CENTROID,
    "centroid": SpectralKind.CENTROID,
    "ss": SpectralKind.SPREAD,
    "spread": SpectralKind.SPREAD,
    "sfm": SpectralKind.FLATNESS,
    "flatness": SpectralKind.FLATNESS,
    "sn": SpectralKind.NOISENESS,
    "noiseness": SpectralKind.NOISENESS,
    "rolloff": SpectralKind.ROLLOFF,
    "crest": SpectralKind.CREST,
    "ent": SpectralKind.ENTROPY,
    "entropy": SpectralKind.ENTROPY,
    "sd": SpectralKind.DECREASE,
    "decrease": SpectralKind.DECREASE,
}

HARMONIC_ALIASES: Final[dict[str, HarmonicKind]] = {
    "hc": HarmonicKind.CENTROID,
    "centroid": HarmonicKind.CENTROID,
    "hs": HarmonicKind.SPREAD,
    "spread": HarmonicKind.SPREAD,
    "inh": HarmonicKind.INHARMONICITY,
    "inharmonicity": HarmonicKind.INHARMONICITY,
    "oer": HarmonicKind.ODD_EVEN_RATIO,
    "oddevenratio": HarmonicKind.ODD_EVEN_RATIO,
}

# Numbered families: prefix -> (kind, valid band numbers)
SPECTRAL_FAMILIES: Final[dict[str, tuple[SpectralKind, range]]] = {
    "c": (SpectralKind.CONTRAST, range(1, 7)),
}
HARMONIC_FAMILIES: Final[dict[str, tuple[HarmonicKind, range]]] = {
    "t": (HarmonicKind.TRISTIMULUS, range(1, 4)),
}


@dataclass(frozen=True)
class FeatureSpec:
    """A feature token resolved against the catalog.

    Attributes:
        token: Token as written in the feature list (whitespace trimmed).
        kind: Resolved feature kind, or None when the token is unknown.
        band: Band / component number for numbered families (c1..c6, t1..t3).
    """

    token: str
    kind: SpectralKind | HarmonicKind | None
    band: int | None = None

    @property
    def resolved(self) -> bool:
        return self.kind is not None


def split_feature_list(feature_list: str | Sequence[str], canonical: str) -> list[str]:
    """Split a feature list into trimmed, non-empty tokens.

    ``"all"`` and ``"full"`` expand to ``canonical``. A sequence of names is
    taken as already split.

    Args:
        feature_list: Delimited feature string or sequence of feature names.
        canonical: Catalog string used for ``"all"`` / ``"full"``.

    Returns:
        Tokens in declaration order, original case preserved.
    """
    if isinstance(feature_list, str):
        if feature_list.strip().lower() in _EXPAND_KEYWORDS:
            feature_list = canonical
        raw = _SPLIT_RE.split(feature_list)
    else:
        raw = list(feature_list)
    return [t.strip() for t in raw if t.strip()]


def _lookup(token: str, aliases: dict, families: dict) -> FeatureSpec:
    key = token.strip().lower()
    kind = aliases.get(key)
    if kind is not None:
        return FeatureSpec(token=token, kind=kind)
    match = _NUMBERED_RE.match(key)
    if match and match.group(1) in families:
        family_kind, bands = families[match.group(1)]
        band = int(match.group(2))
        if band in bands:
            return FeatureSpec(token=token, kind=family_kind, band=band)
    return FeatureSpec(token=token, kind=None)


def lookup_spectral(token: str) -> FeatureSpec:
    """Resolve one spectral token to a FeatureSpec (kind None if unknown)."""
    return _lookup(token, SPECTRAL_ALIASES, SPECTRAL_FAMILIES)


def lookup_harmonic(token: str) -> FeatureSpec:
    """Resolve one harmonic token to a FeatureSpec (kind None if unknown)."""
    return _lookup(token, HARMONIC_ALIASES, HARMONIC_FAMILIES)


# --- binding: spec + parameters -> routine ---------------------------------


def _bind_flatness(spec: FeatureSpec, params: SpectralParameters) -> SpectralRoutine:
    min_level = params.min_level

    def flatness(spectrum, frequencies):
        return spectral.flatness(spectrum, min_level)

    return flatness


def _bind_noiseness(spec: FeatureSpec, params: SpectralParameters) -> SpectralRoutine:
    noise_frequency = params.noise_frequency

    def noiseness(spectrum, frequencies):
        return spectral.noiseness(spectrum, frequencies, noise_frequency)

    return noiseness


def _bind_rolloff(spec: FeatureSpec, params: SpectralParameters) -> SpectralRoutine:
    rolloff_percent = params.rolloff_percent

    def rolloff(spectrum, frequencies):
        return spectral.rolloff(spectrum, frequencies, rolloff_percent)

    return rolloff


def _bind_contrast(spec: FeatureSpec, params: SpectralParameters) -> SpectralRoutine:
    band_no = spec.band

    def contrast(spectrum, frequencies):
        return spectral.contrast(spectrum, frequencies, band_no)

    return contrast


def _spectrum_only(fn: Callable[[np.ndarray], float]) -> Callable[[FeatureSpec, SpectralParameters], SpectralRoutine]:
    def bind(spec: FeatureSpec, params: SpectralParameters) -> SpectralRoutine:
        def routine(spectrum, frequencies):
            return fn(spectrum)

        routine.__name__ = fn.__name__
        return routine

    return bind


_SPECTRAL_BINDERS: Final[dict[SpectralKind, Callable[[FeatureSpec, SpectralParameters], SpectralRoutine]]] = {
    SpectralKind.CENTROID: lambda spec, params: spectral.centroid,
    SpectralKind.SPREAD: lambda spec, params: spectral.spread,
    SpectralKind.FLATNESS: _bind_flatness,
    SpectralKind.NOISENESS: _bind_noiseness,
    SpectralKind.ROLLOFF: _bind_rolloff,
    SpectralKind.CREST: _spectrum_only(spectral.crest),
    SpectralKind.ENTROPY: _spectrum_only(spectral.entropy),
    SpectralKind.DECREASE: _spectrum_only(spectral.decrease),
    SpectralKind.CONTRAST: _bind_contrast,
}


def _odd_even(spectrum, peak_positions, peak_frequencies):
    return harmonic.odd_to_even_ratio(spectrum, peak_positions)


def _bind_tristimulus(spec: FeatureSpec) -> HarmonicRoutine:
    n = spec.band

    def tristimulus(spectrum, peak_positions, peak_frequencies):
        return harmonic.tristimulus(spectrum, peak_positions, n)

    return tristimulus


_HARMONIC_BINDERS: Final[dict[HarmonicKind, Callable[[FeatureSpec], HarmonicRoutine]]] = {
    HarmonicKind.CENTROID: lambda spec: harmonic.centroid,
    HarmonicKind.SPREAD: lambda spec: harmonic.spread,
    HarmonicKind.INHARMONICITY: lambda spec: harmonic.inharmonicity,
    HarmonicKind.ODD_EVEN_RATIO: lambda spec: _odd_even,
    HarmonicKind.TRISTIMULUS: _bind_tristimulus,
}


def bind_spectral(spec: FeatureSpec, params: SpectralParameters) -> SpectralRoutine | None:
    """Return the routine for a spectral spec, or None if it is unresolved."""
    if spec.kind is None:
        return None
    return _SPECTRAL_BINDERS[spec.kind](spec, params)


def bind_harmonic(spec: FeatureSpec) -> HarmonicRoutine | None:
    """Return the routine for a harmonic spec, or None if it is unresolved."""
    if spec.kind is None:
        return None
    return _HARMONIC_BINDERS[spec.kind](spec)


def resolve_spectral(
    tokens: Sequence[str],
    params: SpectralParameters | None = None,
) -> tuple[list[SpectralRoutine | None], list[str]]:
    """Resolve spectral tokens to routines.

    Args:
        tokens: Feature tokens in output order.
        params: Parameters bound into flatness, noiseness and rolloff.

    Returns:
        ``(routines, descriptions)``; unknown tokens map to ``None``.
    """
    params = params or SpectralParameters()
    routines: list[SpectralRoutine | None] = []
    descriptions: list[str] = []
    for token in tokens:
        spec = lookup_spectral(token)
        if not spec.resolved:
            logger.debug("Unresolved spectral feature token: %r", token)
        routines.append(bind_spectral(spec, params))
        descriptions.append(spec.token)
    return routines, descriptions


def resolve_harmonic(tokens: Sequence[str]) -> tuple[list[HarmonicRoutine | None], list[str]]:
    """Resolve harmonic tokens to routines.

    Returns:
        ``(routines, descriptions)``; unknown tokens map to ``None``.
    """
    routines: list[HarmonicRoutine | None] = []
    descriptions: list[str] = []
    for token in tokens:
        spec = lookup_harmonic(token)
        if not spec.resolved:
            logger.debug("Unresolved harmonic feature token: %r", token)
        routines.append(bind_harmonic(spec))
        descriptions.append(spec.token)
    return routines, descriptions


def catalog() -> dict[str, dict[str, list[str]]]:
    """Known feature names grouped by vocabulary.

    Returns:
        ``{"spectral": {name: [aliases...]}, "harmonic": {...}}`` where the
        numbered families list their valid tokens.
    """
    out: dict[str, dict[str, list[str]]] = {"spectral": {}, "harmonic": {}}
    for group, aliases, families in (
        ("spectral", SPECTRAL_ALIASES, SPECTRAL_FAMILIES),
        ("harmonic", HARMONIC_ALIASES, HARMONIC_FAMILIES),
    ):
        for alias, kind in aliases.items():
            out[group].setdefault(kind.value, []).append(alias)
        for prefix, (kind, bands) in families.items():
            out[group][kind.value] = [f"{prefix}{b}" for b in bands]
    return out
