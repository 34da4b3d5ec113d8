"""
timbral core package.

Frame-based spectral and harmonic feature extraction:
- Feature extractors and the math they compose live in `timbral.features`
- Batch orchestration over audio files lives in `timbral.pipeline`
- A Typer-based CLI lives in `timbral.cli`

Configuration:
- Shared, project-wide filesystem anchors and analysis defaults live in
  `timbral.global_config`.
- The extractor's own tunable parameters live in `timbral.features.config`.
"""

__version__ = "0.1.0"
