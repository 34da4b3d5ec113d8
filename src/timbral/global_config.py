"""Global, project-wide configuration constants.

This module intentionally contains **no business logic** – only simple,
shared filesystem anchors and cross-cutting constants that many modules
can import.

Feature-specific tunables (flatness floor, rolloff fraction, ...) live in
`timbral.features.config`.
"""

from pathlib import Path

# Core roots
PACKAGE_ROOT: Path = Path(__file__).resolve().parent
# PROJECT_ROOT is the repo root (where pyproject.toml and data/ live)
# From src/timbral/global_config.py, go up two levels: src/timbral -> src -> repo root
PROJECT_ROOT: Path = PACKAGE_ROOT.parent.parent

# Core Names
PROJECT_NAME = "timbral"
PACKAGE_NAME = "timbral"

# Data directories
DATA_DIR: Path = PROJECT_ROOT / "data"
RAW_AUDIO_DIR: Path = DATA_DIR / "raw" / "audio"

# Logs directories
LOGS_DIR: Path = PROJECT_ROOT / "logs"

# Analysis defaults
DEFAULT_FRAME_DURATION = 0.0256  # sec
DEFAULT_HOP_DURATION = 0.010  # sec
DEFAULT_PEAK_COUNT = 10
DEFAULT_LOW_PITCH = 80.0  # Hz
DEFAULT_HIGH_PITCH = 400.0  # Hz
