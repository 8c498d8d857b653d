"""Configuration models and loading."""

from cratesmith.config.loader import CONFIG_FILENAME, load_config
from cratesmith.config.schema import (
    CratesmithConfig,
    ManifestLintConfig,
    ReleaseConfig,
    SemverConfig,
)

__all__ = [
    "CONFIG_FILENAME",
    "CratesmithConfig",
    "ManifestLintConfig",
    "ReleaseConfig",
    "SemverConfig",
    "load_config",
]
