"""cratesmith - release manager for multi-crate Rust repositories.

Provides:
- Crate discovery and dependency graphs (runtime, build and dev)
- Semver classification against published baselines
- Release propagation across dependent crates
- Format-preserving Cargo.toml version edits
- Manifest and line-ending lints, batched builds and docs
"""

from cratesmith.config import CratesmithConfig, load_config
from cratesmith.errors import (
    BaselineFetchError,
    CargoError,
    ClassifierError,
    ConfigurationError,
    CratesmithError,
    CycleError,
    DiscoveryError,
    DocBuildError,
    LineEndingError,
    ManifestError,
    ManifestLintError,
    NonPublishableSeedError,
    PackageNotFoundError,
    PublishDependencyError,
    VersionParseError,
)
from cratesmith.release import BumpPlan, PlannedBump, propagate
from cratesmith.workspace import DependencyGraph, Package, Workspace

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core
    "Workspace",
    "Package",
    "DependencyGraph",
    "CratesmithConfig",
    "load_config",
    # Release
    "BumpPlan",
    "PlannedBump",
    "propagate",
    # Errors
    "CratesmithError",
    "ConfigurationError",
    "DiscoveryError",
    "ManifestError",
    "VersionParseError",
    "PackageNotFoundError",
    "PublishDependencyError",
    "CycleError",
    "NonPublishableSeedError",
    "CargoError",
    "BaselineFetchError",
    "ClassifierError",
    "ManifestLintError",
    "LineEndingError",
    "DocBuildError",
]
