"""Version arithmetic, manifest editing and changelogs."""

from cratesmith.versioning.changelog import update_changelog
from cratesmith.versioning.manifest import (
    read_features,
    set_dependency_version,
    set_package_version,
)
from cratesmith.versioning.versions import (
    BumpType,
    bump_minor,
    bump_patch,
    bump_version,
    parse_version,
)

__all__ = [
    "BumpType",
    "bump_minor",
    "bump_patch",
    "bump_version",
    "parse_version",
    "read_features",
    "set_dependency_version",
    "set_package_version",
    "update_changelog",
]
