"""Version parsing and bump arithmetic on top of the semver library."""

from __future__ import annotations

from enum import IntEnum

import semver

from cratesmith.errors import VersionParseError


class BumpType(IntEnum):
    """Kind of version increment, ordered by strictness."""

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    @property
    def label(self) -> str:
        return self.name.lower()


def parse_version(value: str) -> semver.Version:
    """Parse a full ``major.minor.patch`` version.

    Cargo requires all three components, so "1.2" is rejected rather than
    padded.

    Raises:
        VersionParseError: If the string is not a valid semantic version.
    """
    try:
        return semver.Version.parse(value.strip())
    except (TypeError, ValueError) as e:
        raise VersionParseError(value) from e


def bump_version(version: str, bump_type: BumpType) -> str:
    """Return the next version for a bump type.

    Bumped versions carry no prerelease or build metadata. BumpType.NONE
    returns the version unchanged.
    """
    parsed = parse_version(version)
    if bump_type == BumpType.MAJOR:
        return str(parsed.bump_major())
    if bump_type == BumpType.MINOR:
        return str(parsed.bump_minor())
    if bump_type == BumpType.PATCH:
        return str(parsed.bump_patch())
    return str(parsed)


def bump_patch(version: str) -> str:
    """Increment the patch component of a version string."""
    return bump_version(version, BumpType.PATCH)


def bump_minor(version: str) -> str:
    """Increment the minor component and reset patch."""
    return bump_version(version, BumpType.MINOR)


def is_valid_version(value: str) -> bool:
    return semver.Version.is_valid(value.strip())
