"""Compatibility classification contract."""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Protocol

from cratesmith.versioning.versions import BumpType

if TYPE_CHECKING:
    from cratesmith.workspace.package import Package


class Classification(IntEnum):
    """Verdict of comparing a crate's public interface against its baseline.

    Ordered by strictness, so ``max()`` picks the strictest verdict.
    """

    NO_CHANGE = 0
    PATCH_COMPATIBLE = 1
    MINOR_COMPATIBLE = 2
    MAJOR_BREAKING = 3

    def stricter(self, other: Classification) -> Classification:
        return max(self, other)

    @property
    def recommended_bump(self) -> BumpType:
        """The minimum bump semver requires for this verdict.

        Every release advances the version, so no change still needs a patch.
        """
        if self == Classification.MAJOR_BREAKING:
            return BumpType.MAJOR
        if self == Classification.MINOR_COMPATIBLE:
            return BumpType.MINOR
        return BumpType.PATCH


class Classifier(Protocol):
    """Anything that can classify a crate's working tree against a published version."""

    def classify(self, package: Package, baseline_version: str) -> Classification: ...

