"""Changelog regeneration through cargo-release."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from cratesmith.cargo import run_cargo

if TYPE_CHECKING:
    from cratesmith.config import ReleaseConfig
    from cratesmith.workspace.package import Package

logger = logging.getLogger(__name__)


def update_changelog(root: Path, package: Package, config: ReleaseConfig) -> None:
    """Run ``cargo release replace`` for a crate.

    The replacements themselves (changelog headers, compare links) are
    described by the cargo-release configuration file.

    Args:
        root: Repository root.
        package: Crate whose changelog should be updated.
        config: Release settings.

    Raises:
        CargoError: If cargo-release fails.
    """
    args = [
        "release",
        "replace",
        "--config",
        str(root / config.changelog_config),
        "--manifest-path",
        str(package.manifest_path),
        "--execute",
        "--no-confirm",
    ]
    logger.info("Updating changelog for %s-%s", package.name, package.version)
    run_cargo(args, cwd=root, capture=True)
