"""Repository root and crate discovery."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import ValidationError

from cratesmith.compat import tomllib
from cratesmith.config import CratesmithConfig
from cratesmith.errors import DiscoveryError
from cratesmith.workspace.package import MANIFEST_FILENAME, Package, ParsedManifest

logger = logging.getLogger(__name__)

VCS_MARKER = ".git"


def find_repo_root(start: Path | None = None) -> Path:
    """Find the repository root by walking up to the nearest .git.

    Args:
        start: Directory to start from (defaults to cwd).

    Returns:
        Absolute path to the repository root.

    Raises:
        DiscoveryError: If no .git is found up to the filesystem root.
    """
    current = (start or Path.cwd()).resolve()

    for directory in (current, *current.parents):
        if (directory / VCS_MARKER).exists():
            return directory

    raise DiscoveryError(
        "Could not find repository root. Make sure you're running this tool "
        "from within the repository.",
        path=current,
    )


def parse_manifest(path: Path) -> ParsedManifest | None:
    """Parse a Cargo.toml as a single crate.

    Args:
        path: Path to Cargo.toml.

    Returns:
        The parsed manifest, or None if the file is not a crate manifest
        (a virtual workspace root, or unparseable TOML).

    Raises:
        DiscoveryError: If the file cannot be read.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DiscoveryError(f"Cannot read manifest: {e}", path=path) from e

    try:
        data = tomllib.loads(content)
        return ParsedManifest.model_validate(data)
    except (tomllib.TOMLDecodeError, ValidationError):
        logger.debug("Skipping %s: not a crate manifest", path)
        return None


def discover_packages(root: Path, config: CratesmithConfig) -> dict[str, Package]:
    """Find every crate under the repository root.

    Directories named in ``config.ignore_dirs`` (build output) and .git are
    not descended into. Crates that opt out via the ``skip`` metadata flag
    are left out.

    Args:
        root: Repository root.
        config: Repository configuration.

    Returns:
        Mapping of crate name to Package, sorted by name.
    """
    packages: dict[str, Package] = {}
    # Unpacked baselines hold copies of published crates
    cache_dir = os.path.normpath(os.path.join(root, config.semver.cache_dir))

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            d
            for d in dirnames
            if d != VCS_MARKER
            and not config.is_ignored_dir(d)
            and os.path.normpath(os.path.join(dirpath, d)) != cache_dir
        )
        if MANIFEST_FILENAME not in filenames:
            continue

        directory = Path(dirpath)
        manifest = parse_manifest(directory / MANIFEST_FILENAME)
        if manifest is None:
            continue

        try:
            metadata = manifest.crate_metadata(config.metadata_key)
        except ValidationError:
            logger.debug("Skipping %s: invalid metadata table", directory)
            continue

        if metadata.skip:
            logger.debug("Skipping %s: opted out of discovery", manifest.package.name)
            continue

        package = Package.from_manifest(
            manifest,
            directory,
            metadata=metadata,
            in_namespace=config.in_namespace,
        )
        if package.name in packages:
            logger.warning(
                "Duplicate crate %s at %s (keeping %s)",
                package.name,
                directory,
                packages[package.name].path,
            )
            continue
        packages[package.name] = package

    return dict(sorted(packages.items()))
