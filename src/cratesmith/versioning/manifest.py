"""Cargo.toml editing.

Uses tomlkit so that version edits keep the manifest's formatting, comments
and key order intact.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TypeGuard

import tomlkit
from tomlkit.container import OutOfOrderTableProxy
from tomlkit.exceptions import TOMLKitError
from tomlkit.items import InlineTable, Table

from cratesmith.errors import ManifestError

logger = logging.getLogger(__name__)

DEPENDENCY_SECTIONS = ("dependencies", "dev-dependencies", "build-dependencies")

# A super-table split by other tables, such as [package] followed later by
# [package.metadata.x], comes back as an OutOfOrderTableProxy.
TABLE_TYPES = (Table, OutOfOrderTableProxy)


def is_table(item: object) -> TypeGuard[Table | OutOfOrderTableProxy]:
    return isinstance(item, TABLE_TYPES)


def load_manifest(path: Path) -> tomlkit.TOMLDocument:
    """Load a Cargo.toml as a format-preserving document."""
    try:
        return tomlkit.parse(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ManifestError(f"Cannot read manifest: {e}", path=path) from e
    except TOMLKitError as e:
        raise ManifestError(f"Cannot parse manifest: {e}", path=path) from e


def save_manifest(path: Path, doc: tomlkit.TOMLDocument) -> None:
    path.write_text(tomlkit.dumps(doc), encoding="utf-8")


def set_package_version(path: Path, version: str) -> bool:
    """Set ``[package].version``.

    Args:
        path: Path to Cargo.toml.
        version: New version string.

    Returns:
        True if the file was rewritten.

    Raises:
        ManifestError: If the manifest has no [package] table.
    """
    doc = load_manifest(path)
    package = doc.get("package")
    if not is_table(package):
        raise ManifestError("Manifest has no [package] table", path=path)

    if package.get("version") == version:
        return False

    package["version"] = version
    save_manifest(path, doc)
    return True


def set_dependency_version(path: Path, dependency: str, version: str) -> bool:
    """Set the version requirement of a dependency in every dependency table.

    Handles both ``dep = "0.1.0"`` and ``dep = { version = "0.1.0", ... }``
    (inline or standard table). Other keys of a table are left untouched, as
    are tables without a ``version`` key (path-only or git dependencies).

    Args:
        path: Path to Cargo.toml.
        dependency: Dependency name (table key).
        version: New version requirement.

    Returns:
        True if the file was rewritten.
    """
    doc = load_manifest(path)
    changed = False

    for section in DEPENDENCY_SECTIONS:
        table = doc.get(section)
        if not is_table(table) or dependency not in table:
            continue

        item = table[dependency]
        if isinstance(item, str):
            if item != version:
                table[dependency] = version
                changed = True
        elif isinstance(item, InlineTable) or is_table(item):
            if "version" in item and item["version"] != version:
                item["version"] = version
                changed = True

    if changed:
        save_manifest(path, doc)
        logger.info("Updated %s to %s in %s", dependency, version, path)
    return changed


def is_optional_dependency(item: object) -> bool:
    if isinstance(item, InlineTable) or is_table(item):
        return bool(item.get("optional", False))
    return False


def optional_dependencies(doc: tomlkit.TOMLDocument) -> set[str]:
    """Names of optional dependencies across all dependency tables."""
    names: set[str] = set()
    for section in DEPENDENCY_SECTIONS:
        table = doc.get(section)
        if not is_table(table):
            continue
        for name, item in table.items():
            if is_optional_dependency(item):
                names.add(name)
    return names


def read_features(path: Path) -> set[str]:
    """Collect the features a crate exposes to its consumers.

    Includes the declared ``[features]`` plus optional runtime dependencies,
    which cargo exposes as implicit features.

    Raises:
        ManifestError: If the manifest does not exist or cannot be parsed.
    """
    if not path.is_file():
        raise ManifestError("Cargo.toml not found", path=path)

    doc = load_manifest(path)
    features: set[str] = set()

    declared = doc.get("features")
    if is_table(declared):
        features.update(declared.keys())

    dependencies = doc.get("dependencies")
    if is_table(dependencies):
        for name, item in dependencies.items():
            if is_optional_dependency(item):
                features.add(name)

    return features
