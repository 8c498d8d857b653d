"""Writing release decisions to manifests and preparing follow-up commands."""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cratesmith.cargo import run_cargo
from cratesmith.versioning.changelog import update_changelog
from cratesmith.versioning.manifest import set_dependency_version, set_package_version

if TYPE_CHECKING:
    from cratesmith.release.propagation import BumpPlan
    from cratesmith.workspace import Package, Workspace

logger = logging.getLogger(__name__)


def bump_package(
    workspace: Workspace,
    name: str,
    new_version: str,
    *,
    changelog: bool = True,
) -> str:
    """Set a crate's version and update every crate that depends on it.

    Both edits are idempotent, so re-running on a partially bumped tree is
    safe.

    Args:
        workspace: Loaded workspace.
        name: Crate to bump.
        new_version: Version to set.
        changelog: Regenerate the crate's changelog afterwards.

    Returns:
        The previous version.

    Raises:
        PackageNotFoundError: If the crate does not exist.
        ManifestError: If a manifest cannot be edited.
        CargoError: If changelog regeneration fails.
    """
    pkg = workspace.get_package(name)
    set_package_version(pkg.manifest_path, new_version)
    old_version = workspace.set_version(name, new_version)

    for dependent in workspace.graph.dependents(name):
        logger.info("Updating %s-%s -> %s for %s", name, old_version, new_version, dependent)
        set_dependency_version(workspace.packages[dependent].manifest_path, name, new_version)

    if changelog and workspace.config.release.changelog:
        update_changelog(workspace.root, pkg, workspace.config.release)

    return old_version


def apply_plan(workspace: Workspace, plan: BumpPlan, *, changelog: bool = True) -> None:
    """Write every planned bump to disk, in plan order."""
    for entry in plan:
        bump_package(workspace, entry.name, entry.new_version, changelog=changelog)


def publish_args(package: Package, *, dry_run: bool = False) -> list[str]:
    """Arguments for ``cargo publish`` using a crate's first build variant."""
    config = package.default_config
    args = ["publish", "--manifest-path", str(package.manifest_path)]
    if config.features:
        args.extend(["--features", ",".join(config.features)])
    if config.target:
        args.extend(["--target", config.target])
    if dry_run:
        args.extend(["--dry-run", "--allow-dirty", "--keep-going"])
    return args


def publish_dry_run(workspace: Workspace, package: Package) -> None:
    """Verify a crate packages and builds as it would be published.

    Raises:
        CargoError: If ``cargo publish --dry-run`` fails.
    """
    run_cargo(publish_args(package, dry_run=True), cwd=workspace.root)


@dataclass
class FollowUpCommands:
    """Shell commands a human runs after reviewing a prepared release."""

    commit: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    publish: list[str] = field(default_factory=list)
    push: list[str] = field(default_factory=list)

    def render(self) -> str:
        lines = ["# Please inspect changes and run the following commands when happy:"]
        lines.extend(self.commit)
        lines.append("")
        lines.extend(self.tags)
        lines.append("")
        lines.append("# Run these commands to publish the crate and dependents:")
        lines.extend(self.publish)
        lines.append("")
        lines.append("# Run this command to push changes and tags:")
        lines.extend(self.push)
        return "\n".join(lines)


def release_commands(workspace: Workspace, plan: BumpPlan) -> FollowUpCommands:
    """Build the commit, tag, publish and push commands for an applied plan.

    Crates are listed in dependency order so each publish finds its
    dependencies already on the registry.
    """
    config = workspace.config.release
    planned = set(plan.names)
    ordered = [
        workspace.packages[name]
        for name in workspace.runtime_graph.topological_order()
        if name in planned and workspace.packages[name].publish
    ]

    commands = FollowUpCommands()
    commands.commit.append(f"git commit -a -m {shlex.quote(config.commit_message)}")
    for pkg in ordered:
        tag = config.tag_format.format(name=pkg.name, version=plan[pkg.name].new_version)
        commands.tags.append(f"git tag {tag}")
        commands.publish.append(shlex.join(["cargo", *publish_args(pkg)]))
    commands.push.append("git push --tags")
    return commands
