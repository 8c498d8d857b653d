"""Release propagation: deciding version bumps across dependent crates.

Given the crates a release was requested for, every publishable crate that is
reachable from them is classified against its published baseline and given a
patch or minor bump. A minor bump then forces every already-planned crate that
depends on it (through any dependency kind, transitively) from patch to minor,
repeated until nothing changes.

Major changes are deliberately folded into minor bumps: the crates managed
here have no stable 1.0 contract, so cargo treats ``0.x`` minor bumps as
breaking.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cratesmith.classifier import Classification, Classifier
from cratesmith.errors import NonPublishableSeedError
from cratesmith.versioning.versions import BumpType, bump_minor, bump_version

if TYPE_CHECKING:
    from cratesmith.workspace import DependencyGraph, Workspace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedBump:
    """A decided version bump for one crate.

    Attributes:
        name: Crate name.
        old_version: Version before the release.
        bump: PATCH or MINOR.
        new_version: Target version.
    """

    name: str
    old_version: str
    bump: BumpType
    new_version: str


class BumpPlan:
    """Ordered name -> PlannedBump mapping built by propagate().

    Entries keep decision order. A decision is never weakened: the only
    change allowed after deciding is a patch to minor upgrade.
    """

    def __init__(self) -> None:
        self._entries: dict[str, PlannedBump] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __getitem__(self, name: str) -> PlannedBump:
        return self._entries[name]

    def __iter__(self) -> Iterator[PlannedBump]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        inner = ", ".join(f"{e.name}: {e.bump.label}->{e.new_version}" for e in self)
        return f"BumpPlan({inner})"

    @property
    def names(self) -> list[str]:
        return list(self._entries)

    def decide(self, name: str, old_version: str, bump: BumpType) -> PlannedBump:
        """Record the bump for a crate; the first decision for a crate wins.

        Args:
            name: Crate name.
            old_version: Current version.
            bump: BumpType.PATCH or BumpType.MINOR.

        Returns:
            The recorded (possibly pre-existing) decision.
        """
        existing = self._entries.get(name)
        if existing is not None:
            return existing

        if bump not in (BumpType.PATCH, BumpType.MINOR):
            raise ValueError(f"Unsupported bump for {name}: {bump.label}")

        new_version = bump_version(old_version, bump)
        entry = PlannedBump(name, old_version, bump, new_version)
        self._entries[name] = entry
        return entry

    def upgrade_to_minor(self, name: str) -> bool:
        """Upgrade a planned patch bump to minor.

        The minor component of the already planned version is incremented, so
        a 2.1.0 crate planned as 2.1.1 becomes 2.2.0.

        Returns:
            True if the entry was upgraded; False if the crate is not planned
            or already minor.
        """
        entry = self._entries.get(name)
        if entry is None or entry.bump != BumpType.PATCH:
            return False

        new_version = bump_minor(entry.new_version)
        self._entries[name] = PlannedBump(name, entry.old_version, BumpType.MINOR, new_version)
        return True

    def as_dict(self) -> dict[str, tuple[BumpType, str]]:
        return {e.name: (e.bump, e.new_version) for e in self._entries.values()}


def bump_for(classification: Classification) -> BumpType:
    """Map a compatibility verdict to this repository's bump policy."""
    if classification >= Classification.MINOR_COMPATIBLE:
        return BumpType.MINOR
    return BumpType.PATCH


def release_closure(workspace: Workspace, seed: str) -> list[str]:
    """Crates affected by releasing ``seed``, in visiting order.

    The seed first, then what it depends on, then what depends on it, each
    breadth-first over runtime dependencies.
    """
    graph = workspace.runtime_graph
    ordered = dict.fromkeys(graph.walk_dependencies([seed]))
    ordered.update(dict.fromkeys(graph.walk_dependents([seed])))
    return list(ordered)


def check_seeds(workspace: Workspace, seeds: Sequence[str]) -> None:
    """Fail before any classification if a seed cannot be released.

    Raises:
        PackageNotFoundError: If a seed does not exist.
        NonPublishableSeedError: If a seed is not publishable.
    """
    for name in seeds:
        if not workspace.get_package(name).publish:
            raise NonPublishableSeedError(name)


def strengthen(plan: BumpPlan, graphs: Iterable[DependencyGraph]) -> list[str]:
    """Force minor bumps onto planned dependents of minor-bumped crates.

    Repeats full passes until a pass upgrades nothing. Crates that are not
    already in the plan are never added.

    Args:
        plan: Plan to upgrade in place.
        graphs: Graphs whose reverse edges are followed, each independently.

    Returns:
        Names of upgraded crates, in upgrade order.
    """
    graphs = list(graphs)
    upgraded: list[str] = []

    changed = True
    while changed:
        changed = False
        for entry in plan:
            if entry.bump != BumpType.MINOR:
                continue
            for graph in graphs:
                for dependent in graph.descendants(entry.name):
                    if plan.upgrade_to_minor(dependent):
                        logger.info(
                            "%s forced to minor bump by %s (%s)",
                            dependent,
                            entry.name,
                            plan[dependent].new_version,
                        )
                        upgraded.append(dependent)
                        changed = True

    return upgraded


def propagate(
    seeds: Sequence[str],
    workspace: Workspace,
    classifier: Classifier,
    *,
    on_classified: Callable[[str, Classification], None] | None = None,
) -> BumpPlan:
    """Compute the bump plan for releasing the given crates.

    Nothing is written to disk; the workspace is only read.

    Args:
        seeds: Crates the release was requested for.
        workspace: Loaded workspace.
        classifier: Compatibility classifier.
        on_classified: Optional progress callback (crate name, verdict).

    Returns:
        The finalized plan.

    Raises:
        PackageNotFoundError: If a seed does not exist.
        NonPublishableSeedError: If a seed is not publishable.
        CratesmithError: Whatever the classifier raises; no plan is returned.
    """
    check_seeds(workspace, seeds)

    plan = BumpPlan()
    for seed in seeds:
        for name in release_closure(workspace, seed):
            pkg = workspace.packages[name]
            if not pkg.publish or name in plan:
                continue

            classification = classifier.classify(pkg, pkg.version)
            if on_classified:
                on_classified(name, classification)

            entry = plan.decide(name, pkg.version, bump_for(classification))
            logger.info(
                "%s: %s -> %s bump to %s",
                name,
                classification.name.lower(),
                entry.bump.label,
                entry.new_version,
            )

    strengthen(plan, [workspace.runtime_graph, workspace.build_graph, workspace.dev_graph])
    return plan
