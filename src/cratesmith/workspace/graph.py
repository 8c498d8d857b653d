"""Dependency graph over the crates of a repository."""

from __future__ import annotations

import heapq
from collections import deque
from collections.abc import Iterable, Iterator, Mapping

from cratesmith.errors import CycleError
from cratesmith.workspace.package import DependencyKind, Package


class DependencyGraph:
    """Directed "depends on" graph between crates, keyed by crate name.

    Forward and reverse adjacency are both precomputed so that dependency and
    dependent queries cost the same. The graph never changes after
    construction; version bumps only touch Package objects.

    Attributes:
        kinds: Dependency kinds the edges were built from.
    """

    def __init__(
        self,
        nodes: Iterable[str],
        edges: Mapping[str, Iterable[str]],
        kinds: Iterable[DependencyKind] = (),
    ) -> None:
        """Initialize from nodes and a node -> dependencies mapping.

        Edges pointing at unknown nodes are dropped.

        Args:
            nodes: All node names.
            edges: Mapping from node to the nodes it depends on.
            kinds: Dependency kinds these edges represent.
        """
        self.kinds = tuple(kinds)
        self._forward: dict[str, list[str]] = {name: [] for name in nodes}
        self._reverse: dict[str, list[str]] = {name: [] for name in self._forward}

        for name, deps in edges.items():
            if name not in self._forward:
                continue
            for dep in deps:
                if dep == name or dep not in self._forward or dep in self._forward[name]:
                    continue
                self._forward[name].append(dep)
                self._reverse[dep].append(name)

        for adjacency in (self._forward, self._reverse):
            for targets in adjacency.values():
                targets.sort()

    @classmethod
    def build(
        cls,
        packages: Mapping[str, Package],
        kinds: Iterable[DependencyKind],
    ) -> DependencyGraph:
        """Build a graph from packages using the selected dependency kinds.

        Args:
            packages: Mapping of crate name to Package.
            kinds: Dependency kinds to turn into edges.

        Returns:
            The dependency graph.
        """
        kinds = tuple(kinds)
        edges = {
            name: [dep for kind in kinds for dep in pkg.dependencies_of(kind)]
            for name, pkg in packages.items()
        }
        return cls(packages.keys(), edges, kinds)

    @property
    def nodes(self) -> list[str]:
        return list(self._forward)

    def __contains__(self, name: object) -> bool:
        return name in self._forward

    def __len__(self) -> int:
        return len(self._forward)

    def edges(self) -> Iterator[tuple[str, str]]:
        """Yield (dependent, dependency) pairs."""
        for name, deps in self._forward.items():
            for dep in deps:
                yield name, dep

    def dependencies(self, name: str) -> list[str]:
        """Direct dependencies of a crate."""
        return list(self._forward[name])

    def dependents(self, name: str) -> list[str]:
        """Crates that depend directly on a crate."""
        return list(self._reverse[name])

    def ancestors(self, name: str) -> list[str]:
        """Transitive dependencies of a crate, breadth-first, excluding itself."""
        return [n for n in self._bfs([name], self._forward) if n != name]

    def descendants(self, name: str) -> list[str]:
        """Transitive dependents of a crate, breadth-first, excluding itself."""
        return [n for n in self._bfs([name], self._reverse) if n != name]

    def walk_dependencies(self, seeds: Iterable[str]) -> list[str]:
        """Seeds followed by everything they depend on, breadth-first."""
        return self._bfs(seeds, self._forward)

    def walk_dependents(self, seeds: Iterable[str]) -> list[str]:
        """Seeds followed by everything depending on them, breadth-first."""
        return self._bfs(seeds, self._reverse)

    def topological_order(self) -> list[str]:
        """Order crates so that each appears after all of its dependencies.

        Ties are broken by name so the result is deterministic.

        Returns:
            Crate names in dependency order.

        Raises:
            CycleError: If the graph contains a cycle.
        """
        remaining = {name: len(deps) for name, deps in self._forward.items()}
        ready = [name for name, count in remaining.items() if count == 0]
        heapq.heapify(ready)

        order: list[str] = []
        while ready:
            name = heapq.heappop(ready)
            order.append(name)
            for dependent in self._reverse[name]:
                remaining[dependent] -= 1
                if remaining[dependent] == 0:
                    heapq.heappush(ready, dependent)

        if len(order) != len(self._forward):
            raise CycleError()
        return order

    def _bfs(self, seeds: Iterable[str], adjacency: dict[str, list[str]]) -> list[str]:
        visited: dict[str, None] = {}
        queue: deque[str] = deque()
        for seed in seeds:
            if seed not in adjacency:
                raise KeyError(seed)
            if seed not in visited:
                visited[seed] = None
                queue.append(seed)

        while queue:
            current = queue.popleft()
            for neighbour in adjacency[current]:
                if neighbour not in visited:
                    visited[neighbour] = None
                    queue.append(neighbour)

        return list(visited)
