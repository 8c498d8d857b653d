"""Workspace: the crates of one repository and their dependency graphs."""

from __future__ import annotations

import logging
from pathlib import Path

from cratesmith.config import CratesmithConfig, load_config
from cratesmith.errors import PackageNotFoundError, PublishDependencyError
from cratesmith.workspace.discovery import discover_packages, find_repo_root
from cratesmith.workspace.graph import DependencyGraph
from cratesmith.workspace.package import DependencyKind, Package

logger = logging.getLogger(__name__)


class Workspace:
    """Loaded repository state for one invocation.

    Attributes:
        root: Repository root.
        config: Repository configuration.
        packages: Crates keyed by name, sorted.
        runtime_graph: Edges from [dependencies].
        build_graph: Edges from [build-dependencies].
        dev_graph: Edges from [dev-dependencies].
        graph: Edges of all three kinds combined.
    """

    def __init__(
        self,
        root: Path,
        config: CratesmithConfig,
        packages: dict[str, Package],
    ) -> None:
        self.root = root
        self.config = config
        self.packages = packages
        self.runtime_graph = DependencyGraph.build(packages, [DependencyKind.RUNTIME])
        self.build_graph = DependencyGraph.build(packages, [DependencyKind.BUILD])
        self.dev_graph = DependencyGraph.build(packages, [DependencyKind.DEV])
        self.graph = DependencyGraph.build(packages, list(DependencyKind))

    @classmethod
    def discover(cls, path: Path | None = None) -> Workspace:
        """Load the workspace containing a path.

        Args:
            path: Directory inside the repository (defaults to cwd).

        Returns:
            The loaded workspace, already validated.

        Raises:
            DiscoveryError: If the repository or its manifests cannot be read.
            ConfigurationError: If cratesmith.yaml is invalid.
            PublishDependencyError: If a publishable crate depends on a
                non-publishable one.
        """
        root = find_repo_root(path)
        config = load_config(root)
        packages = discover_packages(root, config)
        logger.debug("Discovered %d crates under %s", len(packages), root)

        workspace = cls(root, config, packages)
        workspace.check_publish_dependencies()
        return workspace

    def graph_for(self, kind: DependencyKind) -> DependencyGraph:
        if kind == DependencyKind.RUNTIME:
            return self.runtime_graph
        if kind == DependencyKind.BUILD:
            return self.build_graph
        return self.dev_graph

    def get_package(self, name: str) -> Package:
        """Get a crate by name.

        Raises:
            PackageNotFoundError: If no such crate exists.
        """
        try:
            return self.packages[name]
        except KeyError:
            raise PackageNotFoundError(name) from None

    def check_publish_dependencies(self) -> None:
        """Ensure no publishable crate has a runtime dependency that is not published.

        Raises:
            PublishDependencyError: On the first violation found.
        """
        for pkg in self.packages.values():
            if not pkg.publish:
                continue
            for dep_name in self.runtime_graph.dependencies(pkg.name):
                if not self.packages[dep_name].publish:
                    raise PublishDependencyError(pkg.name, dep_name)

    def set_version(self, name: str, version: str) -> str:
        """Record a new version for a crate in memory.

        Returns:
            The previous version.
        """
        pkg = self.get_package(name)
        old_version = pkg.version
        pkg.version = version
        return old_version
