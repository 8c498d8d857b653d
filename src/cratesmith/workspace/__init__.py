"""Crate discovery, package model and dependency graphs."""

from cratesmith.workspace.discovery import discover_packages, find_repo_root
from cratesmith.workspace.graph import DependencyGraph
from cratesmith.workspace.package import (
    BuildConfig,
    BuildConfigBatch,
    DependencyKind,
    Package,
)
from cratesmith.workspace.workspace import Workspace

__all__ = [
    "BuildConfig",
    "BuildConfigBatch",
    "DependencyGraph",
    "DependencyKind",
    "Package",
    "Workspace",
    "discover_packages",
    "find_repo_root",
]
