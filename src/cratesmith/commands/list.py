"""List command implementation."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cratesmith.commands.base import CommandContext, SyncCommand
from cratesmith.errors import CratesmithError

if TYPE_CHECKING:
    from cratesmith.workspace import Workspace


class ListFormat(Enum):
    """Output format for list command."""

    TREE = "tree"
    TABLE = "table"
    JSON = "json"
    NAMES = "names"


@dataclass
class CrateRef:
    """A crate name with its current version."""

    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name}-{self.version}"


@dataclass
class PackageInfo:
    """Information about a crate for display."""

    name: str
    version: str
    path: str
    publish: bool
    dependencies: list[CrateRef]
    transitive: list[CrateRef]


@dataclass
class ListResult:
    """Result of list command."""

    packages: list[PackageInfo]


@dataclass
class ListOptions:
    """Options for list command."""

    publishable_only: bool = False


class ListCommand(SyncCommand[ListResult]):
    """List every crate in dependency order with its in-repository dependencies."""

    def __init__(self, context: CommandContext, options: ListOptions | None = None) -> None:
        super().__init__(context)
        self.options = options or ListOptions()

    def execute(self) -> ListResult:
        graph = self.workspace.runtime_graph
        packages = self.workspace.packages

        infos: list[PackageInfo] = []
        for name in graph.topological_order():
            pkg = packages[name]
            if self.options.publishable_only and not pkg.publish:
                continue
            deps = [CrateRef(d, packages[d].version) for d in graph.dependencies(name)]
            closure = [CrateRef(d, packages[d].version) for d in graph.ancestors(name)]
            infos.append(
                PackageInfo(
                    name=name,
                    version=pkg.version,
                    path=str(pkg.path.relative_to(self.workspace.root)),
                    publish=pkg.publish,
                    dependencies=deps,
                    transitive=closure,
                )
            )

        return ListResult(packages=infos)


def list_packages(
    workspace: Workspace,
    *,
    publishable_only: bool = False,
) -> ListResult:
    """Convenience function to list crates.

    Args:
        workspace: Workspace to list.
        publishable_only: Hide crates with ``publish = false``.

    Returns:
        List result with crate info, in topological order.
    """
    context = CommandContext(workspace=workspace)
    options = ListOptions(publishable_only=publishable_only)
    return ListCommand(context, options).execute()


def print_crate_tree(console: Console, root: CrateRef, children: list[CrateRef]) -> None:
    """Print a crate followed by one ``|-`` line per related crate."""
    console.print(f"+ {root}", markup=False, highlight=False)
    for child in children:
        console.print(f"|- {child}", markup=False, highlight=False)


def handle_list_command(
    workspace: Workspace,
    *,
    console: Console,
    error_console: Console,
    json_output: bool = False,
    table: bool = False,
    names: bool = False,
    publishable_only: bool = False,
    transitive: bool = False,
) -> None:
    try:
        fmt = ListFormat.TREE
        if json_output:
            fmt = ListFormat.JSON
        elif table:
            fmt = ListFormat.TABLE
        elif names:
            fmt = ListFormat.NAMES

        result = list_packages(workspace, publishable_only=publishable_only)

        if fmt == ListFormat.JSON:
            data = [
                {
                    "name": p.name,
                    "version": p.version,
                    "path": p.path,
                    "publish": p.publish,
                    "dependencies": [d.name for d in p.dependencies],
                    "transitive": [d.name for d in p.transitive],
                }
                for p in result.packages
            ]
            console.print_json(json.dumps(data))
        elif fmt == ListFormat.NAMES:
            for pkg in result.packages:
                console.print(pkg.name, markup=False, highlight=False)
        elif fmt == ListFormat.TABLE:
            out = Table(title="Crates")
            out.add_column("Name", style="bold")
            out.add_column("Version")
            out.add_column("Path")
            out.add_column("Publish")
            out.add_column("Dependencies")

            for pkg in result.packages:
                shown = pkg.transitive if transitive else pkg.dependencies
                deps = ", ".join(d.name for d in shown) or "-"
                out.add_row(pkg.name, pkg.version, pkg.path, "yes" if pkg.publish else "no", deps)

            console.print(out)
        else:
            for pkg in result.packages:
                shown = pkg.transitive if transitive else pkg.dependencies
                print_crate_tree(console, CrateRef(pkg.name, pkg.version), shown)
                console.print()
    except typer.Exit:
        raise
    except CratesmithError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e
    except Exception as e:
        error_console.print_exception()
        raise typer.Exit(1) from e
