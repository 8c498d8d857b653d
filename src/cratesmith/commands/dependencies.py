"""Dependencies command implementation."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape

from cratesmith.commands.base import CommandContext, SyncCommand
from cratesmith.commands.list import CrateRef, print_crate_tree
from cratesmith.errors import CratesmithError

if TYPE_CHECKING:
    from cratesmith.workspace import Workspace


@dataclass
class RelatedCratesResult:
    """A crate and the crates related to it, in breadth-first order."""

    crate: CrateRef
    related: list[CrateRef]


@dataclass
class DependenciesOptions:
    """Options for dependencies command."""

    name: str
    direct: bool = False


class DependenciesCommand(SyncCommand[RelatedCratesResult]):
    """Find the in-repository crates a crate depends on, through any dependency kind."""

    def __init__(self, context: CommandContext, options: DependenciesOptions) -> None:
        super().__init__(context)
        self.options = options

    def execute(self) -> RelatedCratesResult:
        pkg = self.workspace.get_package(self.options.name)
        graph = self.workspace.graph
        if self.options.direct:
            names = graph.dependencies(pkg.name)
        else:
            names = graph.ancestors(pkg.name)

        packages = self.workspace.packages
        return RelatedCratesResult(
            crate=CrateRef(pkg.name, pkg.version),
            related=[CrateRef(n, packages[n].version) for n in names],
        )


def get_dependencies(
    workspace: Workspace,
    name: str,
    *,
    direct: bool = False,
) -> RelatedCratesResult:
    """Convenience function to resolve a crate's dependencies.

    Args:
        workspace: Workspace to query.
        name: Crate name.
        direct: Only immediate dependencies.

    Returns:
        The crate and its dependencies.

    Raises:
        PackageNotFoundError: If the crate does not exist.
    """
    context = CommandContext(workspace=workspace)
    return DependenciesCommand(context, DependenciesOptions(name=name, direct=direct)).execute()


def print_related(console: Console, result: RelatedCratesResult, *, json_output: bool) -> None:
    if json_output:
        data = {
            "name": result.crate.name,
            "version": result.crate.version,
            "related": [{"name": r.name, "version": r.version} for r in result.related],
        }
        console.print_json(json.dumps(data))
    else:
        print_crate_tree(console, result.crate, result.related)


def handle_dependencies_command(
    workspace: Workspace,
    name: str,
    *,
    console: Console,
    error_console: Console,
    direct: bool = False,
    json_output: bool = False,
) -> None:
    try:
        result = get_dependencies(workspace, name, direct=direct)
        print_related(console, result, json_output=json_output)
    except typer.Exit:
        raise
    except CratesmithError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e
    except Exception as e:
        error_console.print_exception()
        raise typer.Exit(1) from e
