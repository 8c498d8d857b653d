"""Dependents command implementation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape

from cratesmith.commands.base import CommandContext, SyncCommand
from cratesmith.commands.dependencies import RelatedCratesResult, print_related
from cratesmith.commands.list import CrateRef
from cratesmith.errors import CratesmithError

if TYPE_CHECKING:
    from cratesmith.workspace import Workspace


@dataclass
class DependentsOptions:
    """Options for dependents command."""

    name: str
    direct: bool = False


class DependentsCommand(SyncCommand[RelatedCratesResult]):
    """Find the crates that would be affected by changing a crate."""

    def __init__(self, context: CommandContext, options: DependentsOptions) -> None:
        super().__init__(context)
        self.options = options

    def execute(self) -> RelatedCratesResult:
        pkg = self.workspace.get_package(self.options.name)
        graph = self.workspace.graph
        if self.options.direct:
            names = graph.dependents(pkg.name)
        else:
            names = graph.descendants(pkg.name)

        packages = self.workspace.packages
        return RelatedCratesResult(
            crate=CrateRef(pkg.name, pkg.version),
            related=[CrateRef(n, packages[n].version) for n in names],
        )


def get_dependents(
    workspace: Workspace,
    name: str,
    *,
    direct: bool = False,
) -> RelatedCratesResult:
    """Convenience function to resolve the crates depending on a crate.

    Raises:
        PackageNotFoundError: If the crate does not exist.
    """
    context = CommandContext(workspace=workspace)
    return DependentsCommand(context, DependentsOptions(name=name, direct=direct)).execute()


def handle_dependents_command(
    workspace: Workspace,
    name: str,
    *,
    console: Console,
    error_console: Console,
    direct: bool = False,
    json_output: bool = False,
) -> None:
    try:
        result = get_dependents(workspace, name, direct=direct)
        print_related(console, result, json_output=json_output)
    except typer.Exit:
        raise
    except CratesmithError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e
    except Exception as e:
        error_console.print_exception()
        raise typer.Exit(1) from e
