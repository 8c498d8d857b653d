"""Bump command implementation: force a crate to a given version."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape

from cratesmith.commands.base import CommandContext, SyncCommand
from cratesmith.errors import CratesmithError
from cratesmith.release import bump_package
from cratesmith.versioning import parse_version

if TYPE_CHECKING:
    from cratesmith.workspace import Workspace


@dataclass
class BumpResult:
    """Result of bump command."""

    name: str
    old_version: str
    new_version: str
    dependents: list[str] = field(default_factory=list)


@dataclass
class BumpOptions:
    """Options for bump command."""

    name: str
    version: str
    changelog: bool = True


class BumpCommand(SyncCommand[BumpResult]):
    """Set a crate's version and the matching requirement in its direct dependents.

    Used to override the outcome of prepare-release by hand.
    """

    def __init__(self, context: CommandContext, options: BumpOptions) -> None:
        super().__init__(context)
        self.options = options

    def execute(self) -> BumpResult:
        name = self.options.name
        new_version = str(parse_version(self.options.version))
        old_version = bump_package(
            self.workspace,
            name,
            new_version,
            changelog=self.options.changelog,
        )
        return BumpResult(
            name=name,
            old_version=old_version,
            new_version=new_version,
            dependents=self.workspace.graph.dependents(name),
        )


def bump(
    workspace: Workspace,
    name: str,
    version: str,
    *,
    changelog: bool = True,
) -> BumpResult:
    """Convenience function to force a crate version.

    Args:
        workspace: Workspace to modify.
        name: Crate to bump.
        version: New version.
        changelog: Regenerate the crate's changelog.

    Returns:
        Bump result.

    Raises:
        PackageNotFoundError: If the crate does not exist.
        VersionParseError: If the version is not valid semver.
    """
    context = CommandContext(workspace=workspace)
    options = BumpOptions(name=name, version=version, changelog=changelog)
    return BumpCommand(context, options).execute()


def handle_bump_command(
    workspace: Workspace,
    name: str,
    version: str,
    *,
    console: Console,
    error_console: Console,
    changelog: bool = True,
) -> None:
    try:
        result = bump(workspace, name, version, changelog=changelog)
        console.print(
            f"[green]Bumped[/green] [bold]{result.name}[/bold] "
            f"{result.old_version} -> {result.new_version}"
        )
        for dependent in result.dependents:
            console.print(f"  updated requirement in {dependent}")
    except typer.Exit:
        raise
    except CratesmithError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e
    except Exception as e:
        error_console.print_exception()
        raise typer.Exit(1) from e
