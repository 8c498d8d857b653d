"""Semver-check command implementation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape

from cratesmith.classifier import CargoSemverClassifier, Classification, Classifier
from cratesmith.commands.base import CommandContext, SyncCommand
from cratesmith.errors import CratesmithError
from cratesmith.versioning import BumpType

if TYPE_CHECKING:
    from cratesmith.workspace import Workspace


@dataclass
class SemverCheckResult:
    """Result of semver-check command."""

    name: str
    version: str
    classification: Classification

    @property
    def minimum_bump(self) -> BumpType:
        return self.classification.recommended_bump


@dataclass
class SemverCheckOptions:
    """Options for semver-check command."""

    name: str


class SemverCheckCommand(SyncCommand[SemverCheckResult]):
    """Compare a crate's working tree against its published version."""

    def __init__(
        self,
        context: CommandContext,
        options: SemverCheckOptions,
        classifier: Classifier | None = None,
    ) -> None:
        super().__init__(context)
        self.options = options
        self.classifier = classifier or CargoSemverClassifier(
            self.workspace.root, self.workspace.config.semver
        )

    def execute(self) -> SemverCheckResult:
        pkg = self.workspace.get_package(self.options.name)
        classification = self.classifier.classify(pkg, pkg.version)
        return SemverCheckResult(pkg.name, pkg.version, classification)


def semver_check(
    workspace: Workspace,
    name: str,
    *,
    classifier: Classifier | None = None,
) -> SemverCheckResult:
    """Convenience function to classify one crate.

    Args:
        workspace: Workspace containing the crate.
        name: Crate name.
        classifier: Classifier to use (defaults to cargo-semver-checks).

    Returns:
        The verdict and the minimum bump it requires.

    Raises:
        PackageNotFoundError: If the crate does not exist.
        BaselineFetchError: If the published baseline cannot be retrieved.
        CargoError: If building rustdoc JSON fails.
        ClassifierError: If the check output cannot be interpreted.
    """
    context = CommandContext(workspace=workspace)
    cmd = SemverCheckCommand(context, SemverCheckOptions(name=name), classifier)
    return cmd.execute()


def handle_semver_check_command(
    workspace: Workspace,
    name: str,
    *,
    console: Console,
    error_console: Console,
) -> None:
    try:
        result = semver_check(workspace, name)
        console.print(
            f"[bold]{result.name}[/bold] {result.version}: "
            f"{result.classification.name.lower().replace('_', ' ')}"
        )
        console.print(f"Minimum update: [bold]{result.minimum_bump.label}[/bold]")
    except typer.Exit:
        raise
    except CratesmithError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e
    except Exception as e:
        error_console.print_exception()
        raise typer.Exit(1) from e
