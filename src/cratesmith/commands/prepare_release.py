"""Prepare-release command implementation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cratesmith.classifier import CargoSemverClassifier, Classification, Classifier
from cratesmith.commands.base import CommandContext, SyncCommand
from cratesmith.errors import CratesmithError
from cratesmith.release import (
    BumpPlan,
    FollowUpCommands,
    apply_plan,
    propagate,
    publish_dry_run,
    release_commands,
)

if TYPE_CHECKING:
    from cratesmith.workspace import Workspace


@dataclass
class PrepareReleaseResult:
    """Result of prepare-release command.

    Attributes:
        plan: Decided bumps, in decision order.
        classifications: Verdict per classified crate.
        commands: Follow-up commands for a human to run; None on dry runs.
        applied: Whether manifests were rewritten.
    """

    plan: BumpPlan
    classifications: dict[str, Classification] = field(default_factory=dict)
    commands: FollowUpCommands | None = None
    applied: bool = False


@dataclass
class PrepareReleaseOptions:
    """Options for prepare-release command."""

    seeds: list[str]
    dry_run: bool = False
    changelog: bool = True
    publish_check: bool = True


class PrepareReleaseCommand(SyncCommand[PrepareReleaseResult]):
    """Decide, apply and verify the version bumps needed to release crates.

    Nothing is committed, tagged or published: the result carries the
    commands to do so.
    """

    def __init__(
        self,
        context: CommandContext,
        options: PrepareReleaseOptions,
        classifier: Classifier | None = None,
    ) -> None:
        super().__init__(context)
        self.options = options
        self.classifier = classifier or CargoSemverClassifier(
            self.workspace.root, self.workspace.config.semver
        )

    @property
    def is_dry_run(self) -> bool:
        return self.options.dry_run or self.context.dry_run

    def plan(self) -> PrepareReleaseResult:
        """Classify and propagate without touching the working tree."""
        classifications: dict[str, Classification] = {}
        plan = propagate(
            self.options.seeds,
            self.workspace,
            self.classifier,
            on_classified=classifications.__setitem__,
        )
        return PrepareReleaseResult(plan=plan, classifications=classifications)

    def apply(self, result: PrepareReleaseResult) -> PrepareReleaseResult:
        """Write a computed plan and verify the seeds still package."""
        apply_plan(self.workspace, result.plan, changelog=self.options.changelog)
        result.applied = True

        if self.options.publish_check:
            for name in self.options.seeds:
                publish_dry_run(self.workspace, self.workspace.packages[name])

        result.commands = release_commands(self.workspace, result.plan)
        return result

    def execute(self) -> PrepareReleaseResult:
        result = self.plan()
        if self.is_dry_run:
            return result
        return self.apply(result)


def prepare_release(
    workspace: Workspace,
    seeds: list[str],
    *,
    dry_run: bool = False,
    changelog: bool = True,
    publish_check: bool = True,
    classifier: Classifier | None = None,
) -> PrepareReleaseResult:
    """Convenience function to prepare a release.

    Args:
        workspace: Workspace to release from.
        seeds: Crates the release is requested for.
        dry_run: Only compute the plan.
        changelog: Regenerate changelogs of bumped crates.
        publish_check: Run ``cargo publish --dry-run`` for each seed.
        classifier: Classifier to use (defaults to cargo-semver-checks).

    Returns:
        Prepare-release result.

    Raises:
        PackageNotFoundError: If a seed does not exist.
        NonPublishableSeedError: If a seed is not publishable.
        CratesmithError: Whatever classification or applying raises.
    """
    context = CommandContext(workspace=workspace, dry_run=dry_run)
    options = PrepareReleaseOptions(
        seeds=seeds,
        dry_run=dry_run,
        changelog=changelog,
        publish_check=publish_check,
    )
    return PrepareReleaseCommand(context, options, classifier).execute()


def plan_table(result: PrepareReleaseResult) -> Table:
    table = Table()
    table.add_column("Crate", style="cyan")
    table.add_column("Verdict")
    table.add_column("Current", style="dim")
    table.add_column("Next", style="green")
    table.add_column("Bump", style="magenta")

    for entry in result.plan:
        verdict = result.classifications.get(entry.name)
        table.add_row(
            entry.name,
            verdict.name.lower().replace("_", " ") if verdict is not None else "-",
            entry.old_version,
            entry.new_version,
            entry.bump.label,
        )
    return table


def handle_prepare_release_command(
    workspace: Workspace,
    seeds: list[str],
    *,
    console: Console,
    error_console: Console,
    dry_run: bool = False,
    changelog: bool = True,
    publish_check: bool = True,
    yes: bool = False,
) -> None:
    """Handle the prepare-release command from the CLI with plan and confirmation."""
    try:
        context = CommandContext(workspace=workspace, dry_run=dry_run)
        options = PrepareReleaseOptions(
            seeds=seeds,
            dry_run=dry_run,
            changelog=changelog,
            publish_check=publish_check,
        )
        cmd = PrepareReleaseCommand(context, options)

        # 1. Plan
        result = cmd.plan()
        if not result.plan:
            console.print("[yellow]No crates to release[/yellow]")
            return

        if dry_run:
            console.print("[yellow]Dry run - no changes will be made[/yellow]\n")

        console.print("[bold]Planned bumps:[/bold]")
        console.print(plan_table(result))

        if dry_run:
            return

        # 2. Confirmation
        if not yes and not typer.confirm("\nApply these bumps?", default=False):
            console.print("[yellow]Release preparation cancelled.[/yellow]")
            return

        # 3. Apply and verify
        result = cmd.apply(result)

        console.print(f"\n[green]Bumped {len(result.plan)} crates[/green]\n")
        if result.commands is not None:
            console.print(result.commands.render(), markup=False, highlight=False)
    except typer.Exit:
        raise
    except CratesmithError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e
    except Exception as e:
        error_console.print_exception()
        raise typer.Exit(1) from e
