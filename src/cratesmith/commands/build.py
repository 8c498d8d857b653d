"""Build command implementation using ``cargo batch``."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape

from cratesmith.cargo import run_cargo
from cratesmith.commands.base import CommandContext, SyncCommand
from cratesmith.errors import CratesmithError

if TYPE_CHECKING:
    from cratesmith.workspace import BuildConfig, BuildConfigBatch, Package, Workspace

logger = logging.getLogger(__name__)


@dataclass
class BuildBatch:
    """One ``cargo batch`` invocation.

    Attributes:
        args: Arguments passed to cargo.
        env: Environment overrides for the invocation.
        crates: Crates built by the batch, one entry per build variant.
    """

    args: list[str]
    env: dict[str, str]
    crates: list[str] = field(default_factory=list)


@dataclass
class BuildResult:
    """Result of build command."""

    batches: list[BuildBatch]
    dry_run: bool = False

    @property
    def build_count(self) -> int:
        return sum(len(b.crates) for b in self.batches)


@dataclass
class BuildOptions:
    """Options for build command."""

    name: str | None = None
    group: str | None = None


def build_args(package: Package, config: BuildConfig) -> list[str]:
    """Arguments of one ``cargo build`` inside a batch."""
    args = ["build", "--release", f"--manifest-path={package.manifest_path}"]
    if config.target:
        args.append(f"--target={config.target}")
    if config.features:
        args.append(f"--features={','.join(config.features)}")
    if config.artifact_dir:
        args.append(f"--artifact-dir={config.artifact_dir}")
    return args


def batch_env(batch: BuildConfigBatch) -> dict[str, str]:
    """Environment for a batch; RUSTFLAGS is appended to any inherited value."""
    env = dict(batch.env)
    configured = env.get("RUSTFLAGS")
    inherited = os.environ.get("RUSTFLAGS")
    if configured is not None and inherited:
        env["RUSTFLAGS"] = f"{inherited} {configured}"
    return env


class BuildCommand(SyncCommand[BuildResult]):
    """Build crates, one ``cargo batch`` per distinct environment and build-std set."""

    def __init__(self, context: CommandContext, options: BuildOptions | None = None) -> None:
        super().__init__(context)
        self.options = options or BuildOptions()

    def get_packages(self) -> list[Package]:
        if self.options.name:
            return [self.workspace.get_package(self.options.name)]
        return list(self.workspace.packages.values())

    def plan(self) -> list[BuildBatch]:
        """Group the selected build variants into batches.

        Only variants whose group equals the requested group are built; with no
        group requested, only ungrouped variants are.
        """
        grouped: dict[BuildConfigBatch, BuildBatch] = {}
        for pkg in self.get_packages():
            for config in pkg.build_configs:
                if config.group != self.options.group:
                    continue

                key = config.batch_key
                batch = grouped.get(key)
                if batch is None:
                    args = ["batch"]
                    if key.build_std:
                        args.append(f"-Zbuild-std={','.join(key.build_std)}")
                    batch = BuildBatch(args=args, env=batch_env(key))
                    grouped[key] = batch

                batch.args.append("---")
                batch.args.extend(build_args(pkg, config))
                batch.crates.append(pkg.name)

        return list(grouped.values())

    def execute(self) -> BuildResult:
        batches = self.plan()
        if self.context.dry_run:
            return BuildResult(batches=batches, dry_run=True)

        for batch in batches:
            logger.info("Building %d variants: %s", len(batch.crates), ", ".join(batch.crates))
            run_cargo(batch.args, cwd=self.workspace.root, env=batch.env)
        return BuildResult(batches=batches)


def build(
    workspace: Workspace,
    *,
    name: str | None = None,
    group: str | None = None,
    dry_run: bool = False,
) -> BuildResult:
    """Convenience function to build crates.

    Args:
        workspace: Workspace to build.
        name: Build only this crate.
        group: Build variants tagged with this group.
        dry_run: Plan the batches without running cargo.

    Returns:
        Build result.

    Raises:
        PackageNotFoundError: If the named crate does not exist.
        CargoError: If a batch fails.
    """
    context = CommandContext(workspace=workspace, dry_run=dry_run)
    options = BuildOptions(name=name, group=group)
    return BuildCommand(context, options).execute()


def handle_build_command(
    workspace: Workspace,
    *,
    console: Console,
    error_console: Console,
    name: str | None = None,
    group: str | None = None,
    dry_run: bool = False,
) -> None:
    try:
        result = build(workspace, name=name, group=group, dry_run=dry_run)

        if not result.batches:
            console.print("[yellow]Nothing to build[/yellow]")
            return

        if result.dry_run:
            console.print("[yellow]Dry run - cargo not invoked[/yellow]")
            for batch in result.batches:
                console.print(" ".join(["cargo", *batch.args]), markup=False, highlight=False)
            return

        console.print(
            f"[green]Built {result.build_count} variants in {len(result.batches)} batches[/green]"
        )
    except typer.Exit:
        raise
    except CratesmithError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e
    except Exception as e:
        error_console.print_exception()
        raise typer.Exit(1) from e
