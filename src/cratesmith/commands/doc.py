"""Doc command implementation using docserver."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape

from cratesmith.commands.base import CommandContext, SyncCommand
from cratesmith.errors import CratesmithError, DocBuildError, PackageNotFoundError

if TYPE_CHECKING:
    from cratesmith.workspace import Package, Workspace

logger = logging.getLogger(__name__)

DOCSERVER = "docserver"


@dataclass
class DocResult:
    """Result of doc command."""

    built: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed


@dataclass
class DocOptions:
    """Options for doc command.

    Attributes:
        output: Output directory for the generated documentation.
        crates: Only these crates; all publishable crates when empty.
    """

    output: Path
    crates: list[str] = field(default_factory=list)


def docserver_args(package: Package, output: Path, *, with_static: bool) -> list[str]:
    args = [
        DOCSERVER,
        "build",
        "-i",
        str(package.path),
        "-o",
        str(output / "crates" / package.name / "git.zup"),
    ]
    if with_static:
        args.extend(["--output-static", str(output / "static")])
    return args


class DocCommand(SyncCommand[DocResult]):
    """Build documentation archives for publishable crates."""

    def __init__(self, context: CommandContext, options: DocOptions) -> None:
        super().__init__(context)
        self.options = options

    def validate(self) -> list[str]:
        errors = super().validate()
        for name in self.options.crates:
            if name not in self.workspace.packages:
                errors.append(name)
        return errors

    def select(self, result: DocResult) -> list[Package]:
        if not self.options.crates:
            return [p for p in self.workspace.packages.values() if p.publish]

        selected = []
        for name in self.options.crates:
            pkg = self.workspace.packages[name]
            if not pkg.publish:
                logger.warning("Skipping non-publishable crate: %s", name)
                result.skipped.append(name)
                continue
            selected.append(pkg)
        return selected

    def execute(self) -> DocResult:
        missing = self.validate()
        if missing:
            raise PackageNotFoundError(missing[0])

        result = DocResult()
        # static assets are shared; only the first build writes them
        with_static = True
        for pkg in self.select(result):
            args = docserver_args(pkg, self.options.output, with_static=with_static)
            with_static = False

            logger.info("Building docs for crate: %s", pkg.name)
            try:
                completed = subprocess.run(args, cwd=self.workspace.root, check=False)
            except OSError as e:
                logger.error("Failed to run %s for %s: %s", DOCSERVER, pkg.name, e)
                result.failed.append(pkg.name)
                continue

            if completed.returncode == 0:
                result.built.append(pkg.name)
            else:
                logger.error(
                    "Failed to build docs for %s (exit code: %d)", pkg.name, completed.returncode
                )
                result.failed.append(pkg.name)

        return result


def build_docs(
    workspace: Workspace,
    output: Path,
    *,
    crates: list[str] | None = None,
) -> DocResult:
    """Convenience function to build documentation.

    Args:
        workspace: Workspace to document.
        output: Output directory.
        crates: Restrict to these crates.

    Returns:
        Which crates were built, failed or skipped.

    Raises:
        PackageNotFoundError: If a named crate does not exist.
    """
    context = CommandContext(workspace=workspace)
    options = DocOptions(output=output, crates=list(crates or []))
    return DocCommand(context, options).execute()


def handle_doc_command(
    workspace: Workspace,
    output: Path,
    *,
    console: Console,
    error_console: Console,
    crates: list[str] | None = None,
) -> None:
    try:
        result = build_docs(workspace, output, crates=crates)

        if not result.built and not result.failed:
            console.print("No publishable crates found to build documentation for.")
            return

        console.print("\n[bold]Summary:[/bold]")
        console.print(f"[green]✓[/green] Successfully built docs for {len(result.built)} crates")
        if result.failed:
            console.print(f"[red]✗[/red] Failed to build docs for {len(result.failed)} crates:")
            for name in result.failed:
                console.print(f"  - {escape(name)}")
            raise DocBuildError(result.failed)
    except typer.Exit:
        raise
    except CratesmithError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e
    except Exception as e:
        error_console.print_exception()
        raise typer.Exit(1) from e
