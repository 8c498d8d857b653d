"""cratesmith CLI application."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from cratesmith.errors import CratesmithError
from cratesmith.log import setup_logging
from cratesmith.workspace import Workspace


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from cratesmith import __version__

        print(f"cratesmith {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="cratesmith",
    help="Release manager for repositories with many interdependent crates",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def _app_callback(
    version: Annotated[  # noqa: ARG001
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """Release manager for repositories with many interdependent crates."""
    setup_logging(verbose)


console = Console()
error_console = Console(stderr=True)


def get_workspace(path: Path | None = None) -> Workspace:
    """Load workspace from current directory or specified path."""
    try:
        return Workspace.discover(path)
    except CratesmithError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e


@app.command("list")
def list_cmd(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
    table: Annotated[
        bool,
        typer.Option("--table", help="Output as a table"),
    ] = False,
    names: Annotated[
        bool,
        typer.Option("--names", help="Only print crate names"),
    ] = False,
    publishable: Annotated[
        bool,
        typer.Option("--publishable", help="Only publishable crates"),
    ] = False,
    transitive: Annotated[
        bool,
        typer.Option("--transitive", "-t", help="Show transitive dependencies"),
    ] = False,
) -> None:
    """List all crates in dependency order with their dependencies."""
    from cratesmith.commands import handle_list_command

    workspace = get_workspace()
    handle_list_command(
        workspace,
        console=console,
        error_console=error_console,
        json_output=json_output,
        table=table,
        names=names,
        publishable_only=publishable,
        transitive=transitive,
    )


@app.command()
def dependencies(
    name: Annotated[str, typer.Argument(help="Crate name", metavar="CRATE")],
    direct: Annotated[
        bool,
        typer.Option("--direct", help="Only direct dependencies"),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """List the dependencies of a crate."""
    from cratesmith.commands import handle_dependencies_command

    workspace = get_workspace()
    handle_dependencies_command(
        workspace,
        name,
        console=console,
        error_console=error_console,
        direct=direct,
        json_output=json_output,
    )


@app.command()
def dependents(
    name: Annotated[str, typer.Argument(help="Crate name", metavar="CRATE")],
    direct: Annotated[
        bool,
        typer.Option("--direct", help="Only direct dependents"),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """List the crates that depend on a crate."""
    from cratesmith.commands import handle_dependents_command

    workspace = get_workspace()
    handle_dependents_command(
        workspace,
        name,
        console=console,
        error_console=error_console,
        direct=direct,
        json_output=json_output,
    )


@app.command()
def bump(
    name: Annotated[str, typer.Argument(help="Crate name", metavar="CRATE")],
    version: Annotated[str, typer.Argument(help="New version", metavar="CRATE_VERSION")],
    no_changelog: Annotated[
        bool,
        typer.Option("--no-changelog", help="Skip changelog generation"),
    ] = False,
) -> None:
    """Force a crate to a version and update its dependents.

    Can be used to override the result of prepare-release.
    """
    from cratesmith.commands import handle_bump_command

    workspace = get_workspace()
    handle_bump_command(
        workspace,
        name,
        version,
        console=console,
        error_console=error_console,
        changelog=not no_changelog,
    )


@app.command()
def build(
    name: Annotated[
        str | None,
        typer.Argument(help="Crate to build (all crates if omitted)", metavar="CRATE"),
    ] = None,
    group: Annotated[
        str | None,
        typer.Option("--group", "-g", help="Build variants of this group"),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Print the cargo invocations only"),
    ] = False,
) -> None:
    """Build crates, batching variants that share an environment."""
    from cratesmith.commands import handle_build_command

    workspace = get_workspace()
    handle_build_command(
        workspace,
        console=console,
        error_console=error_console,
        name=name,
        group=group,
        dry_run=dry_run,
    )


@app.command("semver-check")
def semver_check_cmd(
    name: Annotated[str, typer.Argument(help="Crate name", metavar="CRATE")],
) -> None:
    """Print the minimum version bump a crate needs."""
    from cratesmith.commands import handle_semver_check_command

    workspace = get_workspace()
    handle_semver_check_command(
        workspace,
        name,
        console=console,
        error_console=error_console,
    )


@app.command("prepare-release")
def prepare_release_cmd(
    names: Annotated[
        list[str],
        typer.Argument(help="Crates to release", metavar="CRATES"),
    ],
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show the planned bumps only"),
    ] = False,
    no_changelog: Annotated[
        bool,
        typer.Option("--no-changelog", help="Skip changelog generation"),
    ] = False,
    no_publish_check: Annotated[
        bool,
        typer.Option("--no-publish-check", help="Skip cargo publish --dry-run"),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation"),
    ] = False,
) -> None:
    """Bump crates and their dependents, then print the release commands."""
    from cratesmith.commands import handle_prepare_release_command

    workspace = get_workspace()
    handle_prepare_release_command(
        workspace,
        names,
        console=console,
        error_console=error_console,
        dry_run=dry_run,
        changelog=not no_changelog,
        publish_check=not no_publish_check,
        yes=yes,
    )


@app.command("check-manifest")
def check_manifest_cmd() -> None:
    """Check that manifests carry the expected metadata and features."""
    from cratesmith.commands import handle_check_manifest_command

    workspace = get_workspace()
    handle_check_manifest_command(workspace, console=console, error_console=error_console)


@app.command("check-crlf")
def check_crlf_cmd() -> None:
    """Check that text files use LF line endings."""
    from cratesmith.commands import handle_check_crlf_command

    workspace = get_workspace()
    handle_check_crlf_command(workspace, console=console, error_console=error_console)


@app.command()
def doc(
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Output directory"),
    ],
    crates: Annotated[
        list[str] | None,
        typer.Option("--crate", help="Only document this crate (repeatable)"),
    ] = None,
) -> None:
    """Build documentation for publishable crates with docserver."""
    from cratesmith.commands import handle_doc_command

    workspace = get_workspace()
    handle_doc_command(
        workspace,
        output,
        console=console,
        error_console=error_console,
        crates=crates,
    )


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
