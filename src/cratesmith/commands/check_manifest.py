"""Check-manifest command implementation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape

from cratesmith.commands.base import CommandContext, SyncCommand
from cratesmith.errors import CratesmithError, ManifestLintError
from cratesmith.versioning.manifest import is_table, load_manifest, optional_dependencies

if TYPE_CHECKING:
    from collections.abc import Mapping

    import tomlkit

    from cratesmith.config import ManifestLintConfig
    from cratesmith.workspace import Package, Workspace


@dataclass
class CheckManifestResult:
    """Result of check-manifest command."""

    checked: int
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


def check_field(package: Mapping[str, object], key: str, expected: str) -> str | None:
    """Compare one ``[package]`` string field against its expected value."""
    value = package.get(key)
    if value is None:
        return f"missing {key} field"
    if not isinstance(value, str):
        return f"{key} field is not a string"
    if value != expected:
        return f"{key} should be '{expected}', found '{value}'"
    return None


def check_package_metadata(
    doc: tomlkit.TOMLDocument,
    pkg: Package,
    lint: ManifestLintConfig,
) -> list[str]:
    """Edition and license for every crate; repository and docs link when published."""
    package = doc.get("package")
    if not is_table(package):
        return ["missing [package] section"]

    expected = {"edition": lint.edition, "license": lint.license}
    if pkg.publish:
        expected["repository"] = lint.repository
        expected["documentation"] = f"{lint.docs_base_url.rstrip('/')}/{pkg.name}"

    problems = []
    for key, value in expected.items():
        problem = check_field(package, key, value)
        if problem:
            problems.append(problem)
    return problems


def check_features(doc: tomlkit.TOMLDocument) -> list[str]:
    """Optional dependencies must be enabled through an explicit ``dep:`` feature."""
    optional = optional_dependencies(doc)
    if not optional:
        return []

    referenced: set[str] = set()
    features = doc.get("features")
    if is_table(features):
        for items in features.values():
            for item in items if isinstance(items, list) else []:
                if isinstance(item, str) and item.startswith("dep:"):
                    referenced.add(item.removeprefix("dep:"))

    unreferenced = sorted(optional - referenced)
    if unreferenced:
        return [
            "optional dependencies not referenced by any feature with 'dep:': "
            + ", ".join(unreferenced)
        ]
    return []


class CheckManifestCommand(SyncCommand[CheckManifestResult]):
    """Lint crate manifests against the repository's conventions."""

    def execute(self) -> CheckManifestResult:
        lint = self.workspace.config.manifest_lint
        errors: list[str] = []

        for name, pkg in self.workspace.packages.items():
            doc = load_manifest(pkg.manifest_path)
            problems = check_package_metadata(doc, pkg, lint)
            if pkg.publish:
                problems.extend(check_features(doc))
            errors.extend(f"{name}: {problem}" for problem in problems)

        return CheckManifestResult(checked=len(self.workspace.packages), errors=errors)


def check_manifests(workspace: Workspace) -> CheckManifestResult:
    """Convenience function to lint every manifest.

    Raises:
        ManifestError: If a manifest cannot be read.
    """
    context = CommandContext(workspace=workspace)
    return CheckManifestCommand(context).execute()


def handle_check_manifest_command(
    workspace: Workspace,
    *,
    console: Console,
    error_console: Console,
) -> None:
    try:
        result = check_manifests(workspace)
        if result.success:
            console.print(f"[green]All {result.checked} manifests are correct![/green]")
            return

        for error in result.errors:
            error_console.print(f"[red]✗[/red] {escape(error)}")
        raise ManifestLintError(result.errors)
    except typer.Exit:
        raise
    except CratesmithError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e
    except Exception as e:
        error_console.print_exception()
        raise typer.Exit(1) from e
