"""Check-crlf command implementation."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape

from cratesmith.commands.base import CommandContext, SyncCommand
from cratesmith.errors import CratesmithError, LineEndingError

if TYPE_CHECKING:
    from cratesmith.workspace import Workspace

logger = logging.getLogger(__name__)

IGNORED_DIRS = frozenset(
    {".git", "target", "node_modules", ".cargo", "__pycache__", ".pytest_cache"}
)
IGNORED_FILES = frozenset({".DS_Store", "Thumbs.db"})

TEXT_EXTENSIONS = frozenset(
    {
        "rs", "toml", "md", "txt", "yml", "yaml", "json",
        "js", "ts", "html", "css", "scss", "xml", "svg",
        "py", "sh", "bash", "zsh", "fish", "ps1", "bat",
        "c", "cpp", "cc", "cxx", "h", "hpp", "hxx",
        "java", "kt", "scala", "go", "rb", "php", "cs",
        "gitignore", "gitattributes", "dockerignore", "dockerfile",
        "makefile", "cmake", "gradle", "sbt", "pom",
        "log", "ini", "cfg", "conf", "config",
    }
)  # fmt: skip

TEXT_FILENAMES = frozenset(
    {
        "readme", "license", "changelog", "authors", "contributors",
        "dockerfile", "makefile", "rakefile", "gemfile", "pipfile",
        "cargo.lock", "package.json", "package-lock.json",
        "yarn.lock", "pnpm-lock.yaml", ".gitignore", ".gitattributes",
        ".dockerignore", ".editorconfig", ".rustfmt.toml",
    }
)  # fmt: skip


def is_likely_text_file(path: Path) -> bool:
    """Guess from the file name whether a file is text."""
    name = path.name.lower()
    if name in TEXT_FILENAMES:
        return True
    return path.suffix.lower().lstrip(".") in TEXT_EXTENSIONS


def contains_crlf(data: bytes) -> bool:
    return b"\r\n" in data


def iter_text_files(root: Path) -> Iterator[Path]:
    """Yield likely text files under root, skipping build and VCS directories."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_DIRS)
        for filename in sorted(filenames):
            if filename in IGNORED_FILES:
                continue
            path = Path(dirpath) / filename
            if is_likely_text_file(path):
                yield path


@dataclass
class CheckCrlfResult:
    """Result of check-crlf command.

    Attributes:
        files: Paths with CRLF line endings, relative to the root.
        unreadable: Paths that could not be read.
    """

    files: list[str] = field(default_factory=list)
    unreadable: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.files


class CheckCrlfCommand(SyncCommand[CheckCrlfResult]):
    """Find text files that use CRLF line endings."""

    def execute(self) -> CheckCrlfResult:
        root = self.workspace.root
        result = CheckCrlfResult()

        for path in iter_text_files(root):
            relative = path.relative_to(root).as_posix()
            try:
                data = path.read_bytes()
            except OSError as e:
                logger.warning("Could not read %s: %s", path, e)
                result.unreadable.append(relative)
                continue
            if contains_crlf(data):
                result.files.append(relative)

        return result


def check_crlf(workspace: Workspace) -> CheckCrlfResult:
    """Convenience function to scan the repository for CRLF line endings."""
    context = CommandContext(workspace=workspace)
    return CheckCrlfCommand(context).execute()


def handle_check_crlf_command(
    workspace: Workspace,
    *,
    console: Console,
    error_console: Console,
) -> None:
    try:
        result = check_crlf(workspace)
        if result.success:
            console.print("[green]All text files have LF line endings![/green]")
            return

        for path in result.files:
            error_console.print(f"[red]✗[/red] File has CRLF line endings: {escape(path)}")
        raise LineEndingError(result.files)
    except typer.Exit:
        raise
    except CratesmithError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e
    except Exception as e:
        error_console.print_exception()
        raise typer.Exit(1) from e
