"""Invoking cargo."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path

from cratesmith.errors import CargoError

logger = logging.getLogger(__name__)

MAX_DISPLAY_ARGS = 100


def truncate_args(args: Sequence[str]) -> str:
    """Join arguments for display, shortening very long command lines."""
    joined = " ".join(args)
    if len(joined) > MAX_DISPLAY_ARGS:
        return f"{joined[:97]}... ({len(joined)} chars)"
    return joined


def get_cargo() -> str:
    """Path of the cargo executable.

    On Windows the cargo found on PATH may be the toolchain binary, which does
    not understand ``+toolchain``; prefer the rustup proxy in CARGO_HOME.
    """
    if sys.platform == "win32":
        cargo_home = os.environ.get("CARGO_HOME")
        if cargo_home:
            return str(Path(cargo_home) / "bin" / "cargo")
    return shutil.which("cargo") or "cargo"


def run_cargo(
    args: Sequence[str],
    cwd: Path,
    *,
    env: Mapping[str, str] | None = None,
    capture: bool = False,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Run cargo with the given arguments.

    Args:
        args: Cargo arguments (without 'cargo').
        cwd: Working directory, must exist.
        env: Extra environment variables.
        capture: Capture stdout/stderr instead of streaming them.
        check: Raise on non-zero exit code.

    Returns:
        Completed process result.

    Raises:
        CargoError: If cwd is not a directory, cargo is missing, or the
            command exits non-zero and check is True.
    """
    if not cwd.is_dir():
        raise CargoError(f"Working directory {cwd} is not a directory")

    display = truncate_args(args)
    logger.info("Running `cargo %s` in %s - Environment %s", display, cwd, dict(env or {}))

    run_env = os.environ.copy()
    if env:
        run_env.update(env)
    # Make sure the rustup proxy resolves +toolchain instead of a pinned cargo
    if any(a.startswith("+") for a in args):
        run_env.pop("CARGO", None)

    cmd = [get_cargo(), *args]
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            env=run_env,
            capture_output=capture,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise CargoError("cargo is not installed", command=f"cargo {display}") from e

    if check and result.returncode != 0:
        detail = (result.stderr or "").strip() if capture else ""
        message = f"Failed to execute cargo subcommand `cargo {display}`"
        if detail:
            message = f"{message}: {detail}"
        raise CargoError(message, command=f"cargo {display}", exit_code=result.returncode)

    return result
