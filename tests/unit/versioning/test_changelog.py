"""Tests for changelog regeneration."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from cratesmith.config import ReleaseConfig
from cratesmith.versioning import update_changelog
from cratesmith.workspace import Package


def test_update_changelog_runs_cargo_release(temp_dir: Path) -> None:
    """cargo release replace is run against the crate manifest."""
    package = Package(name="embassy-core", version="1.1.0", path=temp_dir / "embassy-core")
    config = ReleaseConfig()

    with patch("cratesmith.versioning.changelog.run_cargo") as mock_run:
        update_changelog(temp_dir, package, config)

    mock_run.assert_called_once()
    args = mock_run.call_args.args[0]
    assert args[:2] == ["release", "replace"]
    assert str(temp_dir / config.changelog_config) in args
    assert str(package.manifest_path) in args
    assert args[-2:] == ["--execute", "--no-confirm"]
    assert mock_run.call_args.kwargs == {"cwd": temp_dir, "capture": True}
