"""Shared test fixtures for cratesmith tests."""

from __future__ import annotations

import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from dotenv import load_dotenv

from cratesmith.classifier import Classification
from cratesmith.errors import CargoError
from cratesmith.workspace import Package

# Load .env from project root (doesn't override existing env vars)
load_dotenv(Path(__file__).parent.parent / ".env")

CORE_TOML = """\
[package]
name = "embassy-core"
version = "1.0.0"
edition = "2024"
license = "MIT OR Apache-2.0"
repository = "https://github.com/embassy-rs/embassy"
documentation = "https://docs.embassy.dev/embassy-core"
description = "Core primitives"

[features]
default = []
log = ["dep:defmt"]

[dependencies]
defmt = { version = "0.3", optional = true }

[dev-dependencies]
embassy-testutils = { path = "../embassy-testutils" }

[package.metadata.embassy]
build = [
    { target = "thumbv7em-none-eabi", features = ["log"] },
    { group = "std", env = { RUSTFLAGS = "-Dwarnings" } },
]
"""

NET_TOML = """\
[package]
name = "embassy-net"
version = "2.1.0"
edition = "2024"
license = "MIT OR Apache-2.0"
repository = "https://github.com/embassy-rs/embassy"
documentation = "https://docs.embassy.dev/embassy-net"

[dependencies]
# keep in sync with embassy-core
embassy-core = { version = "1.0.0", path = "../embassy-core", features = ["log"] }
heapless = "0.8"
"""

APP_TOML = """\
[package]
name = "embassy-app"
version = "0.3.0"
edition = "2024"
license = "MIT OR Apache-2.0"
publish = false

[dependencies]
embassy-net = { version = "2.1.0", path = "../../embassy-net" }
"""

TESTUTILS_TOML = """\
[package]
name = "embassy-testutils"
version = "0.1.0"
edition = "2024"
license = "MIT OR Apache-2.0"
publish = false

[dependencies]
embassy-core = { path = "../embassy-core" }
"""

WORKSPACE_TOML = """\
[workspace]
members = ["embassy-core", "embassy-net"]
"""


def write_manifest(root: Path, relative: str, content: str) -> Path:
    """Write a Cargo.toml under root/relative and return the crate directory."""
    directory = root / relative
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "Cargo.toml").write_text(content)
    return directory


class FakeClassifier:
    """Classifier returning canned verdicts and recording every call."""

    def __init__(self, verdicts: dict[str, Classification] | None = None) -> None:
        self.verdicts = verdicts or {}
        self.calls: list[str] = []

    def classify(self, package: Package, baseline_version: str) -> Classification:
        self.calls.append(package.name)
        return self.verdicts.get(package.name, Classification.NO_CHANGE)


class FailingClassifier(FakeClassifier):
    """Classifier whose Nth call fails the way a broken cargo run does."""

    def __init__(self, fail_on: int = 2) -> None:
        super().__init__()
        self.fail_on = fail_on

    def classify(self, package: Package, baseline_version: str) -> Classification:
        self.calls.append(package.name)
        if len(self.calls) == self.fail_on:
            raise CargoError(
                f"cargo semver-checks failed for {package.name}",
                command="cargo semver-checks",
                exit_code=101,
            )
        return Classification.MINOR_COMPATIBLE


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def manifest_writer(temp_dir: Path) -> Callable[[str, str], Path]:
    """Write manifests relative to the temporary directory."""

    def write(relative: str, content: str) -> Path:
        return write_manifest(temp_dir, relative, content)

    return write


@pytest.fixture
def repo_dir(temp_dir: Path) -> Path:
    """Create a repository with four crates.

    embassy-net depends on embassy-core; embassy-app (unpublished) depends on
    embassy-net; embassy-testutils (unpublished) depends on embassy-core,
    which uses it as a dev-dependency.
    """
    (temp_dir / ".git").mkdir()
    (temp_dir / "Cargo.toml").write_text(WORKSPACE_TOML)
    write_manifest(temp_dir, "embassy-core", CORE_TOML)
    write_manifest(temp_dir, "embassy-net", NET_TOML)
    write_manifest(temp_dir, "examples/app", APP_TOML)
    write_manifest(temp_dir, "embassy-testutils", TESTUTILS_TOML)
    return temp_dir


@pytest.fixture
def make_classifier() -> Callable[..., FakeClassifier]:
    """Build classifiers with canned verdicts; unlisted crates report no change."""

    def make(verdicts: dict[str, Classification] | None = None) -> FakeClassifier:
        return FakeClassifier(verdicts)

    return make
