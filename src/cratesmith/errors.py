"""cratesmith exception hierarchy."""

from __future__ import annotations

from pathlib import Path


class CratesmithError(Exception):
    """Base exception for all cratesmith errors.

    Attributes:
        message: Human-readable error message.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(CratesmithError):
    """Invalid or unreadable cratesmith.yaml."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        if path is not None:
            message = f"{message} ({path})"
        super().__init__(message)
        self.path = path


class DiscoveryError(CratesmithError):
    """Repository root or package manifests could not be located or read."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        if path is not None:
            message = f"{message} ({path})"
        super().__init__(message)
        self.path = path


class ManifestError(CratesmithError):
    """A Cargo.toml could not be parsed or edited."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        if path is not None:
            message = f"{message} ({path})"
        super().__init__(message)
        self.path = path


class VersionParseError(CratesmithError):
    """A version string is not a valid semantic version."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid semantic version: {value!r}")
        self.value = value


class PackageNotFoundError(CratesmithError):
    """A named crate does not exist in the workspace."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Crate '{name}' not found")
        self.name = name


class PublishDependencyError(CratesmithError):
    """A publishable crate depends on a non-publishable one."""

    def __init__(self, package: str, dependency: str) -> None:
        super().__init__(
            f"Publishable crate '{package}' depends on non-publishable crate "
            f"'{dependency}'. This is not allowed."
        )
        self.package = package
        self.dependency = dependency


class CycleError(CratesmithError):
    """The dependency relation is not acyclic."""

    def __init__(self, message: str = "Dependency graph contains a cycle") -> None:
        super().__init__(message)


class NonPublishableSeedError(CratesmithError):
    """A release was requested for a crate that is not publishable."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Cannot prepare release for non-publishable crate '{name}'")
        self.name = name


class CargoError(CratesmithError):
    """An external cargo invocation failed."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        exit_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code


class BaselineFetchError(CratesmithError):
    """The published baseline of a crate could not be retrieved."""

    def __init__(self, name: str, version: str, reason: str) -> None:
        super().__init__(f"Unable to fetch baseline for {name}-{version}: {reason}")
        self.name = name
        self.version = version


class ClassifierError(CratesmithError):
    """Semver analysis produced output that could not be interpreted."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Semver check failed for {name}: {reason}")
        self.name = name


class ManifestLintError(CratesmithError):
    """check-manifest found problems."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(f"Found {len(errors)} manifest errors")
        self.errors = errors


class LineEndingError(CratesmithError):
    """check-crlf found files with CRLF line endings."""

    def __init__(self, files: list[str]) -> None:
        super().__init__(f"Found {len(files)} files with CRLF line endings")
        self.files = files


class DocBuildError(CratesmithError):
    """Documentation failed to build for one or more crates."""

    def __init__(self, failed: list[str]) -> None:
        super().__init__(f"Failed to build docs for {len(failed)} crates")
        self.failed = failed
