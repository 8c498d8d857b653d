"""Pydantic models for cratesmith.yaml."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReleaseConfig(BaseModel):
    """Release bookkeeping: tags, commit message, changelog tooling."""

    model_config = ConfigDict(extra="forbid")

    tag_format: str = "{name}-v{version}"
    commit_message: str = "chore: prepare crate releases"
    changelog: bool = True
    changelog_config: str = Field(
        default="release/release.toml",
        description="cargo-release config used to regenerate changelogs, relative to the root",
    )

    @field_validator("tag_format")
    @classmethod
    def _tag_format_has_placeholders(cls, value: str) -> str:
        if "{version}" not in value:
            raise ValueError("tag_format must contain '{version}'")
        return value


class SemverConfig(BaseModel):
    """Settings for the rustdoc/semver-checks based compatibility analysis."""

    model_config = ConfigDict(extra="forbid")

    toolchain: str = "nightly-2025-06-29"
    registry_download_url: str = "https://crates.io/api/v1/crates"
    cache_dir: str = "releaser/target"
    rustdocflags: str = "--cfg docsrs --cfg not_really_docsrs --cfg semver_checks"
    build_std: list[str] = Field(default_factory=lambda: ["alloc", "core"])
    timeout: float = Field(default=60.0, gt=0)


class ManifestLintConfig(BaseModel):
    """Expected manifest metadata for check-manifest."""

    model_config = ConfigDict(extra="forbid")

    edition: str = "2024"
    license: str = "MIT OR Apache-2.0"
    repository: str = "https://github.com/embassy-rs/embassy"
    docs_base_url: str = "https://docs.embassy.dev"


class CratesmithConfig(BaseModel):
    """Root configuration model.

    Every field is optional; a repository without cratesmith.yaml gets the
    defaults below.
    """

    model_config = ConfigDict(extra="forbid")

    namespaces: list[str] = Field(
        default_factory=lambda: ["embassy-", "cyw43"],
        description="Dependency-name prefixes that are modelled as graph edges",
    )
    ignore_dirs: list[str] = Field(default_factory=lambda: ["target"])
    metadata_key: str = "embassy"
    release: ReleaseConfig = Field(default_factory=ReleaseConfig)
    semver: SemverConfig = Field(default_factory=SemverConfig)
    manifest_lint: ManifestLintConfig = Field(default_factory=ManifestLintConfig)

    @field_validator("namespaces")
    @classmethod
    def _namespaces_not_empty(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one namespace prefix is required")
        return value

    def in_namespace(self, name: str) -> bool:
        """Check whether a dependency name belongs to this repository's crates."""
        return any(name.startswith(prefix) for prefix in self.namespaces)

    def is_ignored_dir(self, dirname: str) -> bool:
        """Check whether discovery should skip a directory."""
        lowered = dirname.lower()
        return any(lowered == d.lower() for d in self.ignore_dirs)
