"""Crate model and Cargo.toml parsing."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

MANIFEST_FILENAME = "Cargo.toml"


class DependencyKind(Enum):
    """The three dependency relations tracked per crate."""

    RUNTIME = "dependencies"
    BUILD = "build-dependencies"
    DEV = "dev-dependencies"


class BuildConfig(BaseModel):
    """One build variant of a crate.

    Attributes:
        group: Optional group tag; ``build --group`` selects on it.
        features: Cargo features to enable.
        target: Optional target triple.
        env: Environment overrides for the build.
        build_std: ``-Zbuild-std`` components.
        artifact_dir: Optional ``--artifact-dir`` output directory.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    group: str | None = None
    features: list[str] = Field(default_factory=list)
    target: str | None = None
    env: dict[str, str] = Field(default_factory=dict)
    build_std: list[str] = Field(default_factory=list, alias="build-std")
    artifact_dir: str | None = Field(default=None, alias="artifact-dir")

    @property
    def batch_key(self) -> BuildConfigBatch:
        return BuildConfigBatch(
            env=tuple(sorted(self.env.items())),
            build_std=tuple(self.build_std),
        )


@dataclass(frozen=True)
class BuildConfigBatch:
    """Settings shared by every build in one ``cargo batch`` invocation."""

    env: tuple[tuple[str, str], ...] = ()
    build_std: tuple[str, ...] = ()


class CrateMetadata(BaseModel):
    """The ``[package.metadata.<key>]`` table cratesmith reads."""

    model_config = ConfigDict(extra="ignore")

    skip: bool = False
    build: list[BuildConfig] = Field(default_factory=list)


class ParsedPackage(BaseModel):
    """The ``[package]`` table of a crate manifest."""

    model_config = ConfigDict(extra="ignore")

    name: str
    version: str
    description: str | None = None
    publish: bool | list[str] = True
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_publishable(self) -> bool:
        # publish = [] restricts publishing to no registry at all
        if isinstance(self.publish, list):
            return bool(self.publish)
        return self.publish


class ParsedManifest(BaseModel):
    """A crate manifest; workspace-only manifests fail validation."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    package: ParsedPackage
    dependencies: dict[str, Any] = Field(default_factory=dict)
    build_dependencies: dict[str, Any] = Field(
        default_factory=dict, alias="build-dependencies"
    )
    dev_dependencies: dict[str, Any] = Field(default_factory=dict, alias="dev-dependencies")
    features: dict[str, Any] = Field(default_factory=dict)

    def crate_metadata(self, key: str) -> CrateMetadata:
        return CrateMetadata.model_validate(self.package.metadata.get(key) or {})


@dataclass
class Package:
    """A crate discovered in the repository.

    Attributes:
        name: Crate name, unique within the repository.
        version: Current version string.
        path: Directory containing Cargo.toml.
        dependencies: In-repository runtime dependency names.
        build_dependencies: In-repository build-dependency names.
        dev_dependencies: In-repository dev-dependency names.
        build_configs: Build variants (at least one).
        publish: Whether the crate is released to a registry.
        features: Features exposed to consumers.
        description: Optional description.
    """

    name: str
    version: str
    path: Path
    dependencies: list[str] = field(default_factory=list)
    build_dependencies: list[str] = field(default_factory=list)
    dev_dependencies: list[str] = field(default_factory=list)
    build_configs: list[BuildConfig] = field(default_factory=lambda: [BuildConfig()])
    publish: bool = True
    features: set[str] = field(default_factory=set)
    description: str | None = None

    @property
    def manifest_path(self) -> Path:
        return self.path / MANIFEST_FILENAME

    @property
    def default_config(self) -> BuildConfig:
        return self.build_configs[0]

    def dependencies_of(self, kind: DependencyKind) -> list[str]:
        """Get the dependency names of one kind."""
        if kind == DependencyKind.RUNTIME:
            return self.dependencies
        if kind == DependencyKind.BUILD:
            return self.build_dependencies
        return self.dev_dependencies

    def all_dependencies(self) -> list[str]:
        """All dependency names across kinds, without duplicates."""
        seen: dict[str, None] = {}
        for kind in DependencyKind:
            for name in self.dependencies_of(kind):
                seen.setdefault(name, None)
        return list(seen)

    @classmethod
    def from_manifest(
        cls,
        manifest: ParsedManifest,
        path: Path,
        *,
        metadata: CrateMetadata,
        in_namespace: Callable[[str], bool],
    ) -> Package:
        """Build a Package from a validated manifest.

        Dependency names rejected by ``in_namespace`` are dropped.
        """

        def internal(table: dict[str, Any]) -> list[str]:
            return sorted(n for n in table if in_namespace(n))

        configs = list(metadata.build) or [BuildConfig()]

        features = set(manifest.features)
        for dep_name, spec in manifest.dependencies.items():
            if isinstance(spec, dict) and spec.get("optional", False):
                features.add(dep_name)

        return cls(
            name=manifest.package.name,
            version=manifest.package.version,
            path=path,
            dependencies=internal(manifest.dependencies),
            build_dependencies=internal(manifest.build_dependencies),
            dev_dependencies=internal(manifest.dev_dependencies),
            build_configs=configs,
            publish=manifest.package.is_publishable,
            features=features,
            description=manifest.package.description,
        )
