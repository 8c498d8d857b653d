"""cratesmith commands."""

from cratesmith.commands.base import CommandContext, SyncCommand
from cratesmith.commands.build import (
    BuildBatch,
    BuildCommand,
    BuildOptions,
    BuildResult,
    build,
    handle_build_command,
)
from cratesmith.commands.bump import (
    BumpCommand,
    BumpOptions,
    BumpResult,
    bump,
    handle_bump_command,
)
from cratesmith.commands.check_crlf import (
    CheckCrlfCommand,
    CheckCrlfResult,
    check_crlf,
    handle_check_crlf_command,
)
from cratesmith.commands.check_manifest import (
    CheckManifestCommand,
    CheckManifestResult,
    check_manifests,
    handle_check_manifest_command,
)
from cratesmith.commands.dependencies import (
    DependenciesCommand,
    DependenciesOptions,
    RelatedCratesResult,
    get_dependencies,
    handle_dependencies_command,
)
from cratesmith.commands.dependents import (
    DependentsCommand,
    DependentsOptions,
    get_dependents,
    handle_dependents_command,
)
from cratesmith.commands.doc import (
    DocCommand,
    DocOptions,
    DocResult,
    build_docs,
    handle_doc_command,
)
from cratesmith.commands.list import (
    CrateRef,
    ListCommand,
    ListFormat,
    ListOptions,
    ListResult,
    PackageInfo,
    handle_list_command,
    list_packages,
)
from cratesmith.commands.prepare_release import (
    PrepareReleaseCommand,
    PrepareReleaseOptions,
    PrepareReleaseResult,
    handle_prepare_release_command,
    prepare_release,
)
from cratesmith.commands.semver_check import (
    SemverCheckCommand,
    SemverCheckOptions,
    SemverCheckResult,
    handle_semver_check_command,
    semver_check,
)

__all__ = [
    # Base
    "SyncCommand",
    "CommandContext",
    # List
    "CrateRef",
    "ListCommand",
    "ListOptions",
    "ListResult",
    "ListFormat",
    "PackageInfo",
    "list_packages",
    "handle_list_command",
    # Dependencies / dependents
    "DependenciesCommand",
    "DependenciesOptions",
    "RelatedCratesResult",
    "get_dependencies",
    "handle_dependencies_command",
    "DependentsCommand",
    "DependentsOptions",
    "get_dependents",
    "handle_dependents_command",
    # Bump
    "BumpCommand",
    "BumpOptions",
    "BumpResult",
    "bump",
    "handle_bump_command",
    # Build
    "BuildBatch",
    "BuildCommand",
    "BuildOptions",
    "BuildResult",
    "build",
    "handle_build_command",
    # Semver check
    "SemverCheckCommand",
    "SemverCheckOptions",
    "SemverCheckResult",
    "semver_check",
    "handle_semver_check_command",
    # Prepare release
    "PrepareReleaseCommand",
    "PrepareReleaseOptions",
    "PrepareReleaseResult",
    "prepare_release",
    "handle_prepare_release_command",
    # Lints
    "CheckManifestCommand",
    "CheckManifestResult",
    "check_manifests",
    "handle_check_manifest_command",
    "CheckCrlfCommand",
    "CheckCrlfResult",
    "check_crlf",
    "handle_check_crlf_command",
    # Doc
    "DocCommand",
    "DocOptions",
    "DocResult",
    "build_docs",
    "handle_doc_command",
]
