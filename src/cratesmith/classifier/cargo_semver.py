"""Semver classification with rustdoc JSON and cargo-semver-checks."""

from __future__ import annotations

import dataclasses
import logging
import os
import re
from pathlib import Path

from cratesmith.cargo import run_cargo
from cratesmith.classifier.baseline import BaselineStore
from cratesmith.classifier.classification import Classification
from cratesmith.config import SemverConfig
from cratesmith.errors import ClassifierError
from cratesmith.versioning.manifest import read_features
from cratesmith.workspace.package import BuildConfig, Package

logger = logging.getLogger(__name__)

# e.g. "Summary semver requires new major version: 2 major and 0 minor checks failed"
REQUIRED_BUMP_PATTERN = re.compile(r"requires new (?P<level>major|minor) version")


def removed_features(baseline: Package, current: Package) -> set[str]:
    """Features the baseline exposed that the working tree no longer does.

    Removing a feature breaks consumers that enabled it, which rustdoc-based
    checks cannot see.
    """
    old = read_features(baseline.manifest_path)
    new = read_features(current.manifest_path)
    return old - new


def rustdoc_json_path(package: Package, config: BuildConfig) -> Path:
    """Where ``cargo rustdoc --output-format=json`` writes a crate's JSON."""
    target_dir = os.environ.get("CARGO_TARGET_DIR")
    path = Path(target_dir) if target_dir else package.path / "target"
    if config.target:
        path = path / config.target
    return path / "doc" / f"{package.name.replace('-', '_')}.json"


def parse_semver_checks_output(output: str, exit_code: int, name: str) -> Classification:
    """Map cargo-semver-checks output to a classification.

    Raises:
        ClassifierError: If a failing run does not report a required bump.
    """
    match = REQUIRED_BUMP_PATTERN.search(output)
    if match:
        if match.group("level") == "major":
            return Classification.MAJOR_BREAKING
        return Classification.MINOR_COMPATIBLE

    if exit_code != 0:
        raise ClassifierError(name, f"cargo semver-checks exited with {exit_code}")
    return Classification.PATCH_COMPATIBLE


class CargoSemverClassifier:
    """Classify crates by diffing rustdoc JSON of the baseline and working tree.

    Every build variant of a crate is checked; the strictest verdict wins.
    """

    def __init__(
        self,
        root: Path,
        config: SemverConfig | None = None,
        baselines: BaselineStore | None = None,
    ) -> None:
        self.root = root
        self.config = config or SemverConfig()
        self.baselines = baselines or BaselineStore(
            root / self.config.cache_dir,
            self.config.registry_download_url,
            timeout=self.config.timeout,
        )

    def classify(self, package: Package, baseline_version: str) -> Classification:
        baseline_path = self.baselines.fetch(package.name, baseline_version)
        baseline = dataclasses.replace(package, path=baseline_path, version=baseline_version)

        removed = removed_features(baseline, package)
        if removed:
            logger.info("Features removed in %s: %s", package.name, ", ".join(sorted(removed)))
            return Classification.MINOR_COMPATIBLE

        verdict = Classification.PATCH_COMPATIBLE
        for build_config in package.build_configs:
            built = self.build_rustdoc_json(baseline, build_config)
            # both builds share the output path when CARGO_TARGET_DIR is set
            baseline_json = built.with_name(f"{built.stem}-baseline.json")
            built.replace(baseline_json)
            current_json = self.build_rustdoc_json(package, build_config)
            verdict = verdict.stricter(self.check_release(package, baseline_json, current_json))
        return verdict

    def build_rustdoc_json(self, package: Package, build_config: BuildConfig) -> Path:
        """Build rustdoc JSON for one build variant of a crate.

        A pinned nightly toolchain is used so the JSON format version is the
        same for baseline and current builds.
        """
        output = rustdoc_json_path(package, build_config)
        output.unlink(missing_ok=True)

        logger.info(
            "Building doc json for %s with features: %s",
            package.name,
            build_config.features,
        )

        args = [
            f"+{self.config.toolchain}",
            "rustdoc",
            "--lib",
            "--output-format=json",
            "-Zunstable-options",
            "-Zhost-config",
            "-Ztarget-applies-to-host",
        ]
        if self.config.build_std:
            args.append(f"-Zbuild-std={','.join(self.config.build_std)}")
        if build_config.target:
            args.append(f"--target={build_config.target}")
        if build_config.features:
            args.append(f"--features={','.join(build_config.features)}")
        args.append('--config=host.rustflags=["--cfg=instability_disable_unstable_docs"]')

        run_cargo(args, cwd=package.path, env={"RUSTDOCFLAGS": self.config.rustdocflags})
        return output

    def check_release(
        self,
        package: Package,
        baseline_json: Path,
        current_json: Path,
    ) -> Classification:
        """Run cargo-semver-checks on prebuilt rustdoc JSON."""
        args = [
            "semver-checks",
            "check-release",
            "--baseline-rustdoc",
            str(baseline_json),
            "--current-rustdoc",
            str(current_json),
            "--release-type",
            "patch",
        ]
        result = run_cargo(args, cwd=package.path, capture=True, check=False)
        output = f"{result.stdout or ''}\n{result.stderr or ''}"
        logger.debug(output)
        return parse_semver_checks_output(output, result.returncode, package.name)
