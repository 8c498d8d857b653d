"""Tests for release propagation."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from conftest import FailingClassifier, FakeClassifier
from cratesmith.classifier import Classification
from cratesmith.config import CratesmithConfig
from cratesmith.errors import CargoError, NonPublishableSeedError, PackageNotFoundError
from cratesmith.release import BumpPlan, bump_for, propagate, release_closure, strengthen
from cratesmith.versioning import BumpType
from cratesmith.workspace import DependencyGraph, Package, Workspace

MINOR = Classification.MINOR_COMPATIBLE
MAJOR = Classification.MAJOR_BREAKING


def chain_workspace(temp_dir: Path) -> Workspace:
    """embassy-d -> embassy-c -> embassy-b -> embassy-a, plus an unrelated crate."""
    packages = {
        "embassy-a": Package("embassy-a", "0.1.0", temp_dir / "a"),
        "embassy-b": Package("embassy-b", "0.2.0", temp_dir / "b", dependencies=["embassy-a"]),
        "embassy-c": Package("embassy-c", "0.3.0", temp_dir / "c", dependencies=["embassy-b"]),
        "embassy-d": Package("embassy-d", "0.4.0", temp_dir / "d", dependencies=["embassy-c"]),
        "embassy-x": Package("embassy-x", "1.0.0", temp_dir / "x"),
    }
    return Workspace(temp_dir, CratesmithConfig(), packages)



def three_crate_chain(temp_dir: Path) -> Workspace:
    """embassy-a depends on embassy-b, which depends on embassy-c."""
    packages = {
        "embassy-a": Package("embassy-a", "0.1.0", temp_dir / "a", dependencies=["embassy-b"]),
        "embassy-b": Package("embassy-b", "0.2.0", temp_dir / "b", dependencies=["embassy-c"]),
        "embassy-c": Package("embassy-c", "0.3.0", temp_dir / "c"),
    }
    return Workspace(temp_dir, CratesmithConfig(), packages)


class TestBumpPlan:
    """Tests for BumpPlan."""

    def test_decide(self) -> None:
        """Decisions compute the new version and keep insertion order."""
        plan = BumpPlan()
        plan.decide("b", "0.2.0", BumpType.MINOR)
        plan.decide("a", "1.0.3", BumpType.PATCH)
        assert plan.names == ["b", "a"]
        assert plan.as_dict() == {
            "b": (BumpType.MINOR, "0.3.0"),
            "a": (BumpType.PATCH, "1.0.4"),
        }

    def test_first_decision_wins(self) -> None:
        """Deciding twice keeps the first decision."""
        plan = BumpPlan()
        first = plan.decide("a", "1.0.0", BumpType.PATCH)
        assert plan.decide("a", "1.0.0", BumpType.MINOR) is first
        assert plan["a"].bump is BumpType.PATCH

    @pytest.mark.parametrize("bump", [BumpType.MAJOR, BumpType.NONE])
    def test_rejects_other_bumps(self, bump: BumpType) -> None:
        """Only patch and minor bumps can be planned."""
        with pytest.raises(ValueError, match="Unsupported bump"):
            BumpPlan().decide("a", "1.0.0", bump)

    def test_upgrade_to_minor(self) -> None:
        """Upgrading bumps the minor component of the planned version."""
        plan = BumpPlan()
        plan.decide("a", "2.1.0", BumpType.PATCH)
        assert plan.upgrade_to_minor("a") is True
        assert plan["a"].new_version == "2.2.0"
        assert plan["a"].old_version == "2.1.0"
        assert plan.upgrade_to_minor("a") is False
        assert plan.upgrade_to_minor("missing") is False


class TestBumpFor:
    """Tests for bump_for."""

    @pytest.mark.parametrize(
        ("classification", "bump"),
        [
            (Classification.NO_CHANGE, BumpType.PATCH),
            (Classification.PATCH_COMPATIBLE, BumpType.PATCH),
            (Classification.MINOR_COMPATIBLE, BumpType.MINOR),
            (Classification.MAJOR_BREAKING, BumpType.MINOR),
        ],
    )
    def test_policy(self, classification: Classification, bump: BumpType) -> None:
        """Breaking changes are folded into minor bumps."""
        assert bump_for(classification) is bump


class TestReleaseClosure:
    """Tests for release_closure."""

    def test_dependencies_then_dependents(self, temp_dir: Path) -> None:
        """The seed, its dependencies, then its dependents."""
        workspace = chain_workspace(temp_dir)
        assert release_closure(workspace, "embassy-b") == [
            "embassy-b",
            "embassy-a",
            "embassy-c",
            "embassy-d",
        ]


class TestStrengthen:
    """Tests for strengthen."""

    def test_never_adds_crates(self) -> None:
        """Dependents that are not planned stay out of the plan."""
        graph = DependencyGraph(["a", "b"], {"b": ["a"], "a": []})
        plan = BumpPlan()
        plan.decide("a", "0.1.0", BumpType.MINOR)
        assert strengthen(plan, [graph]) == []
        assert plan.names == ["a"]

    def test_reaches_fixed_point(self) -> None:
        """Upgrades cascade through transitive dependents."""
        graph = DependencyGraph(["a", "b", "c"], {"c": ["b"], "b": ["a"], "a": []})
        plan = BumpPlan()
        plan.decide("c", "0.3.0", BumpType.PATCH)
        plan.decide("b", "0.2.0", BumpType.PATCH)
        plan.decide("a", "0.1.0", BumpType.MINOR)
        assert sorted(strengthen(plan, [graph])) == ["b", "c"]
        assert all(entry.bump is BumpType.MINOR for entry in plan)


class TestPropagate:
    """Tests for propagate."""

    def test_breaking_seed_upgrades_dependent(
        self, repo_dir: Path, make_classifier: Callable[..., FakeClassifier]
    ) -> None:
        """A breaking change in core forces embassy-net to a minor bump."""
        workspace = Workspace.discover(repo_dir)
        classifier = make_classifier({"embassy-core": MAJOR})

        plan = propagate(["embassy-core"], workspace, classifier)

        assert plan.as_dict() == {
            "embassy-core": (BumpType.MINOR, "1.1.0"),
            "embassy-net": (BumpType.MINOR, "2.2.0"),
        }
        assert classifier.calls == ["embassy-core", "embassy-net"]

    def test_compatible_seed_patches_dependents(
        self, repo_dir: Path, make_classifier: Callable[..., FakeClassifier]
    ) -> None:
        """Without a minor change everything gets a patch bump."""
        workspace = Workspace.discover(repo_dir)
        plan = propagate(["embassy-core"], workspace, make_classifier())
        assert plan.as_dict() == {
            "embassy-core": (BumpType.PATCH, "1.0.1"),
            "embassy-net": (BumpType.PATCH, "2.1.1"),
        }

    def test_reports_classifications(
        self, repo_dir: Path, make_classifier: Callable[..., FakeClassifier]
    ) -> None:
        """on_classified sees every verdict."""
        workspace = Workspace.discover(repo_dir)
        seen: dict[str, Classification] = {}
        propagate(
            ["embassy-net"],
            workspace,
            make_classifier({"embassy-net": MINOR}),
            on_classified=seen.__setitem__,
        )
        assert seen == {
            "embassy-net": MINOR,
            "embassy-core": Classification.NO_CHANGE,
        }

    def test_non_publishable_seed(
        self, repo_dir: Path, make_classifier: Callable[..., FakeClassifier]
    ) -> None:
        """Unpublished seeds fail before anything is classified."""
        workspace = Workspace.discover(repo_dir)
        classifier = make_classifier()
        with pytest.raises(NonPublishableSeedError, match="embassy-app"):
            propagate(["embassy-core", "embassy-app"], workspace, classifier)
        assert classifier.calls == []

    def test_unknown_seed(
        self, repo_dir: Path, make_classifier: Callable[..., FakeClassifier]
    ) -> None:
        """Unknown seeds fail before anything is classified."""
        workspace = Workspace.discover(repo_dir)
        classifier = make_classifier()
        with pytest.raises(PackageNotFoundError):
            propagate(["embassy-nope"], workspace, classifier)
        assert classifier.calls == []

    def test_minor_dependents_are_minor(
        self, temp_dir: Path, make_classifier: Callable[..., FakeClassifier]
    ) -> None:
        """Every planned dependent of a minor-bumped crate is minor-bumped too."""
        workspace = chain_workspace(temp_dir)
        plan = propagate(["embassy-b"], workspace, make_classifier({"embassy-a": MINOR}))

        for entry in plan:
            if entry.bump is BumpType.MINOR:
                for dependent in workspace.graph.descendants(entry.name):
                    if dependent in plan:
                        assert plan[dependent].bump is BumpType.MINOR
        assert plan["embassy-d"].new_version == "0.5.0"

    def test_plan_stays_within_closure(
        self, temp_dir: Path, make_classifier: Callable[..., FakeClassifier]
    ) -> None:
        """Only crates reachable from the seeds are planned, each once."""
        workspace = chain_workspace(temp_dir)
        classifier = make_classifier({"embassy-c": MAJOR})
        plan = propagate(["embassy-c", "embassy-b"], workspace, classifier)

        closure = set(release_closure(workspace, "embassy-c"))
        closure |= set(release_closure(workspace, "embassy-b"))
        assert set(plan.names) <= closure
        assert "embassy-x" not in plan
        assert sorted(classifier.calls) == sorted(set(classifier.calls))

    def test_dev_dependency_upgrade(
        self, temp_dir: Path, make_classifier: Callable[..., FakeClassifier]
    ) -> None:
        """Upgrades also follow dev-dependency edges between planned crates."""
        packages = {
            "embassy-y": Package("embassy-y", "0.1.0", temp_dir / "y"),
            "embassy-z": Package(
                "embassy-z", "0.1.0", temp_dir / "z", dev_dependencies=["embassy-y"]
            ),
        }
        workspace = Workspace(temp_dir, CratesmithConfig(), packages)
        plan = propagate(
            ["embassy-y", "embassy-z"], workspace, make_classifier({"embassy-y": MINOR})
        )
        assert plan["embassy-z"].bump is BumpType.MINOR
        assert plan["embassy-z"].new_version == "0.2.0"

    @pytest.mark.parametrize("seed", ["embassy-a", "embassy-c"])
    def test_breaking_leaf_makes_chain_minor(
        self, temp_dir: Path, make_classifier: Callable[..., FakeClassifier], seed: str
    ) -> None:
        """A breaking change at the bottom of a chain gives every crate a minor bump."""
        workspace = three_crate_chain(temp_dir)
        classifier = make_classifier({"embassy-c": MAJOR})

        plan = propagate([seed], workspace, classifier)

        assert plan.as_dict() == {
            "embassy-a": (BumpType.MINOR, "0.2.0"),
            "embassy-b": (BumpType.MINOR, "0.3.0"),
            "embassy-c": (BumpType.MINOR, "0.4.0"),
        }
        assert sorted(classifier.calls) == ["embassy-a", "embassy-b", "embassy-c"]

    def test_classifier_failure_aborts(self, repo_dir: Path) -> None:
        """A failing classification propagates and nothing is written."""
        workspace = Workspace.discover(repo_dir)
        before = {p: p.read_bytes() for p in repo_dir.rglob("Cargo.toml")}
        classifier = FailingClassifier(fail_on=2)

        with pytest.raises(CargoError, match="embassy-net"):
            propagate(["embassy-core"], workspace, classifier)

        assert classifier.calls == ["embassy-core", "embassy-net"]
        assert {p: p.read_bytes() for p in repo_dir.rglob("Cargo.toml")} == before
        assert workspace.packages["embassy-core"].version == "1.0.0"
