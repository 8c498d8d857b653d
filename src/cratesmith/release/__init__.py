"""Release planning and application."""

from cratesmith.release.apply import (
    FollowUpCommands,
    apply_plan,
    bump_package,
    publish_args,
    publish_dry_run,
    release_commands,
)
from cratesmith.release.propagation import (
    BumpPlan,
    PlannedBump,
    bump_for,
    propagate,
    release_closure,
    strengthen,
)

__all__ = [
    "BumpPlan",
    "FollowUpCommands",
    "PlannedBump",
    "apply_plan",
    "bump_for",
    "bump_package",
    "propagate",
    "publish_args",
    "publish_dry_run",
    "release_closure",
    "release_commands",
    "strengthen",
]
