"""Base command infrastructure."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, TypeVar

from cratesmith.workspace import Workspace

TResult = TypeVar("TResult")


@dataclass
class CommandContext:
    """State shared by every command invocation.

    Attributes:
        workspace: The discovered crates and their graphs.
        dry_run: Report what would change without touching manifests or
            running cargo.
    """

    workspace: Workspace
    dry_run: bool = False


class SyncCommand(ABC, Generic[TResult]):
    """Base class for cratesmith commands.

    Commands run synchronously, one external tool invocation at a time, so
    their progress output is deterministic. Subclasses return a result object
    and leave rendering to the ``handle_*`` function that built them.
    """

    def __init__(self, context: CommandContext) -> None:
        self.context = context
        self.workspace = context.workspace

    @abstractmethod
    def execute(self) -> TResult:
        """Run the command and return its result."""
        ...

    def validate(self) -> list[str]:
        """Check preconditions before ``execute``.

        Returns:
            Problems that prevent the command from running, empty if none.
        """
        return []
