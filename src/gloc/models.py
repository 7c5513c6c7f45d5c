"""Domain models for tasks, completion events and progress state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

CommandSpec = str | tuple[str, ...]


class TaskStatus(str, Enum):
    """Per-directory lifecycle states."""

    PENDING = "pending"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class Task:
    """One command to run in one directory."""

    path: Path
    command: CommandSpec

    @property
    def name(self) -> str:
        return project_name(self.path)


@dataclass(frozen=True, slots=True)
class CompletionEvent:
    """Result message emitted exactly once by the worker that ran a task."""

    path: Path
    succeeded: bool
    output: str = ""
    exit_code: int | None = None

    @property
    def name(self) -> str:
        return project_name(self.path)


@dataclass(slots=True)
class TaskState:
    """Aggregator-owned status of one directory."""

    status: TaskStatus = TaskStatus.PENDING
    succeeded: bool = False
    output: str = ""


@dataclass(slots=True)
class RunSummary:
    """Counts reported once every task has completed."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0

    @property
    def ok(self) -> bool:
        return self.failed == 0


def project_name(path: Path) -> str:
    """Display label for a task directory: its last path segment."""

    return path.name or str(path)
