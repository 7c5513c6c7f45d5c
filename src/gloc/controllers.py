"""Controller behind the ``gloc`` CLI command."""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass, field

from gloc.aggregator import DisplayOptions, StatusAggregator
from gloc.config import Settings
from gloc.coordinator import run_in_directories
from gloc.discovery import discover, expand_root
from gloc.executor import CommandExecutor
from gloc.models import CommandSpec, RunSummary
from gloc.render import terminal_size

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RunCommand:
    """CLI inputs for one concurrent run."""

    command: str
    root: str = "."
    show_output: bool = False
    ignore_empty: bool = False
    ignore_errors: bool = False
    recurse: bool = False
    all_dirs: bool = False
    workers: int | None = None
    use_shell: bool = True


@dataclass(slots=True)
class RunResult:
    """Trailing lines to print and the final counts, if anything ran."""

    lines: list[str] = field(default_factory=list)
    summary: RunSummary | None = None

    @property
    def success(self) -> bool:
        return self.summary is None or self.summary.ok


class GlocCliController:
    """Resolve settings and directories, then drive the coordinator."""

    def run(self, command: RunCommand) -> RunResult:
        settings = Settings.from_env(workers=command.workers)
        settings.validate()
        command_spec = build_command_spec(command.command, use_shell=command.use_shell)

        paths = discover(command.root, all_dirs=command.all_dirs, recurse=command.recurse)
        if not paths:
            return RunResult(lines=[f"No repos found in '{expand_root(command.root)}'"])

        display = settings.display
        aggregator = StatusAggregator(
            paths,
            options=DisplayOptions(
                show_output=command.show_output,
                ignore_empty=command.ignore_empty,
                ignore_errors=command.ignore_errors,
            ),
            color=display.color,
            query_size=lambda: terminal_size((display.fallback_width, display.fallback_height)),
            max_summary_width=display.max_summary_width,
        )
        summary = run_in_directories(
            paths,
            command_spec,
            aggregator=aggregator,
            max_concurrency=settings.workers,
            run_task=CommandExecutor(shell=settings.shell).run,
        )
        logger.debug(
            "Run finished: total=%d succeeded=%d failed=%d",
            summary.total,
            summary.succeeded,
            summary.failed,
        )
        return RunResult(summary=summary)


def build_command_spec(text: str, *, use_shell: bool) -> CommandSpec:
    """Keep ``text`` whole for the shell, or split it quote-aware into argv."""

    if not text.strip():
        raise ValueError("No command provided.")
    if use_shell:
        return text
    try:
        return tuple(shlex.split(text))
    except ValueError as error:
        raise ValueError(f"Cannot split command {text!r}: {error}") from error
