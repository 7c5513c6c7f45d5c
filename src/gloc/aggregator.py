"""Single-threaded owner of progress state and of every terminal write."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

import click

from gloc.models import CompletionEvent, RunSummary, TaskState, TaskStatus, project_name
from gloc.pool import EventChannel
from gloc.render import render_summary, terminal_size

logger = logging.getLogger(__name__)

ERASE_LINE = "\r\x1b[2K"
SUCCESS_MARKER = "✔"
FAILURE_MARKER = "✖"


@dataclass(frozen=True, slots=True)
class DisplayOptions:
    """Which captured output to print under each record line."""

    show_output: bool = False
    ignore_empty: bool = False
    ignore_errors: bool = False


def should_show_output(event: CompletionEvent, options: DisplayOptions) -> bool:
    if not options.show_output:
        return False
    if options.ignore_empty and not event.output.strip():
        return False
    return not (options.ignore_errors and not event.succeeded)


class StatusAggregator:
    """Consume completion events one at a time and redraw the summary line.

    All state lives here and is only touched from the thread that calls
    :meth:`run` (or :meth:`handle`), so no locking is involved.
    """

    def __init__(  # noqa: PLR0913
        self,
        paths: Iterable[Path],
        *,
        options: DisplayOptions | None = None,
        out: TextIO | None = None,
        color: bool | None = None,
        query_size: Callable[[], os.terminal_size] | None = None,
        max_summary_width: int = 100,
    ) -> None:
        self._state: dict[Path, TaskState] = {path: TaskState() for path in paths}
        self._options = options or DisplayOptions()
        self._out = out
        self._color = color
        self._query_size = query_size or terminal_size
        self._max_summary_width = max_summary_width

    @property
    def total_count(self) -> int:
        return len(self._state)

    @property
    def remaining_count(self) -> int:
        return sum(1 for state in self._state.values() if state.status is TaskStatus.PENDING)

    def pending_names(self) -> list[str]:
        return [
            project_name(path)
            for path, state in self._state.items()
            if state.status is TaskStatus.PENDING
        ]

    def run(self, channel: EventChannel) -> RunSummary:
        """Process events until no directory is pending."""

        while self.remaining_count:
            self.handle(channel.receive())
        return self.summary()

    def handle(self, event: CompletionEvent) -> bool:
        """Apply one event; returns ``True`` once every directory is done."""

        state = self._state.get(event.path)
        if state is None:
            logger.warning("Ignoring completion for unknown directory %s", event.path)
            return self.remaining_count == 0
        if state.status is TaskStatus.DONE:
            logger.warning("Ignoring repeated completion for %s", event.path)
            return self.remaining_count == 0

        self._write(ERASE_LINE)
        state.status = TaskStatus.DONE
        state.succeeded = event.succeeded
        state.output = event.output
        self._write_record(event)

        remaining = self.remaining_count
        if remaining == 0:
            return True

        width = min(self._query_size().columns, self._max_summary_width)
        summary = render_summary(remaining, self.total_count, self.pending_names(), width)
        self._write(click.style(summary, fg="cyan"))
        return False

    def summary(self) -> RunSummary:
        done = [state for state in self._state.values() if state.status is TaskStatus.DONE]
        succeeded = sum(1 for state in done if state.succeeded)
        return RunSummary(
            total=self.total_count,
            succeeded=succeeded,
            failed=len(done) - succeeded,
        )

    def _write_record(self, event: CompletionEvent) -> None:
        marker = SUCCESS_MARKER if event.succeeded else FAILURE_MARKER
        color = "green" if event.succeeded else "red"
        if not self._options.show_output:
            self._write(f"{click.style(marker, fg=color)} {event.name}", nl=True)
            return

        banner = click.style(f" {marker} {event.name} ", bg=color, fg="black")
        self._write(banner, nl=True)
        if should_show_output(event, self._options):
            self._write(event.output.rstrip("\n"), nl=True)

    def _write(self, text: str, *, nl: bool = False) -> None:
        click.echo(text, file=self._out, nl=nl, color=self._color)
