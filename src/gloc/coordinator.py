"""Wire directories to tasks, start the aggregator and the pool, wait for both."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from pathlib import Path

from gloc.aggregator import StatusAggregator
from gloc.models import CommandSpec, CompletionEvent, RunSummary, Task
from gloc.pool import EventChannel, WorkerPool

logger = logging.getLogger(__name__)


class AggregationError(RuntimeError):
    """The status aggregator stopped before every task reported."""


def run_in_directories(
    paths: Sequence[Path],
    command: CommandSpec,
    *,
    aggregator: StatusAggregator,
    max_concurrency: int,
    run_task: Callable[[Task], CompletionEvent] | None = None,
) -> RunSummary:
    """Run ``command`` once in each of ``paths`` and return the final counts.

    Repeated paths run once. ``aggregator`` must already know every path; it
    is the only consumer of completion events and the only writer to the
    terminal. Blocks until every task has reported. A command that never
    exits blocks this call forever, there is no timeout.
    """

    if not paths:
        return aggregator.summary()

    tasks = [Task(path=path, command=command) for path in dict.fromkeys(paths)]
    channel = EventChannel()
    pool = WorkerPool(max_concurrency=max_concurrency, run_task=run_task)
    result_holder: list[RunSummary] = []
    error_holder: list[Exception] = []

    def _aggregate() -> None:
        try:
            result_holder.append(aggregator.run(channel))
        except Exception as exc:  # noqa: BLE001
            error_holder.append(exc)

    aggregator_thread = threading.Thread(target=_aggregate, daemon=True, name="gloc-aggregator")
    aggregator_thread.start()
    logger.debug("Running %d task(s) with %d worker(s)", len(tasks), max_concurrency)

    pool.run(tasks, channel)
    aggregator_thread.join()
    if error_holder:
        raise AggregationError(f"Status aggregation failed: {error_holder[0]}") from error_holder[0]
    pool.join()
    return result_holder[0]
