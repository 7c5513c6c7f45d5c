"""Bounded worker pool and the completion event stream it feeds."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterable

from gloc.config import DEFAULT_WORKERS
from gloc.executor import CommandExecutor
from gloc.models import CompletionEvent, Task

logger = logging.getLogger(__name__)


class EventChannel:
    """Rendezvous hand-off of completion events to a single consumer.

    ``send`` returns only after the consumer has taken the event, so a slow
    consumer applies backpressure to producers without bounding how many
    commands run at once.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue[tuple[CompletionEvent, threading.Event]] = queue.Queue()

    def send(self, event: CompletionEvent) -> None:
        taken = threading.Event()
        self._queue.put((event, taken))
        taken.wait()

    def receive(self) -> CompletionEvent:
        event, taken = self._queue.get()
        taken.set()
        return event


class WorkerPool:
    """Run tasks on threads with at most ``max_concurrency`` commands in flight.

    A slot is acquired before a worker thread is started and released as soon
    as its command exits, before the completion event is delivered, so pool
    throughput depends only on the bound and command durations.
    """

    def __init__(
        self,
        *,
        max_concurrency: int = DEFAULT_WORKERS,
        run_task: Callable[[Task], CompletionEvent] | None = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1.")
        self.max_concurrency = max_concurrency
        self._run_task = run_task or CommandExecutor().run
        self._slots = threading.BoundedSemaphore(max_concurrency)
        self._threads: list[threading.Thread] = []

    def run(self, tasks: Iterable[Task], channel: EventChannel) -> None:
        """Dispatch every task once; blocks until the last one has started."""

        for task in tasks:
            self._slots.acquire()
            worker = threading.Thread(
                target=self._work,
                args=(task, channel),
                daemon=True,
                name=f"gloc-worker-{task.name}",
            )
            self._threads.append(worker)
            logger.debug("Dispatching %s", task.path)
            worker.start()

    def join(self) -> None:
        """Wait for every dispatched worker to hand off its event."""

        for worker in self._threads:
            worker.join()
        self._threads.clear()

    def _work(self, task: Task, channel: EventChannel) -> None:
        try:
            event = self._run_task(task)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Task in %s crashed: %s", task.path, exc, exc_info=True)
            event = CompletionEvent(path=task.path, succeeded=False, output=str(exc))
        finally:
            self._slots.release()
        channel.send(event)
