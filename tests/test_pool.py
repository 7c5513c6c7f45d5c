from __future__ import annotations

import threading
import time
from pathlib import Path

import allure
import pytest

from gloc.models import CompletionEvent, Task
from gloc.pool import EventChannel, WorkerPool

pytestmark = [
    allure.epic("Command Execution"),
    allure.feature("Bounded Worker Pool"),
]


def _tasks(count: int) -> list[Task]:
    return [Task(path=Path(f"/work/repo{index}"), command="true") for index in range(count)]


def _drain(channel: EventChannel, count: int) -> list[CompletionEvent]:
    return [channel.receive() for _ in range(count)]


def _succeed(task: Task) -> CompletionEvent:
    return CompletionEvent(path=task.path, succeeded=True)


def test_every_task_produces_exactly_one_event() -> None:
    tasks = _tasks(25)
    channel = EventChannel()
    pool = WorkerPool(max_concurrency=4, run_task=_succeed)

    dispatcher = threading.Thread(target=pool.run, args=(tasks, channel))
    dispatcher.start()
    events = _drain(channel, len(tasks))
    dispatcher.join(timeout=5)
    pool.join()

    assert sorted(str(event.path) for event in events) == sorted(str(task.path) for task in tasks)


@pytest.mark.parametrize("bound", [1, 3, 8])
def test_in_flight_tasks_never_exceed_bound(bound: int) -> None:
    lock = threading.Lock()
    in_flight = 0
    peak = 0

    def _slow(task: Task) -> CompletionEvent:
        nonlocal in_flight, peak
        with lock:
            in_flight += 1
            peak = max(peak, in_flight)
        time.sleep(0.02)
        with lock:
            in_flight -= 1
        return CompletionEvent(path=task.path, succeeded=True)

    tasks = _tasks(16)
    channel = EventChannel()
    pool = WorkerPool(max_concurrency=bound, run_task=_slow)

    dispatcher = threading.Thread(target=pool.run, args=(tasks, channel))
    dispatcher.start()
    events = _drain(channel, len(tasks))
    dispatcher.join(timeout=5)
    pool.join()

    assert len(events) == len(tasks)
    assert 1 <= peak <= bound


def test_slots_are_released_before_events_are_consumed() -> None:
    executed: list[Path] = []
    lock = threading.Lock()

    def _record(task: Task) -> CompletionEvent:
        with lock:
            executed.append(task.path)
        return CompletionEvent(path=task.path, succeeded=True)

    tasks = _tasks(3)
    channel = EventChannel()
    pool = WorkerPool(max_concurrency=1, run_task=_record)

    pool.run(tasks, channel)
    deadline = time.monotonic() + 5
    while len(executed) < len(tasks) and time.monotonic() < deadline:
        time.sleep(0.01)

    assert len(executed) == len(tasks)
    assert len(_drain(channel, len(tasks))) == len(tasks)
    pool.join()


def test_crashing_task_becomes_failed_event_and_frees_its_slot() -> None:
    def _explode(task: Task) -> CompletionEvent:
        if task.path.name == "repo0":
            raise RuntimeError("boom")
        return CompletionEvent(path=task.path, succeeded=True)

    tasks = _tasks(3)
    channel = EventChannel()
    pool = WorkerPool(max_concurrency=1, run_task=_explode)

    dispatcher = threading.Thread(target=pool.run, args=(tasks, channel))
    dispatcher.start()
    events = {event.path.name: event for event in _drain(channel, len(tasks))}
    dispatcher.join(timeout=5)
    pool.join()

    assert not events["repo0"].succeeded
    assert events["repo0"].output == "boom"
    assert events["repo1"].succeeded
    assert events["repo2"].succeeded


def test_pool_rejects_non_positive_bound() -> None:
    with pytest.raises(ValueError, match="max_concurrency"):
        WorkerPool(max_concurrency=0)


def test_channel_send_waits_for_consumer() -> None:
    channel = EventChannel()
    event = CompletionEvent(path=Path("/work/repo"), succeeded=True)
    sender = threading.Thread(target=channel.send, args=(event,))

    sender.start()
    time.sleep(0.05)
    assert sender.is_alive()

    assert channel.receive() == event
    sender.join(timeout=5)
    assert not sender.is_alive()
