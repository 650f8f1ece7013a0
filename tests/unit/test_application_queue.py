"""
Unit tests for jobswipe/services/application_queue.py

Tests the in-process queue:
- Tasks run in the background and are tracked until done
- An application id is rejected while its task is running
- A crashing task is logged, not raised
"""

import asyncio
import logging

import pytest

from jobswipe.services.application_queue import ApplicationQueue, DuplicateEnqueueError


@pytest.mark.asyncio
async def test_enqueue_runs_task_and_join_waits():
    queue = ApplicationQueue()
    done = []

    async def work():
        await asyncio.sleep(0.01)
        done.append("app-1")

    queue.enqueue("app-1", work())
    assert queue.pending == 1
    assert queue.is_enqueued("app-1")

    await queue.join()

    assert done == ["app-1"]
    assert queue.pending == 0


@pytest.mark.asyncio
async def test_duplicate_enqueue_rejected():
    queue = ApplicationQueue()
    runs = []

    async def work():
        runs.append(1)

    queue.enqueue("app-1", work())
    with pytest.raises(DuplicateEnqueueError):
        queue.enqueue("app-1", work())

    await queue.join()
    assert runs == [1]


@pytest.mark.asyncio
async def test_finished_ids_are_not_retained():
    queue = ApplicationQueue()

    async def work():
        return None

    for i in range(1000):
        queue.enqueue(f"app-{i}", work())
    await queue.join()

    assert queue.pending == 0
    assert not queue.is_enqueued("app-0")
    assert queue._tasks == {}


@pytest.mark.asyncio
async def test_crash_is_logged_not_raised(caplog):
    queue = ApplicationQueue()

    async def boom():
        raise RuntimeError("unexpected")

    with caplog.at_level(logging.ERROR, logger="jobswipe.services.application_queue"):
        queue.enqueue("app-2", boom())
        await queue.join()

    assert queue.pending == 0
    assert any("app-2" in r.getMessage() and "crashed" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_independent_applications_run_concurrently():
    queue = ApplicationQueue()
    started = []
    release = asyncio.Event()

    async def work(name):
        started.append(name)
        await release.wait()

    queue.enqueue("a", work("a"))
    queue.enqueue("b", work("b"))
    await asyncio.sleep(0)
    assert sorted(started) == ["a", "b"]

    release.set()
    await queue.join()
