"""
Unit tests for the bounded thread pool.
"""

import threading

import pytest

from contentserver.core.thread_pool import ThreadPool


@pytest.fixture
def pool():
    pool = ThreadPool(workers=2, queue_size=4)
    pool.start()
    yield pool
    pool.shutdown(wait=False)


class TestThreadPool:
    """Tests for ThreadPool."""

    def test_runs_submitted_tasks(self, pool: ThreadPool):
        done = threading.Event()
        results = []

        def task(value):
            results.append(value)
            done.set()

        assert pool.submit(task, args=(42,))
        assert done.wait(timeout=5.0)
        assert results == [42]

    def test_failing_task_keeps_worker_alive(self, pool: ThreadPool):
        """An exception in one task doesn't stop the pool."""
        done = threading.Event()

        def boom():
            raise RuntimeError("boom")

        pool.submit(boom)
        pool.submit(done.set)

        assert done.wait(timeout=5.0)

    def test_full_queue_rejects(self):
        """Backpressure: submit() reports failure when the queue stays full."""
        pool = ThreadPool(workers=1, queue_size=1)
        pool.start()
        release = threading.Event()
        started = threading.Event()

        def blocker():
            started.set()
            release.wait(timeout=5.0)

        try:
            assert pool.submit(blocker)
            assert started.wait(timeout=5.0)

            assert pool.submit(release.wait, args=(5.0,))       # fills the queue
            assert not pool.submit(lambda: None, queue_timeout=0.05)
        finally:
            release.set()
            pool.shutdown(wait=True, timeout=5.0)

    def test_shutdown_waits_for_queued_tasks(self):
        pool = ThreadPool(workers=1, queue_size=8)
        pool.start()
        results = []

        for i in range(5):
            pool.submit(results.append, args=(i,))

        pool.shutdown(wait=True, timeout=5.0)

        assert results == [0, 1, 2, 3, 4]
        assert pool.stats["workers"]["total"] == 0

    def test_submit_requires_start(self):
        with pytest.raises(RuntimeError, match="not started"):
            ThreadPool(workers=1).submit(lambda: None)

    def test_needs_a_worker(self):
        with pytest.raises(ValueError):
            ThreadPool(workers=0)

    def test_stats(self, pool: ThreadPool):
        done = threading.Event()
        pool.submit(done.set)
        assert done.wait(timeout=5.0)

        stats = pool.stats
        assert stats["workers"]["total"] == 2
        assert set(stats["tasks"]) == {"queued", "completed", "failed"}
