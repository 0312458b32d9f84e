"""
=============================================================================
BOUNDED THREAD POOL
=============================================================================

Lets one slow client stop being everybody's problem.

Without a pool, the accept thread serves each connection to completion
before it accepts the next one, so a client that connects and never
sends anything blocks the whole server until its deadline expires.
With the pool, the accept thread only hands connections off:

    ┌──────────────┐   submit()   ┌──────────────────┐   get()   ┌──────────┐
    │ accept loop  │ ───────────► │ Queue(maxsize=N) │ ────────► │ Worker 1 │
    └──────────────┘              └──────────────────┘ ────────► │ Worker 2 │
                                                       ────────► │ Worker 3 │
                                                                 └──────────┘

=============================================================================
BACKPRESSURE
=============================================================================

Both the number of workers and the queue are bounded. When the queue is
full, submit() waits up to queue_timeout for a slot and then reports
failure, so memory can't grow without limit under a flood of clients.
The caller decides what to do with the rejected work (the server closes
the connection).

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """A deferred function call waiting in the queue."""
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Worker thread pulling tasks off the shared queue.

    A task that raises is logged and counted; the worker keeps running.
    A None task (poison pill) makes the worker exit.
    """

    def __init__(self, task_queue: queue.Queue, worker_id: int, poll_interval: float = 1.0):
        # daemon=True: a stuck worker never keeps the process alive
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.task_queue = task_queue
        self.worker_id = worker_id
        self.poll_interval = poll_interval

        self.state = WorkerState.IDLE
        self._shutdown = threading.Event()

        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while not self._shutdown.is_set():
            try:
                task = self.task_queue.get(timeout=self.poll_interval)
            except queue.Empty:
                continue

            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()

        try:
            task.func(*task.args, **task.kwargs)
            self.tasks_completed += 1
            logger.debug(
                f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s"
            )
        except Exception as e:
            self.tasks_failed += 1
            logger.exception(
                f"Worker {self.worker_id} task failed after {time.time() - start_time:.3f}s: {e}"
            )
        finally:
            self.state = WorkerState.IDLE

    def shutdown(self):
        self._shutdown.set()


class ThreadPool:
    """
    Fixed-size pool of worker threads with a bounded task queue.

    Usage:
        pool = ThreadPool(workers=4, queue_size=64)
        pool.start()

        if not pool.submit(handle, args=(conn,), queue_timeout=5.0):
            ...  # queue full, shed the work

        pool.shutdown(wait=True, timeout=30.0)
    """

    def __init__(self, workers: int = 4, queue_size: int = 64):
        if workers < 1:
            raise ValueError("ThreadPool needs at least one worker")

        self.workers = workers
        self.queue_size = queue_size

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=queue_size)
        self._workers: list = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False

    def start(self):
        """Create and start all worker threads."""
        with self._lock:
            if self._started:
                return

            logger.info(f"Starting thread pool with {self.workers} workers")
            for worker_id in range(self.workers):
                worker = Worker(self._task_queue, worker_id)
                self._workers.append(worker)
                worker.start()

            self._started = True
            self._shutdown = False

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        queue_timeout: Optional[float] = None,
    ) -> bool:
        """
        Queue a task.

        Args:
            func: The function to execute on a worker.
            args: Positional arguments.
            kwargs: Keyword arguments.
            queue_timeout: How long to wait for a free queue slot.
                           None = wait as long as it takes.

        Returns:
            True if queued, False if the queue stayed full.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")

        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        task = Task(func=func, args=args, kwargs=kwargs or {})

        try:
            self._task_queue.put(task, block=True, timeout=queue_timeout)
        except queue.Full:
            return False
        return True

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the pool.

        Args:
            wait: Let queued tasks finish before stopping workers.
            timeout: Upper bound on the wait for queued tasks.
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutdown = True

        if wait:
            deadline = time.time() + timeout if timeout else None
            while self._task_queue.unfinished_tasks:
                if deadline and time.time() > deadline:
                    logger.warning("Shutdown timeout, abandoning queued tasks")
                    break
                time.sleep(0.05)

        for worker in self._workers:
            worker.shutdown()
            try:
                self._task_queue.put_nowait(None)
            except queue.Full:
                pass  # Worker sees the shutdown event on its next poll

        for worker in self._workers:
            worker.join(timeout=2.0)

        self._workers.clear()
        self._started = False

        logger.info("Thread pool shutdown complete")

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def pending(self) -> int:
        """Tasks waiting in the queue."""
        return self._task_queue.qsize()

    @property
    def stats(self) -> dict:
        return {
            "workers": {
                "total": len(self._workers),
                "busy": self.busy_workers,
            },
            "tasks": {
                "queued": self.pending,
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            },
        }
