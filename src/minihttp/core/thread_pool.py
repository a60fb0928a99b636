"""
=============================================================================
THREAD POOL
=============================================================================

Runs connection handling on worker threads so the accept loop never
waits for a client.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept loop ──submit()──►  bounded Queue  ──get()──►  Worker 1    │
    │                              [T][T][T][ ]              Worker 2    │
    │                                   │                    ...         │
    │                                   │                    Worker N    │
    │                     full? → submit() returns False                  │
    │                                                                      │
    │   submit(overflow=True), every worker busy at max_workers            │
    │                          ──►  one-off thread for that task          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

- min_workers threads start with the pool.
- When every worker is busy and tasks are waiting, one more worker is
  added, up to max_workers.
- With overflow, a task that no worker could pick up right away runs
  on its own short-lived thread instead of waiting in the queue, so a
  few slow tasks cannot hold up the rest.
- A task that raises is logged. The worker survives and takes the next.
- Shutdown puts one None ("poison pill") per worker on the queue.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any, List
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """A deferred call: func(*args, **kwargs)."""

    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


def run_task(task: Task, runner: str) -> bool:
    """Run a task, logging any exception. Returns True on success."""
    start_time = time.time()
    try:
        task.func(*task.args, **task.kwargs)
        return True
    except Exception as e:
        elapsed = time.time() - start_time
        logger.exception(f"{runner} task failed after {elapsed:.3f}s: {e}")
        return False


class Worker(threading.Thread):
    """
    Worker thread that processes tasks from the queue.

        loop:
            task = queue.get()
            None  → exit
            else  → run it, log any exception, task_done()
    """

    def __init__(
        self,
        task_queue: "queue.Queue[Optional[Task]]",
        worker_id: int,
        idle_timeout: float = 1.0
    ):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.task_queue = task_queue
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout

        self.state = WorkerState.IDLE
        self._shutdown = threading.Event()

        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while not self._shutdown.is_set():
            try:
                task = self.task_queue.get(timeout=self.idle_timeout)
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

        try:
            if run_task(task, self.name):
                self.tasks_completed += 1
            else:
                self.tasks_failed += 1
        finally:
            self.state = WorkerState.IDLE

    def shutdown(self):
        """Signal the worker to stop after its current task."""
        self._shutdown.set()


class ThreadPool:
    """
    Thread pool for concurrent task execution.

        pool = ThreadPool(min_workers=4, max_workers=16, queue_size=128)
        pool.start()

        if not pool.submit(handle_connection, args=(conn,)):
            ...  # queue full

        pool.shutdown(wait=True, timeout=5.0)
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        queue_size: int = 128,
        idle_timeout: float = 1.0
    ):
        """
        Args:
            min_workers: Threads created at start() and kept running.
            max_workers: Upper bound when scaling up under load.
            queue_size: Tasks allowed to wait for a worker.
            idle_timeout: How often an idle worker checks for shutdown.
        """
        self.min_workers = min_workers
        self.max_workers = max_workers
        self.max_queue_size = queue_size
        self.idle_timeout = idle_timeout

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=queue_size)
        self._workers: List[Worker] = []
        self._overflow: List[threading.Thread] = []

        # Protects _workers, _overflow and the counters. Never held while
        # calling another method that takes it.
        self._lock = threading.Lock()

        self._started = False
        self._shutdown = False
        self._next_worker_id = 0
        self._overflow_started = 0

    def start(self):
        """Start the pool with min_workers threads."""
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.min_workers} workers")
        with self._lock:
            for _ in range(self.min_workers):
                self._add_worker_locked()

        self._started = True
        self._shutdown = False

    def _add_worker_locked(self) -> Worker:
        """Create and start a worker. Caller holds self._lock."""
        worker = Worker(
            task_queue=self._task_queue,
            worker_id=self._next_worker_id,
            idle_timeout=self.idle_timeout
        )
        self._next_worker_id += 1
        self._workers.append(worker)
        worker.start()
        return worker

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        block: bool = False,
        queue_timeout: Optional[float] = None,
        overflow: bool = False
    ) -> bool:
        """
        Submit a task for execution.

        Args:
            func: The function to execute.
            args: Positional arguments for the function.
            kwargs: Keyword arguments for the function.
            block: Wait for queue space instead of rejecting.
            queue_timeout: How long to wait when blocking.
            overflow: Run the task on its own thread when every worker is
                      busy at max_workers or the queue is full.

        Returns:
            True if the task was accepted, False if the queue was full
            and overflow was not allowed.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")
        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        task = Task(func=func, args=args, kwargs=kwargs or {})

        if overflow and self._saturated():
            self._run_overflow(task)
            return True

        try:
            self._task_queue.put(task, block=block, timeout=queue_timeout)
        except queue.Full:
            if not overflow:
                return False
            self._run_overflow(task)
            return True

        self._maybe_scale_up()
        return True

    def _saturated(self) -> bool:
        """True when no worker is free for one more task and none can be added."""
        with self._lock:
            if len(self._workers) < self.max_workers:
                return False
            idle = sum(1 for w in self._workers if w.state == WorkerState.IDLE)
        return idle <= self._task_queue.qsize()

    def _run_overflow(self, task: Task):
        """Run one task on a short-lived thread outside the worker set."""
        with self._lock:
            self._overflow_started += 1
            name = f"Overflow-{self._overflow_started}"
            thread = threading.Thread(
                target=self._overflow_main, args=(task,), name=name, daemon=True
            )
            self._overflow.append(thread)

        logger.debug(f"All {self.max_workers} workers busy, starting {name}")
        try:
            thread.start()
        except RuntimeError:
            with self._lock:
                self._overflow.remove(thread)
            raise

    def _overflow_main(self, task: Task):
        try:
            run_task(task, threading.current_thread().name)
        finally:
            with self._lock:
                self._overflow.remove(threading.current_thread())

    def _maybe_scale_up(self):
        """Add a worker if all are busy, work is waiting and we are under max."""
        with self._lock:
            if len(self._workers) >= self.max_workers:
                return
            busy = sum(1 for w in self._workers if w.state == WorkerState.BUSY)
            if busy == len(self._workers) and self._task_queue.qsize() > 0:
                logger.debug(
                    f"Scaling up: {len(self._workers)} -> {len(self._workers) + 1} workers"
                )
                self._add_worker_locked()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Shutdown the thread pool.

        1. Reject new tasks
        2. If wait: let queued tasks drain (bounded by timeout)
        3. Send one poison pill per worker
        4. Join workers and overflow threads (bounded by what is left
           of timeout)

        Args:
            wait: Whether to wait for queued tasks to complete.
            timeout: Overall bound in seconds. None = wait for everything.
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutdown = True
        deadline = None if timeout is None else time.time() + timeout

        if wait:
            while not self._task_queue.empty():
                if deadline is not None and time.time() > deadline:
                    logger.warning("Shutdown timeout, abandoning queued tasks")
                    break
                time.sleep(0.05)

        with self._lock:
            workers = list(self._workers)
            self._workers.clear()

        for worker in workers:
            worker.shutdown()
            try:
                self._task_queue.put(None, block=False)
            except queue.Full:
                pass  # Worker sees the shutdown flag on its next poll

        for worker in workers:
            remaining = None if deadline is None else max(deadline - time.time(), 0.1)
            worker.join(timeout=remaining)
            if worker.is_alive():
                logger.warning(f"Worker {worker.worker_id} still busy at shutdown")

        with self._lock:
            overflow = list(self._overflow)

        for thread in overflow:
            remaining = None if deadline is None else max(deadline - time.time(), 0.1)
            thread.join(timeout=remaining)
            if thread.is_alive():
                logger.warning(f"{thread.name} still busy at shutdown")

        self._started = False
        logger.info("Thread pool shutdown complete")

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def active_workers(self) -> int:
        return sum(1 for w in self._workers if w.state != WorkerState.STOPPED)

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def pending(self) -> int:
        """Tasks waiting in the queue."""
        return self._task_queue.qsize()

    @property
    def overflow_threads(self) -> int:
        """Overflow threads still running."""
        with self._lock:
            return len(self._overflow)

    @property
    def stats(self) -> dict:
        with self._lock:
            workers = list(self._workers)
            overflow_running = len(self._overflow)
            overflow_started = self._overflow_started
        return {
            "workers": {
                "total": len(workers),
                "busy": sum(1 for w in workers if w.state == WorkerState.BUSY),
                "min": self.min_workers,
                "max": self.max_workers,
            },
            "queue": {
                "pending": self._task_queue.qsize(),
                "max": self.max_queue_size,
            },
            "tasks": {
                "completed": sum(w.tasks_completed for w in workers),
                "failed": sum(w.tasks_failed for w in workers),
            },
            "overflow": {
                "running": overflow_running,
                "started": overflow_started,
            },
        }
