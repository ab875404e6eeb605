"""
=============================================================================
THREAD POOL IMPLEMENTATION
=============================================================================

A fixed set of worker threads processing jobs from one shared queue. In
pool mode the dispatcher submits every accepted connection as a Job and
goes straight back to accept().

=============================================================================
THREAD POOL ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ThreadPool(size=4)                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   submit(func, *args) ──► [Job] [Job] [Job] ...   (queue.Queue)     │
    │                                  │                                   │
    │                                  │ get()                             │
    │                                  ▼                                   │
    │   ┌──────────┐ ┌──────────┐ ┌──────────┐ ┌──────────┐               │
    │   │ Worker-0 │ │ Worker-1 │ │ Worker-2 │ │ Worker-3 │               │
    │   │  (idle)  │ │  (busy)  │ │  (busy)  │ │  (idle)  │               │
    │   └──────────┘ └──────────┘ └──────────┘ └──────────┘               │
    │                                                                      │
    │   • Workers are created once, at construction                       │
    │   • The queue is unbounded: submit() never blocks                   │
    │   • queue.Queue does the locking for the job hand-off               │
    │   • Each Job is taken by exactly one worker                         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
SHUTDOWN PROTOCOL
=============================================================================

Shutdown uses the "poison pill" pattern. A stop marker (None) is queued
once per worker BEHIND every job already submitted:

    queue: [Job] [Job] [Job] [None] [None] [None] [None]
                              ─────────────────────────
                              one per worker

    pool.shutdown()
        └─ close submissions   (submit() now raises PoolMisuseError)
        └─ queue one None per worker
        └─ workers finish the jobs in front of the markers
        └─ each worker exits when it takes a None
        └─ join() every worker

Closing submissions and queueing the markers happen under the same lock
that submit() takes, so no job can land behind a stop marker and be
silently dropped.

=============================================================================
COMMON INTERVIEW QUESTIONS
=============================================================================

Q: Why not one thread per connection?
A: Each thread costs a stack (1-8 MB) and scheduling overhead. A fixed
   pool puts a hard ceiling on both; extra connections wait in the queue.

Q: What happens to a job that raises?
A: The worker logs it with the traceback, counts it as failed and moves on
   to the next job. Exceptions never escape the pool.

Q: Why is submitting after shutdown an error instead of a no-op?
A: It means the caller's lifecycle is wrong. Dropping the job quietly
   would leave a client connection hanging with nobody to answer it.

=============================================================================
"""

import itertools
import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional


logger = logging.getLogger(__name__)


class PoolConfigurationError(ValueError):
    """Raised when a pool is created with a non-positive size."""


class PoolMisuseError(RuntimeError):
    """Raised when a job is submitted after shutdown has begun."""


class WorkerState(Enum):
    """
    Worker thread states.

    Used for monitoring and debugging the thread pool.
    """
    IDLE = "idle"        # Waiting for a job
    BUSY = "busy"        # Executing a job
    STOPPED = "stopped"  # Thread exited


_job_ids = itertools.count(1)


@dataclass
class Job:
    """
    A unit of work: "call this function with these arguments later".

    Attributes:
        func: The function to execute.
        args: Positional arguments for the function.
        kwargs: Keyword arguments for the function.
        id: Sequential job number (for logging).
        submitted_at: Time the job was queued.
    """
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    id: int = field(default_factory=lambda: next(_job_ids))
    submitted_at: float = field(default_factory=time.time)

    def run(self) -> Any:
        return self.func(*self.args, **self.kwargs)


class Worker(threading.Thread):
    """
    Worker thread that processes jobs from the queue.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        Worker Loop                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. Wait for a job from the queue (blocking, no timeout)           │
    │          │                                                           │
    │   2. Stop marker (None)?                                            │
    │          ├── Yes → exit loop, thread terminates                     │
    │          └── No  → step 3                                           │
    │          │                                                           │
    │   3. Execute the job, logging any exception                         │
    │          │                                                           │
    │   4. task_done(), back to step 1                                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘
    """

    def __init__(self, job_queue: "queue.Queue[Optional[Job]]", worker_id: int):
        # daemon=True: a forgotten pool never keeps the process alive
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.job_queue = job_queue
        self.worker_id = worker_id

        self.state = WorkerState.IDLE
        self._current_job: Optional[Job] = None

        # Metrics
        self.jobs_completed = 0
        self.jobs_failed = 0

    def run(self):
        """Main worker loop; runs until a stop marker is received."""
        logger.debug(f"Worker {self.worker_id} started")

        while True:
            job = self.job_queue.get()
            try:
                if job is None:
                    break
                self._execute_job(job)
            finally:
                self.job_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_job(self, job: Job):
        """
        Execute a single job.

        Any exception is logged and counted; the worker keeps running.
        """
        self.state = WorkerState.BUSY
        self._current_job = job
        start_time = time.time()

        logger.debug(f"Worker {self.worker_id} got job {job.id}; executing")

        try:
            job.run()

            elapsed = time.time() - start_time
            logger.debug(f"Worker {self.worker_id} completed job {job.id} in {elapsed:.3f}s")
            self.jobs_completed += 1

        except Exception as e:
            elapsed = time.time() - start_time
            logger.exception(
                f"Worker {self.worker_id} job {job.id} failed after {elapsed:.3f}s: {e}"
            )
            self.jobs_failed += 1

        finally:
            # Always reset state, even if the job failed
            self.state = WorkerState.IDLE
            self._current_job = None


class ThreadPool:
    """
    Fixed-size thread pool.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      ThreadPool Usage                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   pool = ThreadPool(4)              # workers start immediately     │
    │                                                                      │
    │   pool.submit(handle_connection, conn)                               │
    │   pool.submit(print, "hello", end="\\n")                             │
    │                                                                      │
    │   print(pool.stats)                 # {"workers": {...}, ...}       │
    │                                                                      │
    │   pool.shutdown()                   # drains the queue, joins all   │
    │                                                                      │
    │   with ThreadPool(2) as pool:       # shutdown() on exit            │
    │       pool.submit(job)                                               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Args:
        size: Number of worker threads. Must be a positive integer.

    Raises:
        PoolConfigurationError: If size is not a positive integer.
    """

    def __init__(self, size: int):
        if isinstance(size, bool) or not isinstance(size, int) or size < 1:
            raise PoolConfigurationError(f"Pool size must be a positive integer, got {size!r}")

        self.size = size

        # Unbounded: submit() never waits for space
        self._job_queue: queue.Queue[Optional[Job]] = queue.Queue()

        self._workers: list[Worker] = []
        # Guards _closed together with queue puts (see shutdown())
        self._lock = threading.Lock()
        self._closed = False
        self._stopped = threading.Event()

        logger.info(f"Starting thread pool with {size} workers")
        for worker_id in range(size):
            worker = Worker(self._job_queue, worker_id)
            self._workers.append(worker)
            worker.start()

    @property
    def is_shutdown(self) -> bool:
        """True once shutdown() has been called."""
        return self._closed

    def submit(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Job:
        """
        Queue func(*args, **kwargs) for execution by a worker.

        Returns:
            The queued Job.

        Raises:
            PoolMisuseError: If shutdown has begun.
        """
        job = Job(func=func, args=args, kwargs=kwargs)

        with self._lock:
            if self._closed:
                raise PoolMisuseError("Cannot submit jobs after thread pool shutdown")
            self._job_queue.put(job)

        return job

    def shutdown(self):
        """
        Stop the pool after every submitted job has run.

        Blocks until all workers have exited. Calling it again is a no-op
        that also waits for the first shutdown to finish.
        """
        with self._lock:
            if self._closed:
                already_closing = True
            else:
                already_closing = False
                self._closed = True
                logger.info("Shutting down thread pool...")

                # ─────────────────────────────────────────────────────────
                # SEND STOP MARKERS
                # ─────────────────────────────────────────────────────────
                # Queued behind every job that is already waiting.
                for _ in self._workers:
                    self._job_queue.put(None)

        if already_closing:
            self._stopped.wait()
            return

        # ─────────────────────────────────────────────────────────────────
        # WAIT FOR WORKERS TO EXIT
        # ─────────────────────────────────────────────────────────────────
        for worker in self._workers:
            worker.join()

        self._stopped.set()
        logger.info("Thread pool shutdown complete")

    def __enter__(self) -> "ThreadPool":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
        return False

    # =========================================================================
    # MONITORING: Check pool status
    # =========================================================================

    @property
    def active_workers(self) -> int:
        """Get count of active (non-stopped) workers."""
        return sum(1 for w in self._workers if w.state != WorkerState.STOPPED)

    @property
    def busy_workers(self) -> int:
        """Get count of busy workers."""
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def queue_size(self) -> int:
        """Get current job queue size (stop markers included)."""
        return self._job_queue.qsize()

    @property
    def stats(self) -> dict:
        """
        Get thread pool statistics.

        Returns a dict with worker and job counts.
        """
        return {
            "workers": {
                "total": len(self._workers),
                "active": self.active_workers,
                "busy": self.busy_workers,
            },
            "jobs": {
                "queued": self.queue_size,
                "completed": sum(w.jobs_completed for w in self._workers),
                "failed": sum(w.jobs_failed for w in self._workers),
            },
        }
