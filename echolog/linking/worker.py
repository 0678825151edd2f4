"""Background execution of best-effort tasks."""

import threading
from dataclasses import dataclass, field
from queue import Queue
from typing import Any, Callable

from loguru import logger


@dataclass
class WorkerStats:
    submitted: int = 0
    completed: int = 0
    failed: int = 0
    last_error: str | None = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_submit(self) -> None:
        with self.lock:
            self.submitted += 1

    def record_success(self) -> None:
        with self.lock:
            self.completed += 1

    def record_failure(self, error: str) -> None:
        with self.lock:
            self.failed += 1
            self.last_error = error


@dataclass
class Task:
    name: str
    fn: Callable[..., Any]
    args: tuple = ()


_STOP = object()


class BackgroundTaskWorker:
    """Runs submitted tasks one at a time on a dedicated daemon thread.

    Submitting never blocks on the task and never raises on its behalf. A task runs
    exactly once: if it fails, the error is logged and counted, and it is not retried.
    Tasks run in submission order, so two tasks touching the same memo never overlap.
    """

    def __init__(self, name: str = "link-worker") -> None:
        self.name = name
        self.stats = WorkerStats()
        self._queue: Queue = Queue()
        self._thread: threading.Thread | None = None
        self._start_lock = threading.Lock()
        self._stopping = False

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the worker thread if it is not already running.

        If an earlier ``stop`` timed out, the old thread is waited for first, so that
        there is never more than one thread consuming the queue.
        """
        with self._start_lock:
            if self.is_running:
                if not self._stopping:
                    return
                self._thread.join()
            self._stopping = False
            self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
            self._thread.start()
            logger.info(f"Background worker '{self.name}' started")

    def submit(self, name: str, fn: Callable[..., Any], *args: Any) -> None:
        """Queue a task for execution and return immediately."""
        self.start()
        self.stats.record_submit()
        self._queue.put(Task(name=name, fn=fn, args=args))
        logger.debug(f"Queued task {name}")

    def join(self) -> None:
        """Block until every submitted task has finished."""
        self._queue.join()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Finish the queued tasks and stop the worker thread.

        If the thread is still busy after ``timeout`` it keeps running until it has
        drained the queue, and the worker keeps track of it.
        """
        with self._start_lock:
            thread = self._thread
            if thread is None:
                return
            if not self._stopping:
                self._stopping = True
                self._queue.put(_STOP)
            thread.join(timeout)
            if thread.is_alive():
                logger.warning(
                    f"Background worker '{self.name}' did not stop within {timeout}s, "
                    "still draining its queue"
                )
                return
            self._thread = None
            self._stopping = False
        logger.info(f"Background worker '{self.name}' stopped")

    def _run(self) -> None:
        while True:
            task = self._queue.get()
            try:
                if task is _STOP:
                    return
                self._execute(task)
            finally:
                self._queue.task_done()

    def _execute(self, task: Task) -> None:
        try:
            task.fn(*task.args)
        except Exception as e:
            self.stats.record_failure(f"{task.name}: {e}")
            logger.exception(f"Background task {task.name} failed, not retrying")
        else:
            self.stats.record_success()
