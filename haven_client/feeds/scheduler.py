"""Scheduling of background work and state-owning callbacks.

Feeds mutate their state only inside callbacks delivered through
``call_soon`` or ``call_later``. I/O runs through ``run_in_background``.
"""

import queue
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Protocol

import structlog


logger = structlog.get_logger()

Callback = Callable[[], None]


class Cancellable(Protocol):
    """Handle to a deferred callback."""

    def cancel(self) -> None:
        """Prevent the callback from running if it has not yet run."""
        ...


class Scheduler(Protocol):
    """Executes background work and marshals callbacks onto one context."""

    def run_in_background(self, work: Callback) -> None:
        """Run blocking work off the state-owning context."""
        ...

    def call_soon(self, callback: Callback) -> None:
        """Run a callback on the state-owning context."""
        ...

    def call_later(self, delay_seconds: float, callback: Callback) -> Cancellable:
        """Run a callback on the state-owning context after a delay."""
        ...


class TimerHandle:
    """Cancellable handle around a ``threading.Timer``."""

    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        """Whether ``cancel`` has been called."""
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Cancel the timer and suppress an already-queued callback."""
        self._cancelled.set()
        self._timer.cancel()


class ThreadedScheduler:
    """Scheduler backed by a thread pool and an owner-drained queue.

    Background work runs on a ``ThreadPoolExecutor``. Callbacks are queued
    and run only when the owning thread calls ``run_pending``.
    """

    def __init__(self, max_workers: int = 4) -> None:
        """Initialize the scheduler.

        Args:
            max_workers: Size of the background thread pool.
        """
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="haven-io"
        )
        self._callbacks: queue.Queue[Callback] = queue.Queue()
        self._log = logger.bind(component="scheduler")

    def run_in_background(self, work: Callback) -> None:
        future = self._executor.submit(work)
        future.add_done_callback(self._report_failure)

    def call_soon(self, callback: Callback) -> None:
        self._callbacks.put(callback)

    def call_later(self, delay_seconds: float, callback: Callback) -> TimerHandle:
        handle: TimerHandle

        def enqueue() -> None:
            self.call_soon(guarded)

        def guarded() -> None:
            if not handle.cancelled:
                callback()

        timer = threading.Timer(delay_seconds, enqueue)
        timer.daemon = True
        handle = TimerHandle(timer)
        timer.start()
        return handle

    def run_pending(self, timeout: float | None = None) -> int:
        """Run queued callbacks on the calling thread.

        Args:
            timeout: Seconds to wait for the first callback; None runs only
                what is already queued.

        Returns:
            Number of callbacks run.
        """
        ran = 0
        if timeout is not None:
            try:
                callback = self._callbacks.get(timeout=timeout)
            except queue.Empty:
                return 0
            callback()
            ran += 1
        while True:
            try:
                callback = self._callbacks.get_nowait()
            except queue.Empty:
                return ran
            callback()
            ran += 1

    def shutdown(self) -> None:
        """Stop accepting background work and wait for running work."""
        self._executor.shutdown(wait=True)

    def _report_failure(self, future: "Future[None]") -> None:
        error = future.exception()
        if error is not None:
            self._log.error(
                "background_work_failed",
                error=str(error),
                error_type=type(error).__name__,
            )
