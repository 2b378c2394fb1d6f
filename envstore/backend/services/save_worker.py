"""Background persistence worker.

Runs save tasks off the caller's thread and hands back a Future as the
result channel. Callers that do not care about the outcome drop the Future.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Protocol


class SaveErrorCallback(Protocol):
    """Callback protocol for background save failures."""

    def __call__(self, error: Exception) -> None:
        """Handle a failed background save.

        Args:
            error: The exception raised by the save task.
        """
        ...


class SaveWorker:
    """Single-threaded executor for save tasks.

    Tasks run one at a time in submission order. A failed task never
    propagates anywhere unless its Future is inspected or ``on_error`` is set.
    """

    def __init__(self, *, on_error: SaveErrorCallback | None = None) -> None:
        """Initialize the worker. The thread is started on first submit.

        Args:
            on_error: Optional hook invoked with the exception of any failed
                task. Without it failures are discarded.
        """
        self._on_error = on_error
        self._executor: ThreadPoolExecutor | None = None
        self._lock = threading.Lock()

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="envstore-save"
                )
            return self._executor

    def submit(self, task: Callable[[], object]) -> Future:
        """Queue a task.

        Args:
            task: Callable to run on the worker thread.

        Returns:
            Future resolving to the task's return value or exception.
        """
        future = self._get_executor().submit(task)
        future.add_done_callback(self._report)
        return future

    def dispatch(self, task: Callable[[], object]) -> None:
        """Queue a task and discard its Future."""
        self.submit(task)

    def _report(self, future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is None:
            return
        logging.debug("Background save failed: %s", error)
        if self._on_error is not None:
            try:
                self._on_error(error)
            except Exception:
                logging.exception("Save error callback raised")

    def shutdown(self, *, wait: bool = True) -> None:
        """Stop the worker thread.

        Args:
            wait: Block until queued tasks have finished.
        """
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)
