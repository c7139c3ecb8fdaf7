"""Bounded worker pool for per-package fetch tasks.

Tasks are independent: each one works on its own vendor subdirectory, so
the pool needs no locking beyond what :mod:`concurrent.futures` provides.
:meth:`FetchScheduler.join` is the barrier callers use before reading the
aggregated results.

Typical usage::

    with FetchScheduler() as scheduler:
        for entry in manifest.git:
            scheduler.submit(entry.import_path, prepare, entry)
        outcomes = scheduler.join()
"""

from __future__ import annotations

import os
import logging
from dataclasses import dataclass
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Generic, List, Optional, Tuple, TypeVar

from rubigo.constants import MIN_WORKERS
from rubigo.utils.logger import get_logger

__all__ = ["FetchScheduler", "TaskOutcome", "worker_count"]

T = TypeVar("T")


def worker_count(max_workers: Optional[int] = None) -> int:
    """Return the pool size: ``max_workers`` or the CPU count, never below 2."""
    requested = max_workers if max_workers else (os.cpu_count() or 1)
    return max(requested, MIN_WORKERS)


@dataclass
class TaskOutcome(Generic[T]):
    """Result of one task: either ``result`` or ``error`` is set."""

    key: str
    result: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FetchScheduler:
    """Fixed-size thread pool with a join barrier.

    Args:
        max_workers: Requested pool size; ``None`` uses the CPU count. The
            pool never has fewer than two workers.
        logger: Logger for progress output; defaults to the module logger.
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.workers = worker_count(max_workers)
        self.logger = logger or get_logger("core.scheduler")
        self._executor = ThreadPoolExecutor(
            max_workers=self.workers,
            thread_name_prefix="rubigo-fetch",
        )
        self._pending: List[Tuple[str, Future]] = []

    def __enter__(self) -> "FetchScheduler":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.shutdown()

    def submit(self, key: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Future:
        """Schedule ``fn(*args, **kwargs)`` under ``key``."""
        future = self._executor.submit(fn, *args, **kwargs)
        self._pending.append((key, future))
        return future

    def join(self) -> List[TaskOutcome]:
        """Wait for every submitted task and return outcomes in submission order.

        Exceptions raised by tasks are captured in :attr:`TaskOutcome.error`;
        one failing task never prevents the others from being collected.
        """
        pending, self._pending = self._pending, []
        wait([future for _, future in pending])

        outcomes: List[TaskOutcome] = []
        for key, future in pending:
            error = future.exception()
            if error is not None:
                self.logger.debug("Task %s failed: %s", key, error)
                outcomes.append(TaskOutcome(key, error=error))
            else:
                outcomes.append(TaskOutcome(key, result=future.result()))
        return outcomes

    def shutdown(self) -> None:
        """Wait for running tasks and release the worker threads."""
        self._executor.shutdown(wait=True)
