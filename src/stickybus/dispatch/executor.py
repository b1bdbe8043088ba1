"""Unbounded background executor with cached-thread-pool semantics.

A new daemon worker is started whenever queued units outnumber idle workers,
so submission never blocks and never waits for a busy worker. Idle workers
retire after ``keepalive_seconds`` without work.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from itertools import count
import logging
from threading import Condition, Thread, current_thread
from time import monotonic
from typing import Any

from stickybus.errors import ExecutorShutdownError
from stickybus.observability.logging import safe_repr
from stickybus.observability.metrics import EXECUTOR_TASK_FAILURES

logger = logging.getLogger(__name__)

DEFAULT_KEEPALIVE_SECONDS = 60.0
DEFAULT_THREAD_NAME_PREFIX = "EventBus#BackgroundThreadPool"

_Task = tuple[Callable[..., Any], tuple[Any, ...], dict[str, Any]]


class BackgroundExecutor:
    """Cached pool of daemon worker threads."""

    def __init__(
        self,
        keepalive_seconds: float = DEFAULT_KEEPALIVE_SECONDS,
        thread_name_prefix: str = DEFAULT_THREAD_NAME_PREFIX,
    ) -> None:
        if keepalive_seconds <= 0:
            raise ValueError("keepalive_seconds must be positive")
        self.keepalive_seconds = keepalive_seconds
        self.thread_name_prefix = thread_name_prefix
        self._tasks: deque[_Task] = deque()
        self._cond = Condition()
        self._workers: set[Thread] = set()
        self._idle = 0
        self._shutdown = False
        self._counter = count()

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> None:
        """Queue ``fn`` for execution on a worker thread and return immediately."""
        with self._cond:
            if self._shutdown:
                raise ExecutorShutdownError(self.thread_name_prefix)
            self._tasks.append((fn, args, kwargs))
            if len(self._tasks) <= self._idle:
                self._cond.notify()
                return
            thread = Thread(
                target=self._run,
                name=f"{self.thread_name_prefix}({next(self._counter)})",
                daemon=True,
            )
            self._workers.add(thread)
        thread.start()
        logger.debug("executor.worker_started", extra={"extra": {"thread": thread.name}})

    def shutdown(self, wait: bool = True, timeout: float | None = None) -> None:
        """Stop accepting work; queued units still run before workers exit."""
        with self._cond:
            self._shutdown = True
            self._cond.notify_all()
            workers = list(self._workers)
        if wait:
            deadline = None if timeout is None else monotonic() + timeout
            for worker in workers:
                if worker is current_thread():
                    continue
                remaining = None if deadline is None else max(0.0, deadline - monotonic())
                worker.join(remaining)

    @property
    def is_shutdown(self) -> bool:
        with self._cond:
            return self._shutdown

    @property
    def worker_count(self) -> int:
        with self._cond:
            return len(self._workers)

    @property
    def idle_count(self) -> int:
        with self._cond:
            return self._idle

    @property
    def pending_count(self) -> int:
        with self._cond:
            return len(self._tasks)

    def _run(self) -> None:
        while True:
            with self._cond:
                self._idle += 1
                deadline = monotonic() + self.keepalive_seconds
                while not self._tasks and not self._shutdown:
                    remaining = deadline - monotonic()
                    if remaining <= 0:
                        break
                    self._cond.wait(remaining)
                self._idle -= 1
                if not self._tasks:
                    self._workers.discard(current_thread())
                    logger.debug(
                        "executor.worker_retired",
                        extra={"extra": {"thread": current_thread().name}},
                    )
                    return
                fn, args, kwargs = self._tasks.popleft()
            self._execute(fn, args, kwargs)

    @staticmethod
    def _execute(fn: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        try:
            fn(*args, **kwargs)
        except Exception:  # noqa: BLE001
            EXECUTOR_TASK_FAILURES.inc()
            logger.exception(
                "executor.task_failed",
                extra={"extra": {"task": getattr(fn, "__qualname__", None) or safe_repr(fn)}},
            )
