#!/usr/bin/env python
"""
Outbound request throttle for the Spotify Web API.

A FIFO queue drained by a single worker thread: at most one unit of work is
in flight, and the worker pauses for a fixed delay after every unit before
picking up the next one. Each unit runs under the rate-limit backoff policy.
Callers get a ``concurrent.futures.Future`` back.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from queue import Empty, Queue
from typing import Any, Callable, Dict, Optional, Tuple

from mixmaker.observability.metrics import observe_queue_wait_time, record_throttled_call, update_queue_gauge
from .backoff import BackoffPolicy, retry_with_backoff

logger = logging.getLogger(__name__)


@dataclass
class QueuedTask:
    fn: Callable[..., Any]
    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)
    future: Future = field(default_factory=Future)
    enqueued_at: float = field(default_factory=time.monotonic)


class RequestThrottle:
    def __init__(
        self,
        delay_seconds: float = 0.05,
        policy: Optional[BackoffPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        idle_timeout: float = 0.5,
        name: str = "spotify-throttle",
    ):
        self.delay_seconds = delay_seconds
        self.policy = policy or BackoffPolicy()
        self.name = name
        self._sleep = sleep
        self._idle_timeout = idle_timeout
        self._queue: Queue[QueuedTask] = Queue()
        self._lock = threading.Lock()
        self._worker: Optional[threading.Thread] = None

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """Queue ``fn(*args, **kwargs)``; the returned future settles once it has run."""
        task = QueuedTask(fn=fn, args=args, kwargs=kwargs)
        self._queue.put(task)
        update_queue_gauge(self._queue.qsize())
        self._ensure_worker()
        return task.future

    def call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Blocking variant of :meth:`submit`."""
        return self.submit(fn, *args, **kwargs).result()

    def qsize(self) -> int:
        return self._queue.qsize()

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._worker is not None

    def _ensure_worker(self) -> None:
        with self._lock:
            if self._worker is not None:
                return
            worker = threading.Thread(target=self._drain, name=self.name, daemon=True)
            self._worker = worker
            worker.start()

    def _drain(self) -> None:
        while True:
            try:
                task = self._queue.get(timeout=self._idle_timeout)
            except Empty:
                # Exit only under the lock so a concurrent submit either sees
                # this worker still registered or starts a fresh one.
                with self._lock:
                    if self._queue.empty():
                        self._worker = None
                        return
                continue

            try:
                self._run(task)
            finally:
                self._queue.task_done()
                update_queue_gauge(self._queue.qsize())
                if self.delay_seconds > 0:
                    self._sleep(self.delay_seconds)

    def _run(self, task: QueuedTask) -> None:
        if not task.future.set_running_or_notify_cancel():
            return
        observe_queue_wait_time(time.monotonic() - task.enqueued_at)
        try:
            result = retry_with_backoff(task.fn, *task.args, policy=self.policy, sleep=self._sleep, **task.kwargs)
        except BaseException as exc:
            logger.debug("Throttled call %r failed: %s", getattr(task.fn, "__name__", task.fn), exc)
            record_throttled_call(False)
            task.future.set_exception(exc)
        else:
            record_throttled_call(True)
            task.future.set_result(result)


__all__ = ["QueuedTask", "RequestThrottle"]
