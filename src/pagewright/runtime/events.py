"""Worker pool for fire-and-forget notifications (screenshots, page events).

Slow reporting I/O runs here so it never holds up the thread that is waiting
for a page to become ready.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any

from ..config.settings import settings

logger = logging.getLogger(__name__)


class NotificationPool:
    def __init__(self, max_workers: int = 4, drain_timeout: float = 120.0) -> None:
        self.max_workers = max_workers
        self.drain_timeout = drain_timeout
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="pagewright-notify"
        )
        self._pending: set[Future] = set()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future | None:
        """Queue ``fn(*args)``. Returns None once the pool has been drained."""
        with self._lock:
            if self._closed:
                logger.warning("Notification pool is shut down; dropping %s", _name(fn))
                return None
            future = self._executor.submit(_run, fn, *args)
            self._pending.add(future)
        future.add_done_callback(self._discard)
        return future

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def drain(self, timeout: float | None = None) -> bool:
        """Stop accepting work and wait for in-flight notifications.

        Returns False (and logs) if the backlog did not finish in time.
        """
        timeout = self.drain_timeout if timeout is None else timeout
        with self._lock:
            self._closed = True
            pending = set(self._pending)
        self._executor.shutdown(wait=False)

        if pending:
            logger.info("Processing remaining notification backlog (%d)...", len(pending))
        _, not_done = wait(pending, timeout=timeout)
        if not_done:
            logger.error(
                "Shutdown timed out. %d notification(s) might not have been sent.",
                len(not_done),
            )
            return False
        logger.info("Finished processing backlog.")
        return True


def _name(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", repr(fn))


def _run(fn: Callable[..., Any], *args: Any) -> Any:
    try:
        return fn(*args)
    except Exception as e:  # noqa: BLE001 - notifications are best-effort
        logger.warning("Notification %s failed: %s", _name(fn), e)
        logger.debug("Notification failure details", exc_info=True)
        return None


_POOL_LOCK = threading.Lock()
_POOL: NotificationPool | None = None


def get_pool() -> NotificationPool:
    """Process-wide pool shared by all capture observers; recreated after a drain."""
    global _POOL
    with _POOL_LOCK:
        if _POOL is None or _POOL.closed:
            _POOL = NotificationPool(settings.capture_pool_size, settings.capture_drain_timeout)
        return _POOL
