"""The single thread allowed to touch persisted state."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, TypeVar

from ..utils.logging import get_logger

LOGGER = get_logger(__name__)

T = TypeVar("T")


class WriterThread:
    """Serializes callables onto one dedicated worker thread.

    Persisted state (policy set, edit flag) and completion callbacks are only
    ever touched from this thread. ``run_sync`` lets other threads marshal a
    call and wait for it; calls already on the writer thread run inline so
    nested use never deadlocks.
    """

    def __init__(self, name: str = "wikidesc-writer") -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._ident: int | None = None
        self._executor.submit(self._capture_ident).result()

    def _capture_ident(self) -> None:
        self._ident = threading.get_ident()

    def is_current(self) -> bool:
        return threading.get_ident() == self._ident

    def run_sync(self, fn: Callable[..., T], *args: Any) -> T:
        if self.is_current():
            return fn(*args)
        return self._executor.submit(fn, *args).result()

    def dispatch(self, fn: Callable[..., Any], *args: Any) -> Future[Any]:
        future = self._executor.submit(fn, *args)
        future.add_done_callback(_log_failure)
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "WriterThread":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


def _log_failure(future: Future[Any]) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        LOGGER.error(
            "Dispatched writer task failed: %s",
            exc,
            exc_info=(type(exc), exc, exc.__traceback__),
            extra={"event": "writer.task_failed"},
        )


__all__ = ["WriterThread"]
