from __future__ import annotations

from concurrent.futures import Executor, Future
from typing import Any, Callable, Iterator

import pytest

from wikidesc.storage import WriterThread


class InlineExecutor(Executor):
    """Runs submitted work on the calling thread so tests stay deterministic."""

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future[Any]:
        future: Future[Any] = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as exc:  # pragma: no cover - surfaced through the future
            future.set_exception(exc)
        return future


@pytest.fixture
def writer() -> Iterator[WriterThread]:
    thread = WriterThread(name="test-writer")
    yield thread
    thread.shutdown()


@pytest.fixture
def inline_executor() -> InlineExecutor:
    return InlineExecutor()
