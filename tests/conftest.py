from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from concurrent.futures import Future
from typing import Any

import pytest

from lib_log_http.domain.request import OutgoingRequest


class ManualScheduler:
    """Scheduler double that queues work until :meth:`run_pending` is called."""

    def __init__(self) -> None:
        self.callbacks: list[tuple[Callable[..., None], tuple[Any, ...]]] = []
        self.tasks: list[tuple[Coroutine[Any, Any, Any], Future[Any]]] = []
        self.closed = False
        self.close_calls: list[float | None] = []
        self.finalized = False

    def call_soon(self, callback: Callable[..., None], *args: Any) -> None:
        if self.closed:
            raise RuntimeError("scheduler closed")
        self.callbacks.append((callback, args))

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> Future[Any]:
        if self.closed:
            raise RuntimeError("scheduler closed")
        future: Future[Any] = Future()
        self.tasks.append((coro, future))
        return future

    def close(self, timeout: float | None = None, *, finalizer: Callable[[], Coroutine[Any, Any, Any]] | None = None) -> None:
        self.close_calls.append(timeout)
        self.run_pending()
        if finalizer is not None:
            asyncio.run(finalizer())
            self.finalized = True
        self.closed = True

    def run_pending(self) -> None:
        callbacks, self.callbacks = self.callbacks, []
        for callback, args in callbacks:
            callback(*args)
        tasks, self.tasks = self.tasks, []
        for coro, future in tasks:
            future.set_result(asyncio.run(coro))


class RecordingTransport:
    """HTTP port double collecting requests; optionally raising ``error``."""

    def __init__(self, error: BaseException | None = None) -> None:
        self.sent: list[OutgoingRequest] = []
        self.error = error
        self.closed = False

    async def send(self, request: OutgoingRequest) -> Any:
        self.sent.append(request)
        if self.error is not None:
            raise self.error
        return None

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def failing_transport() -> RecordingTransport:
    return RecordingTransport(error=ConnectionError("connection refused"))


@pytest.fixture
def new_scheduler() -> Callable[[], ManualScheduler]:
    return ManualScheduler


@pytest.fixture
def new_transport() -> Callable[..., RecordingTransport]:
    return RecordingTransport
