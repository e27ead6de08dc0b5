"""Background event-loop adapter running detached deliveries.

Purpose
-------
Give synchronous logging call sites an asynchronous execution facility: a
daemon thread owns an asyncio loop, callbacks are deferred onto it, and
delivery coroutines run there as detached tasks.

Contents
--------
* :class:`EventLoopThread` – concrete :class:`SchedulerPort`.

System Role
-----------
Default scheduler wired by :func:`lib_log_http.runtime.create_dispatcher`.
Shutdown drains pending tasks up to a deadline, cancels the remainder, runs
an optional finalizer (closing the HTTP client), then stops the loop.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from collections.abc import Callable, Coroutine
from typing import Any

from lib_log_http.application.ports.scheduler import SchedulerPort

LOGGER = logging.getLogger(__name__)

_DELIVERY_THREAD = threading.local()


def on_delivery_thread() -> bool:
    """Return ``True`` when called from an :class:`EventLoopThread` loop thread.

    Log records emitted while a delivery runs (``httpx`` request lines,
    hook failures) originate here; the logging handler drops them so a
    delivery never produces another delivery.

    Examples
    --------
    >>> on_delivery_thread()
    False
    """

    return getattr(_DELIVERY_THREAD, "active", False)


class EventLoopThread(SchedulerPort):
    """Run callbacks and coroutines on a dedicated asyncio loop thread.

    The thread starts lazily on the first ``call_soon``/``spawn`` call.

    Examples
    --------
    >>> async def answer():
    ...     return 42
    >>> loop_thread = EventLoopThread()
    >>> loop_thread.spawn(answer()).result(timeout=5)
    42
    >>> loop_thread.close()
    """

    def __init__(self, *, name: str = "lib_log_http-loop", stop_timeout: float | None = 5.0) -> None:
        """Create the loop; ``stop_timeout`` is the default drain deadline for :meth:`close`."""
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._lock = threading.Lock()
        self._pending: set[concurrent.futures.Future[Any]] = set()
        self._started = False
        self._closed = False
        self._stop_timeout = stop_timeout

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Return the number of spawned tasks that have not finished yet."""

        with self._lock:
            return len(self._pending)

    def call_soon(self, callback: Callable[..., None], *args: Any) -> None:
        """Schedule ``callback(*args)`` on the loop thread."""
        self._ensure_running()
        self._loop.call_soon_threadsafe(callback, *args)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> concurrent.futures.Future[Any]:
        """Run ``coro`` as a detached task and track it until completion."""
        self._ensure_running()
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def close(
        self,
        timeout: float | None = None,
        *,
        finalizer: Callable[[], Coroutine[Any, Any, Any]] | None = None,
    ) -> None:
        """Stop the loop after draining pending tasks.

        Parameters
        ----------
        timeout:
            Seconds to wait for pending tasks before cancelling them. ``None``
            falls back to ``stop_timeout``; when that is ``None`` as well the
            call waits indefinitely.
        finalizer:
            Optional coroutine factory awaited on the loop after the drain,
            typically the HTTP client's ``aclose``.
        """
        if threading.current_thread() is self._thread:
            raise RuntimeError("EventLoopThread.close() must not be called from the loop thread")

        with self._lock:
            if self._closed:
                return
            self._closed = True
            started = self._started
            pending = list(self._pending)

        if not started:
            # Nothing ever ran on the loop, so there is nothing to finalize.
            self._loop.close()
            return

        effective_timeout = timeout if timeout is not None else self._stop_timeout
        if pending:
            _done, not_done = concurrent.futures.wait(pending, timeout=effective_timeout)
            for future in not_done:
                future.cancel()
            if not_done:
                LOGGER.debug("Cancelled %d in-flight deliveries on shutdown", len(not_done))

        if finalizer is not None:
            self._run_finalizer(finalizer, effective_timeout)

        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(effective_timeout)

    def _run_finalizer(self, finalizer: Callable[[], Coroutine[Any, Any, Any]], timeout: float | None) -> None:
        future = asyncio.run_coroutine_threadsafe(finalizer(), self._loop)
        try:
            future.result(timeout=timeout)
        except Exception as exc:  # noqa: BLE001
            future.cancel()
            LOGGER.warning("Finalizer failed while closing the event loop thread", exc_info=exc)

    def _ensure_running(self) -> None:
        with self._lock:
            if self._closed:
                raise RuntimeError("EventLoopThread is closed")
            if not self._started:
                self._thread.start()
                self._started = True

    def _forget(self, future: concurrent.futures.Future[Any]) -> None:
        with self._lock:
            self._pending.discard(future)

    def _run(self) -> None:
        """Thread target: run the loop, then cancel leftovers and close it."""
        _DELIVERY_THREAD.active = True
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_forever()
        finally:
            leftovers = asyncio.all_tasks(self._loop)
            for task in leftovers:
                task.cancel()
            if leftovers:
                self._loop.run_until_complete(asyncio.gather(*leftovers, return_exceptions=True))
            self._loop.run_until_complete(self._loop.shutdown_asyncgens())
            self._loop.close()


__all__ = ["EventLoopThread", "on_delivery_thread"]
