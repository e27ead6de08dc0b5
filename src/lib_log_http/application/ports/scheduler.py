"""Port describing the asynchronous execution facility used for detached work.

Purpose
-------
Let the dispatcher defer the ``logged`` signal and launch fire-and-forget
deliveries without knowing whether an event loop thread, a host loop, or a
test double runs them.

Contents
--------
* :class:`SchedulerPort` – runtime-checkable protocol with ``call_soon``,
  ``spawn`` and ``close``.

``call_soon`` and ``spawn`` raise :class:`RuntimeError` once the scheduler
has been closed.
"""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from concurrent.futures import Future
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SchedulerPort(Protocol):
    """Run callbacks and coroutines outside the caller's stack."""

    def call_soon(self, callback: Callable[..., None], *args: Any) -> None:
        """Invoke ``callback(*args)`` on a later scheduling tick."""

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> Future[Any]:
        """Start ``coro`` as a detached task and return a handle to it."""

    def close(
        self,
        timeout: float | None = None,
        *,
        finalizer: Callable[[], Coroutine[Any, Any, Any]] | None = None,
    ) -> None:
        """Wait up to ``timeout`` for spawned work, cancel the rest, run ``finalizer``, and stop."""


__all__ = ["SchedulerPort"]
