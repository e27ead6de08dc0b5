"""Dispatcher turning log records into fire-and-forget HTTP deliveries.

Purpose
-------
Accept one record per log call, build the outgoing request synchronously,
and hand it to the HTTP port as a detached task so the logging call site
never waits for the network.

Contents
--------
* :data:`DiagnosticHook` / :data:`FailureHook` – optional observation hooks.
* :class:`LogDispatcher` – the transport core with ``dispatch``, listener
  registration and ``close``.

System Role
-----------
Application layer. It depends only on :class:`HttpTransportPort` and
:class:`SchedulerPort`; concrete adapters are wired by
:func:`lib_log_http.runtime.create_dispatcher`.

Delivery is best effort: the request is attempted once, success and failure
are both dropped at this boundary, and nothing is retried, buffered or
surfaced to the host logging pipeline. The hooks exist for diagnostics only.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from lib_log_http.application.ports import HttpTransportPort, SchedulerPort
from lib_log_http.application.use_cases import create_build_request
from lib_log_http.domain import LogRecord, OutgoingRequest, TransportConfig

LOGGER = logging.getLogger(__name__)

DiagnosticHook = Callable[[str, dict[str, Any]], None] | None
FailureHook = Callable[[OutgoingRequest, BaseException], None] | None
Listener = Callable[[LogRecord], None]

LOGGED_EVENT = "logged"
_EVENTS = frozenset({LOGGED_EVENT})


class LogDispatcher:
    """Forward each log record as one HTTP request without blocking the caller.

    Examples
    --------
    >>> import asyncio
    >>> from concurrent.futures import Future
    >>> class InlineScheduler:
    ...     def call_soon(self, callback, *args):
    ...         callback(*args)
    ...     def spawn(self, coro):
    ...         future = Future()
    ...         future.set_result(asyncio.run(coro))
    ...         return future
    ...     def close(self, timeout=None, *, finalizer=None):
    ...         return None
    >>> class RecordingTransport:
    ...     def __init__(self):
    ...         self.sent = []
    ...     async def send(self, request):
    ...         self.sent.append(request)
    ...     async def aclose(self):
    ...         return None
    >>> transport = RecordingTransport()
    >>> dispatcher = LogDispatcher(
    ...     TransportConfig(base_url="http://h", path="log", auth="XYZ", auth_type="apikey"),
    ...     transport=transport,
    ...     scheduler=InlineScheduler(),
    ... )
    >>> dispatcher.dispatch({"level": "info", "message": "hi"})
    >>> transport.sent[0].url, transport.sent[0].headers["authorization"]
    ('http://h/log', 'ApiKey XYZ')
    """

    def __init__(
        self,
        config: TransportConfig,
        *,
        transport: HttpTransportPort,
        scheduler: SchedulerPort,
        diagnostic: DiagnosticHook = None,
        on_failure: FailureHook = None,
        close_timeout: float | None = 5.0,
    ) -> None:
        """Bind the configuration and collaborators.

        Parameters
        ----------
        config:
            Frozen :class:`TransportConfig`; never modified afterwards.
        transport:
            HTTP collaborator performing the network call.
        scheduler:
            Execution facility running the deferred ``logged`` signal and the
            detached delivery tasks.
        diagnostic:
            Optional ``(name, payload)`` callback receiving ``http_delivered``,
            ``http_delivery_failed`` and ``dispatcher_closed`` notices.
        on_failure:
            Optional callback receiving the failed request and the exception.
        close_timeout:
            Default drain deadline (seconds) for :meth:`close`.
        """
        self._config = config
        self._transport = transport
        self._scheduler = scheduler
        self._diagnostic = diagnostic
        self._on_failure = on_failure
        self._close_timeout = close_timeout
        self._build_request = create_build_request(config)
        self._listeners: dict[str, tuple[Listener, ...]] = {LOGGED_EVENT: ()}
        self._listeners_lock = threading.Lock()
        self._closed = False

    @property
    def config(self) -> TransportConfig:
        """Return the read-only configuration."""

        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    def add_listener(self, event: str, listener: Listener) -> None:
        """Register ``listener`` for ``event`` (currently only ``"logged"``)."""

        self._check_event(event)
        with self._listeners_lock:
            self._listeners[event] = self._listeners[event] + (listener,)

    def remove_listener(self, event: str, listener: Listener) -> None:
        """Unregister ``listener``; unknown listeners are ignored."""

        self._check_event(event)
        with self._listeners_lock:
            self._listeners[event] = tuple(item for item in self._listeners[event] if item != listener)

    def dispatch(self, record: LogRecord, done: Callable[[], None] | None = None) -> None:
        """Hand ``record`` to the HTTP port and acknowledge it.

        The ``logged`` event is deferred to the scheduler, the request is
        built in the caller's thread, the delivery runs as a detached task,
        and ``done`` is invoked exactly once before returning, whatever the
        network outcome. Once the dispatcher is closed or the scheduler
        refuses work, ``logged`` fires synchronously and nothing is sent.
        """

        try:
            if self._closed:
                self._emit_diagnostic("dispatcher_closed", {"url": self._config.base_url})
                self._emit_logged(record)
                return
            try:
                self._scheduler.call_soon(self._emit_logged, record)
            except RuntimeError as exc:
                self._emit_diagnostic("scheduler_unavailable", {"exception": repr(exc)})
                self._emit_logged(record)
                return
            if not self._config.enabled:
                return
            request = self._build_request(record)
            self._launch(request)
        finally:
            if done is not None:
                done()

    def close(self, timeout: float | None = None) -> None:
        """Drain in-flight deliveries, cancel stragglers, and release the transport.

        ``timeout`` overrides the ``close_timeout`` given at construction.
        Repeated calls are no-ops.
        """

        if self._closed:
            return
        self._closed = True
        effective_timeout = timeout if timeout is not None else self._close_timeout
        LOGGER.debug("Closing HTTP log dispatcher for %s", self._config.base_url)
        self._scheduler.close(effective_timeout, finalizer=self._transport.aclose)

    def __enter__(self) -> "LogDispatcher":
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.close()

    def _launch(self, request: OutgoingRequest) -> None:
        """Spawn the delivery task; scheduling failures count as delivery failures."""

        delivery = self._deliver(request)
        try:
            self._scheduler.spawn(delivery)
        except RuntimeError as exc:
            delivery.close()
            self._report_failure(request, exc)

    async def _deliver(self, request: OutgoingRequest) -> Any:
        """Await the HTTP port, reporting but never raising delivery errors."""

        try:
            response = await self._transport.send(request)
        except Exception as exc:  # noqa: BLE001
            self._report_failure(request, exc)
            return None
        self._emit_diagnostic(
            "http_delivered",
            {
                "method": request.method.value,
                "url": request.url,
                "status": getattr(response, "status_code", None),
            },
        )
        return response

    def _report_failure(self, request: OutgoingRequest, exc: BaseException) -> None:
        self._emit_diagnostic(
            "http_delivery_failed",
            {"method": request.method.value, "url": request.url, "exception": repr(exc)},
        )
        if self._on_failure is None:
            return
        try:
            self._on_failure(request, exc)
        except Exception as hook_exc:  # noqa: BLE001
            LOGGER.error("Delivery failure hook raised; continuing", exc_info=hook_exc)

    def _emit_logged(self, record: LogRecord) -> None:
        for listener in self._listeners[LOGGED_EVENT]:
            try:
                listener(record)
            except Exception as exc:  # noqa: BLE001
                LOGGER.error("'logged' listener raised; continuing", exc_info=exc)

    def _emit_diagnostic(self, name: str, payload: dict[str, Any]) -> None:
        """Invoke the diagnostic hook while guarding against callback failures."""

        if self._diagnostic is None:
            return
        try:
            self._diagnostic(name, payload)
        except Exception as diagnostic_exc:  # noqa: BLE001
            LOGGER.error("Diagnostic hook raised while reporting %s", name, exc_info=diagnostic_exc)

    @staticmethod
    def _check_event(event: str) -> None:
        if event not in _EVENTS:
            raise ValueError(f"Unknown dispatcher event: {event!r}")


__all__ = ["DiagnosticHook", "FailureHook", "LOGGED_EVENT", "Listener", "LogDispatcher"]
