"""Composition helpers wiring the dispatcher to its default adapters.

Purpose
-------
Give host applications two entry points, :func:`create_dispatcher` and
:func:`create_handler`, that assemble configuration, the ``httpx``
transport and the background event loop without importing inner layers.

System Role
-----------
Composition root: the only module that knows both the application layer and
the concrete adapters.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from lib_log_http.adapters import EventLoopThread, HttpLogHandler, HttpxTransport
from lib_log_http.adapters.httpx_transport import DEFAULT_TIMEOUT, JsonDefault
from lib_log_http.application.dispatcher import DiagnosticHook, FailureHook, LogDispatcher
from lib_log_http.application.ports import HttpTransportPort, SchedulerPort
from lib_log_http.config import coerce_level
from lib_log_http.domain import LogLevel, TransportConfig


def create_dispatcher(
    config: TransportConfig | None = None,
    *,
    transport: HttpTransportPort | None = None,
    scheduler: SchedulerPort | None = None,
    timeout: float | httpx.Timeout | None = DEFAULT_TIMEOUT,
    raise_for_status: bool = True,
    json_default: JsonDefault | None = None,
    diagnostic: DiagnosticHook = None,
    on_failure: FailureHook = None,
    close_timeout: float | None = 5.0,
    **options: Any,
) -> LogDispatcher:
    """Assemble a :class:`LogDispatcher`.

    Parameters
    ----------
    config:
        Ready-made configuration. When omitted, ``options`` (``url``,
        ``host``, ``path``, ``method``, ``auth``, ``auth_type``, ``headers``,
        ``body_addons``, ``enabled``) are passed to
        :meth:`TransportConfig.from_options`.
    transport, scheduler:
        Optional replacements for :class:`HttpxTransport` and
        :class:`EventLoopThread`.
    timeout, raise_for_status, json_default:
        Forwarded to the default :class:`HttpxTransport`.
    diagnostic, on_failure, close_timeout:
        Forwarded to :class:`LogDispatcher`.

    Examples
    --------
    >>> dispatcher = create_dispatcher(url="http://localhost:9", path="logs")
    >>> dispatcher.config.base_url, dispatcher.config.path
    ('http://localhost:9', 'logs')
    >>> dispatcher.close()
    """

    if config is None:
        config = TransportConfig.from_options(**options)
    elif options:
        raise TypeError("Pass either a TransportConfig or option keywords, not both")
    if transport is None:
        transport = HttpxTransport(timeout=timeout, raise_for_status=raise_for_status, json_default=json_default)
    if scheduler is None:
        scheduler = EventLoopThread(stop_timeout=close_timeout)
    return LogDispatcher(
        config,
        transport=transport,
        scheduler=scheduler,
        diagnostic=diagnostic,
        on_failure=on_failure,
        close_timeout=close_timeout,
    )


def create_handler(
    config: TransportConfig | None = None,
    *,
    level: str | int | LogLevel = logging.NOTSET,
    **kwargs: Any,
) -> HttpLogHandler:
    """Return an :class:`HttpLogHandler` backed by :func:`create_dispatcher`.

    ``level`` accepts names (``"warning"``), stdlib integers or
    :class:`LogLevel`; remaining keywords go to :func:`create_dispatcher`.
    """

    threshold = logging.NOTSET if level == logging.NOTSET else coerce_level(level).to_python_level()
    return HttpLogHandler(create_dispatcher(config, **kwargs), level=threshold)


__all__ = ["create_dispatcher", "create_handler"]
