"""Bridge from the stdlib :mod:`logging` pipeline to the HTTP dispatcher.

Purpose
-------
Let host applications attach the transport like any other handler. Each
``logging.LogRecord`` becomes an open field mapping and is passed to
:meth:`LogDispatcher.dispatch`.

Contents
--------
* :func:`record_to_fields` – ``logging.LogRecord`` → body mapping.
* :class:`HttpLogHandler` – ``logging.Handler`` subclass.

System Role
-----------
Outer adapter. Records emitted by ``lib_log_http`` loggers, and every record
emitted on the delivery loop thread (``httpx`` logs each request at INFO),
are filtered out so the transport never ships its own activity back through
itself.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from lib_log_http.adapters.event_loop import on_delivery_thread
from lib_log_http.application.dispatcher import LogDispatcher
from lib_log_http.domain.levels import LogLevel

_PACKAGE_LOGGER = "lib_log_http"

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime", "taskName"}

_FALLBACK_FORMATTER = logging.Formatter()


def record_to_fields(record: logging.LogRecord, formatter: logging.Formatter | None = None) -> dict[str, Any]:
    """Convert ``record`` into the field mapping sent as request body.

    Core fields (``level``, ``message``, ``logger``, ``timestamp``) win over
    ``extra`` values with the same name.

    Examples
    --------
    >>> import logging
    >>> record = logging.LogRecord("app", logging.WARNING, __file__, 1, "disk %s", ("full",), None)
    >>> record.tenant = "acme"
    >>> fields = record_to_fields(record)
    >>> fields["level"], fields["message"], fields["logger"], fields["tenant"]
    ('warning', 'disk full', 'app', 'acme')
    """

    fields: dict[str, Any] = {
        "level": LogLevel.from_python_level(record.levelno).severity,
        "message": record.getMessage(),
        "logger": record.name,
        "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
    }
    for key, value in vars(record).items():
        if key in _RESERVED_ATTRS or key.startswith("_") or key in fields:
            continue
        fields[key] = value
    active_formatter = formatter or _FALLBACK_FORMATTER
    if record.exc_info:
        fields["exc_info"] = active_formatter.formatException(record.exc_info)
    if record.stack_info:
        fields["stack_info"] = active_formatter.formatStack(record.stack_info)
    return fields


def _is_own_record(record: logging.LogRecord) -> bool:
    if on_delivery_thread():
        return True
    return record.name == _PACKAGE_LOGGER or record.name.startswith(_PACKAGE_LOGGER + ".")


class HttpLogHandler(logging.Handler):
    """``logging.Handler`` forwarding records through a :class:`LogDispatcher`.

    Closing the handler closes the dispatcher, which drains in-flight
    deliveries; :func:`logging.shutdown` does this at interpreter exit.
    """

    def __init__(self, dispatcher: LogDispatcher, level: int | str = logging.NOTSET) -> None:
        super().__init__(level)
        self._dispatcher = dispatcher
        self.addFilter(lambda record: not _is_own_record(record))

    @property
    def dispatcher(self) -> LogDispatcher:
        return self._dispatcher

    def emit(self, record: logging.LogRecord) -> None:
        """Dispatch ``record``; local errors go through :meth:`handleError`."""
        try:
            self._dispatcher.dispatch(record_to_fields(record, self.formatter))
        except Exception:  # noqa: BLE001
            self.handleError(record)

    def close(self) -> None:
        try:
            self._dispatcher.close()
        finally:
            super().close()


__all__ = ["HttpLogHandler", "record_to_fields"]
