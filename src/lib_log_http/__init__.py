"""Public package surface for the HTTP log transport.

Host applications usually need only :func:`create_handler` (stdlib logging)
or :func:`create_dispatcher` (direct ``dispatch(record, done)`` calls). The
value objects are re-exported for configuration and tests.
"""

from __future__ import annotations

from .application.dispatcher import LOGGED_EVENT, LogDispatcher
from .adapters import EventLoopThread, HttpLogHandler, HttpxTransport
from .config import config_from_env, enable_dotenv
from .domain import (
    AuthType,
    HttpMethod,
    LogLevel,
    OutgoingRequest,
    TransportConfig,
    merge_right_wins,
    resolve_url,
)
from .runtime import create_dispatcher, create_handler

__all__ = [
    "AuthType",
    "EventLoopThread",
    "HttpLogHandler",
    "HttpMethod",
    "HttpxTransport",
    "LOGGED_EVENT",
    "LogDispatcher",
    "LogLevel",
    "OutgoingRequest",
    "TransportConfig",
    "config_from_env",
    "create_dispatcher",
    "create_handler",
    "enable_dotenv",
    "merge_right_wins",
    "resolve_url",
]
