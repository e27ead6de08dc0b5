"""Concrete adapters: HTTP client, event-loop scheduler and logging bridge."""

from __future__ import annotations

from .event_loop import EventLoopThread
from .httpx_transport import HttpxTransport, default_json_default
from .logging_handler import HttpLogHandler, record_to_fields

__all__ = [
    "EventLoopThread",
    "HttpLogHandler",
    "HttpxTransport",
    "default_json_default",
    "record_to_fields",
]
