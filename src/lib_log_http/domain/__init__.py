"""Domain entities and value objects used by the HTTP log transport."""

from __future__ import annotations

from .auth import AUTHORIZATION_HEADER, AuthType, auth_prefix, format_auth_header
from .config import DEFAULT_BASE_URL, HttpMethod, TransportConfig, resolve_base_url
from .levels import LogLevel
from .record import FieldValue, LogRecord, merge_right_wins
from .request import OutgoingRequest, assemble_headers, build_body, resolve_url

__all__ = [
    "AUTHORIZATION_HEADER",
    "AuthType",
    "DEFAULT_BASE_URL",
    "FieldValue",
    "HttpMethod",
    "LogLevel",
    "LogRecord",
    "OutgoingRequest",
    "TransportConfig",
    "assemble_headers",
    "auth_prefix",
    "build_body",
    "format_auth_header",
    "merge_right_wins",
    "resolve_base_url",
    "resolve_url",
]
