"""Outgoing request value object and the pure steps that build it.

Purpose
-------
Keep URL resolution, header assembly and body merging free of I/O so each
rule can be exercised directly and composed by
:func:`lib_log_http.application.use_cases.build_request.create_build_request`.

Contents
--------
* :class:`OutgoingRequest` – transient request handed to the HTTP adapter.
* :func:`resolve_url` – base/path concatenation with one separator.
* :func:`assemble_headers` – caller headers plus the generated auth header.
* :func:`build_body` – record merged with body addons.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .auth import AUTHORIZATION_HEADER, AuthType, format_auth_header
from .config import HttpMethod
from .record import LogRecord, merge_right_wins


@dataclass(slots=True, frozen=True)
class OutgoingRequest:
    """One fully formed HTTP request derived from a single log record.

    ``headers`` stays ``None`` when neither caller headers nor auth apply, so
    the HTTP adapter only adds its own transport defaults.
    """

    method: HttpMethod
    url: str
    body: LogRecord
    headers: Mapping[str, str] | None = None


def resolve_url(base_url: str, path: str | None) -> str:
    """Join ``base_url`` and ``path`` with exactly one ``/`` between them.

    Examples
    --------
    >>> resolve_url("http://h/", "/log")
    'http://h/log'
    >>> resolve_url("http://h", "log")
    'http://h/log'
    >>> resolve_url("http://h/", None)
    'http://h/'
    """

    if not path:
        return base_url
    if base_url.endswith("/"):
        base_url = base_url[:-1]
    if not path.startswith("/"):
        path = "/" + path
    return base_url + path


def assemble_headers(
    headers: Mapping[str, str] | None,
    auth: str | None,
    auth_type: str | AuthType | None,
) -> dict[str, str] | None:
    """Return the request headers or ``None`` when nothing applies.

    Caller headers are copied. When ``auth`` is set every caller header named
    ``authorization`` (any casing) is dropped and replaced by the generated
    value, so the caller's entry and the configured secret never coexist.

    Examples
    --------
    >>> assemble_headers({"Authorization": "x", "x-app": "a"}, "XYZ", "apikey")
    {'x-app': 'a', 'authorization': 'ApiKey XYZ'}
    >>> assemble_headers({}, None, None) is None
    True
    """

    assembled: dict[str, str] = dict(headers or {})
    if auth:
        assembled = {key: value for key, value in assembled.items() if key.lower() != AUTHORIZATION_HEADER}
        assembled[AUTHORIZATION_HEADER] = format_auth_header(auth, auth_type)
    return assembled or None


def build_body(record: LogRecord, body_addons: Mapping[str, Any] | None) -> LogRecord:
    """Merge ``body_addons`` over ``record``; return ``record`` itself when no addons exist."""

    if body_addons:
        return merge_right_wins(record, body_addons)
    return record


__all__ = ["OutgoingRequest", "assemble_headers", "build_body", "resolve_url"]
