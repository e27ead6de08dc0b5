"""Use case turning one log record into an :class:`OutgoingRequest`.

Purpose
-------
Freeze the static parts of a :class:`TransportConfig` (resolved URL, caller
headers with the auth header applied) into a callable executed for every
record, so the per-record work is limited to the body merge and fresh
allocations.

Contents
--------
* :func:`create_build_request` factory returning the per-record builder.
"""

from __future__ import annotations

from collections.abc import Callable
from types import MappingProxyType

from lib_log_http.domain import LogRecord, OutgoingRequest, TransportConfig
from lib_log_http.domain.request import assemble_headers, build_body, resolve_url

BuildRequest = Callable[[LogRecord], OutgoingRequest]


def create_build_request(config: TransportConfig) -> BuildRequest:
    """Return a builder applying ``config`` to individual records.

    Examples
    --------
    >>> build = create_build_request(TransportConfig(base_url="http://h/", path="/log"))
    >>> request = build({"level": "info", "message": "hi"})
    >>> request.url, request.method.value, request.headers
    ('http://h/log', 'POST', None)
    """

    url = resolve_url(config.base_url, config.path)
    static_headers = assemble_headers(config.headers, config.auth, config.auth_type)
    frozen_headers = MappingProxyType(static_headers) if static_headers is not None else None

    def build(record: LogRecord) -> OutgoingRequest:
        """Assemble a request for ``record`` without touching shared state."""

        headers = dict(frozen_headers) if frozen_headers is not None else None
        return OutgoingRequest(
            method=config.method,
            url=url,
            body=build_body(record, config.body_addons),
            headers=headers,
        )

    return build


__all__ = ["BuildRequest", "create_build_request"]
