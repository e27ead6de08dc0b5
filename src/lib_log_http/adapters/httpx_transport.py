"""HTTP adapter sending outgoing requests through ``httpx.AsyncClient``.

Purpose
-------
Perform the network half of a delivery: JSON-encode the body, attach the
transport defaults, and issue the request with a bounded timeout.

Contents
--------
* :func:`default_json_default` – fallback encoder for non-JSON values.
* :class:`HttpxTransport` – concrete :class:`HttpTransportPort`.

System Role
-----------
The client is created lazily on first use so it binds to the loop that
runs deliveries (see :class:`lib_log_http.adapters.EventLoopThread`).
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

import httpx

from lib_log_http.application.ports.http import HttpTransportPort
from lib_log_http.domain.request import OutgoingRequest

JsonDefault = Callable[[Any], Any]

DEFAULT_TIMEOUT = 5.0


def default_json_default(value: Any) -> Any:
    """Encode values ``json`` cannot serialise on its own.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> default_json_default(datetime(2025, 9, 23, tzinfo=timezone.utc))
    '2025-09-23T00:00:00+00:00'
    >>> default_json_default({1, 2})
    [1, 2]
    """

    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


class HttpxTransport(HttpTransportPort):
    """Send :class:`OutgoingRequest` objects with ``httpx``.

    Parameters
    ----------
    timeout:
        Per-request timeout in seconds (or an :class:`httpx.Timeout`).
    raise_for_status:
        When ``True`` non-2xx responses raise :class:`httpx.HTTPStatusError`
        so the dispatcher reports them as failed deliveries.
    json_default:
        Encoder for values the :mod:`json` module cannot handle.
    transport:
        Optional ``httpx`` transport, e.g. :class:`httpx.MockTransport` in tests.
    verify:
        Set to ``False`` to skip TLS certificate verification.
    """

    def __init__(
        self,
        *,
        timeout: float | httpx.Timeout | None = DEFAULT_TIMEOUT,
        raise_for_status: bool = True,
        json_default: JsonDefault | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        verify: bool = True,
    ) -> None:
        self._timeout = timeout
        self._raise_for_status = raise_for_status
        self._json_default = json_default or default_json_default
        self._transport = transport
        self._verify = verify
        self._client: httpx.AsyncClient | None = None

    async def send(self, request: OutgoingRequest) -> httpx.Response:
        """Issue ``request`` and return the response.

        Bodies holding NaN or infinite floats raise :class:`ValueError` before
        anything is sent, since JSON has no representation for them.
        """

        headers = httpx.Headers({"content-type": "application/json"})
        if request.headers:
            headers.update(request.headers)
        content = json.dumps(request.body, default=self._json_default, allow_nan=False).encode("utf-8")
        response = await self._get_client().request(
            request.method.value,
            request.url,
            content=content,
            headers=headers,
        )
        if self._raise_for_status:
            response.raise_for_status()
        return response

    async def aclose(self) -> None:
        """Close the pooled client, if one was created."""

        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                verify=self._verify,
            )
        return self._client


__all__ = ["DEFAULT_TIMEOUT", "HttpxTransport", "JsonDefault", "default_json_default"]
