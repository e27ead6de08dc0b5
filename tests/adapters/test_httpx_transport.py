from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone

import httpx
import pytest

from lib_log_http.adapters.httpx_transport import HttpxTransport
from lib_log_http.domain import HttpMethod
from lib_log_http.domain.request import OutgoingRequest


class _Capture:
    def __init__(self, status_code: int = 200) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = status_code

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json={"ok": True})


def _send(transport: HttpxTransport, request: OutgoingRequest) -> httpx.Response:
    async def run() -> httpx.Response:
        try:
            return await transport.send(request)
        finally:
            await transport.aclose()

    return asyncio.run(run())


def test_sends_json_body_with_method_url_and_headers() -> None:
    capture = _Capture()
    transport = HttpxTransport(transport=httpx.MockTransport(capture))
    request = OutgoingRequest(
        method=HttpMethod.PUT,
        url="http://logs.example/ingest",
        body={"level": "info", "message": "hello", "count": 3},
        headers={"authorization": "Bearer XYZ", "x-app": "svc"},
    )

    response = _send(transport, request)

    assert response.status_code == 200
    sent = capture.requests[0]
    assert sent.method == "PUT"
    assert str(sent.url) == "http://logs.example/ingest"
    assert sent.headers["authorization"] == "Bearer XYZ"
    assert sent.headers["x-app"] == "svc"
    assert sent.headers["content-type"] == "application/json"
    assert json.loads(sent.content) == {"level": "info", "message": "hello", "count": 3}


def test_request_without_headers_gets_only_transport_defaults() -> None:
    capture = _Capture()
    transport = HttpxTransport(transport=httpx.MockTransport(capture))

    _send(transport, OutgoingRequest(method=HttpMethod.POST, url="http://h", body={"message": "m"}))

    sent = capture.requests[0]
    assert "authorization" not in sent.headers
    assert sent.headers["content-type"] == "application/json"


def test_caller_content_type_replaces_default() -> None:
    capture = _Capture()
    transport = HttpxTransport(transport=httpx.MockTransport(capture))
    request = OutgoingRequest(
        method=HttpMethod.POST,
        url="http://h",
        body={"message": "m"},
        headers={"Content-Type": "application/vnd.logs+json"},
    )

    _send(transport, request)

    assert capture.requests[0].headers.get_list("content-type") == ["application/vnd.logs+json"]


def test_non_json_values_are_encoded_with_default() -> None:
    capture = _Capture()
    transport = HttpxTransport(transport=httpx.MockTransport(capture))
    stamp = datetime(2025, 9, 23, 12, 0, tzinfo=timezone.utc)

    _send(transport, OutgoingRequest(method=HttpMethod.POST, url="http://h", body={"at": stamp, "tags": {"b", "a"}}))

    assert json.loads(capture.requests[0].content) == {"at": "2025-09-23T12:00:00+00:00", "tags": ["a", "b"]}


def test_custom_json_default_is_used() -> None:
    capture = _Capture()
    transport = HttpxTransport(transport=httpx.MockTransport(capture), json_default=lambda value: "<opaque>")

    _send(transport, OutgoingRequest(method=HttpMethod.POST, url="http://h", body={"obj": object()}))

    assert json.loads(capture.requests[0].content) == {"obj": "<opaque>"}


def test_non_success_status_raises_by_default() -> None:
    transport = HttpxTransport(transport=httpx.MockTransport(_Capture(status_code=503)))

    with pytest.raises(httpx.HTTPStatusError):
        _send(transport, OutgoingRequest(method=HttpMethod.POST, url="http://h", body={}))


def test_non_success_status_can_be_accepted() -> None:
    transport = HttpxTransport(transport=httpx.MockTransport(_Capture(status_code=503)), raise_for_status=False)

    response = _send(transport, OutgoingRequest(method=HttpMethod.POST, url="http://h", body={}))

    assert response.status_code == 503


def test_aclose_without_client_is_noop() -> None:
    asyncio.run(HttpxTransport().aclose())


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_floats_are_rejected_before_sending(value: float) -> None:
    capture = _Capture()
    transport = HttpxTransport(transport=httpx.MockTransport(capture))

    with pytest.raises(ValueError):
        _send(transport, OutgoingRequest(method=HttpMethod.POST, url="http://h", body={"ratio": value}))

    assert capture.requests == []
