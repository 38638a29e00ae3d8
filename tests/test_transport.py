"""Tests for the httpx-backed transport."""

from __future__ import annotations

import httpx
import pytest

from devicelog.core.errors import TransportError
from devicelog.transport import HttpxTransport


def test_post_sends_plain_text_body() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["content_type"] = request.headers["Content-Type"]
        seen["body"] = request.content
        return httpx.Response(201, text="accepted")

    client = httpx.Client(transport=httpx.MockTransport(handler))
    with HttpxTransport(client=client) as transport:
        response = transport.post("https://logs.example.com/", b"line\n", "text/plain")

    assert seen == {"method": "POST", "content_type": "text/plain", "body": b"line\n"}
    assert response.status == 201
    assert response.body == "accepted"
    assert response.ok


def test_error_status_is_returned_not_raised() -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
    response = HttpxTransport(client=client).post("https://logs.example.com/", b"", "text/plain")
    assert response.status == 500
    assert not response.ok


def test_network_failure_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    with pytest.raises(TransportError):
        HttpxTransport(client=client).post("https://logs.example.com/", b"x", "text/plain")
