"""HTTP transport used to ship the active log file."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from .core.errors import TransportError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    status: int
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    """Anything able to POST a payload and report the server's answer."""

    def post(self, url: str, body: bytes, content_type: str) -> TransportResponse:
        ...


class HttpxTransport:
    """:class:`Transport` backed by a synchronous ``httpx.Client``."""

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def post(self, url: str, body: bytes, content_type: str) -> TransportResponse:
        try:
            response = self._client.post(url, content=body, headers={"Content-Type": content_type})
        except httpx.HTTPError as exc:
            LOGGER.warning("POST %s failed: %s", url, exc)
            raise TransportError(f"POST {url} failed: {exc}") from exc
        return TransportResponse(status=response.status_code, body=response.text)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["HttpxTransport", "Transport", "TransportResponse"]
