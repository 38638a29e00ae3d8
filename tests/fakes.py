"""Transport doubles used by the upload tests."""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from devicelog.core.errors import TransportError
from devicelog.transport import TransportResponse


class RecordingTransport:
    """Returns a canned response and remembers every POST."""

    def __init__(
        self,
        status: int = 200,
        body: str = "",
        *,
        on_post: Optional[Callable[[], None]] = None,
    ) -> None:
        self.status = status
        self.body = body
        self.on_post = on_post
        self.calls: List[Tuple[str, bytes, str]] = []

    def post(self, url: str, body: bytes, content_type: str) -> TransportResponse:
        self.calls.append((url, body, content_type))
        if self.on_post is not None:
            self.on_post()
        return TransportResponse(status=self.status, body=self.body)


class FailingTransport:
    """Simulates a network failure."""

    def __init__(self) -> None:
        self.calls = 0

    def post(self, url: str, body: bytes, content_type: str) -> TransportResponse:
        self.calls += 1
        raise TransportError("connection refused")


class CrashingTransport:
    """Raises something that is not a TransportError."""

    def post(self, url: str, body: bytes, content_type: str) -> TransportResponse:
        raise ConnectionResetError("peer went away")


__all__ = ["CrashingTransport", "FailingTransport", "RecordingTransport"]
