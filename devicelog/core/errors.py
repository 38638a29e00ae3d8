"""Exception taxonomy for the log-file lifecycle."""
from __future__ import annotations

from pathlib import Path
from typing import Optional


class DeviceLogError(RuntimeError):
    """Base class for every error raised by the logging facility."""


class WriteError(DeviceLogError):
    """Raised when the filesystem denies an append or a rotation."""


class RotationExhausted(WriteError):
    """Raised when no free sequence number is left for a rotated file."""


class ReadError(DeviceLogError):
    """An artifact could not be read during aggregation.

    The aggregator only logs these; they never reach callers.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Unable to read {path}: {reason}")


class UploadError(DeviceLogError):
    """Base class for upload failures. The active file is left untouched."""


class NotFound(UploadError):
    """There is no active log file to upload."""


class InvalidDestination(UploadError):
    """The upload destination is not an absolute http(s) URL."""


class TransportError(UploadError):
    """The transport failed or the server rejected the payload."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        self.status = status
        super().__init__(message)


__all__ = [
    "DeviceLogError",
    "InvalidDestination",
    "NotFound",
    "ReadError",
    "RotationExhausted",
    "TransportError",
    "UploadError",
    "WriteError",
]
