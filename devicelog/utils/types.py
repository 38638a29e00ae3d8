"""Shared value types consumed across the logging facility."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

RECORD_SEPARATOR = b"\n"


@dataclass(frozen=True)
class LogRecord:
    """An already rendered log entry, treated as opaque bytes."""

    data: bytes

    @classmethod
    def from_text(cls, text: str) -> "LogRecord":
        return cls(text.encode("utf-8"))

    @property
    def size(self) -> int:
        return len(self.data)

    def to_bytes(self) -> bytes:
        """Return the bytes written to disk: the record plus one separator.

        The separator is always added, so a record that already ends in a
        newline produces a blank line. :class:`~devicelog.formatting.EntryFormatter`
        strips a trailing newline from messages before they get here.
        """

        return self.data + RECORD_SEPARATOR


class ArtifactRole(enum.Enum):
    ACTIVE = "active"
    ROTATED = "rotated"


@dataclass(frozen=True)
class LogArtifact:
    """A file belonging to the log family inside the storage location."""

    path: Path
    role: ArtifactRole
    size_bytes: int
    sequence: Optional[int] = None

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class UploadResponse:
    """Outcome of a successful upload."""

    status: int
    body: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.body


@dataclass(frozen=True)
class AppIdentity:
    """Application and device details used to decorate log entries."""

    app_name: str = "UnknownApp"
    app_version: str = "?.?.?"
    build: str = "?"
    os: str = "unknown"
    model: str = "unknown"
    device_id: str = ""


__all__ = [
    "AppIdentity",
    "ArtifactRole",
    "LogArtifact",
    "LogRecord",
    "RECORD_SEPARATOR",
    "UploadResponse",
]
