"""On-device log files with rotation, aggregation and upload."""

from .config import LogConfig
from .core import (
    DeviceLogError,
    InvalidDestination,
    NotFound,
    RotationExhausted,
    TransportError,
    UploadError,
    WriteError,
)
from .formatting import EntryFormatter, default_identity
from .manager import LogFileManager
from .transport import HttpxTransport, Transport, TransportResponse
from .utils.types import AppIdentity, LogRecord, UploadResponse

__all__ = [
    "AppIdentity",
    "DeviceLogError",
    "EntryFormatter",
    "HttpxTransport",
    "InvalidDestination",
    "LogConfig",
    "LogFileManager",
    "LogRecord",
    "NotFound",
    "RotationExhausted",
    "Transport",
    "TransportError",
    "TransportResponse",
    "UploadError",
    "UploadResponse",
    "WriteError",
    "default_identity",
]
