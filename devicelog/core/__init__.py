"""Log-file lifecycle primitives exposed as a convenience import."""

from .aggregator import Aggregator
from .cleaner import Cleaner
from .errors import (
    DeviceLogError,
    InvalidDestination,
    NotFound,
    ReadError,
    RotationExhausted,
    TransportError,
    UploadError,
    WriteError,
)
from .rotation import RotationAction, RotationPolicy
from .storage import LogLayout, default_log_directory
from .uploader import UploadPayload, Uploader
from .writer import AppendWriter

__all__ = [
    "Aggregator",
    "AppendWriter",
    "Cleaner",
    "DeviceLogError",
    "InvalidDestination",
    "LogLayout",
    "NotFound",
    "ReadError",
    "RotationAction",
    "RotationExhausted",
    "RotationPolicy",
    "TransportError",
    "UploadError",
    "UploadPayload",
    "Uploader",
    "WriteError",
    "default_log_directory",
]
