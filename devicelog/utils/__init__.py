"""Value types shared by the core components."""

from .types import AppIdentity, ArtifactRole, LogArtifact, LogRecord, UploadResponse

__all__ = ["AppIdentity", "ArtifactRole", "LogArtifact", "LogRecord", "UploadResponse"]
