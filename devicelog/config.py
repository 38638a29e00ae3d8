"""Settings for a single log family."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_MAX_BYTES = 100 * 1024


@dataclass(frozen=True)
class LogConfig:
    """Naming, rotation and upload settings for one log directory.

    Rotated files are named ``<prefix>_<sequence><extension>`` with the
    sequence zero-padded to ``sequence_width`` digits, and the active file is
    ``<prefix>_<active_marker><extension>``. The marker must start with a
    lowercase letter so that the active file sorts after every rotated one.
    """

    directory: Optional[Path] = None
    prefix: str = "device_log"
    active_marker: str = "current"
    extension: str = ".txt"
    max_bytes: int = DEFAULT_MAX_BYTES
    sequence_width: int = 6
    export_name: str = "device_log_full.txt"
    upload_timeout: float = 30.0
    content_type: str = "text/plain"

    def __post_init__(self) -> None:
        if self.max_bytes < 1:
            raise ValueError("max_bytes must be positive")
        if self.sequence_width < 1:
            raise ValueError("sequence_width must be positive")
        if not self.active_marker[:1].islower():
            raise ValueError("active_marker must start with a lowercase letter")

    @property
    def active_name(self) -> str:
        return f"{self.prefix}_{self.active_marker}{self.extension}"


__all__ = ["DEFAULT_MAX_BYTES", "LogConfig"]
