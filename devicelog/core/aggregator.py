"""Concatenation of every log artifact into a single stream."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .errors import ReadError
from .storage import LogLayout, atomic_write

LOGGER = logging.getLogger(__name__)


class Aggregator:
    """Reads rotated files oldest first, followed by the active file.

    Reading is best-effort: an artifact renamed or deleted mid-scan may be
    missed or, in rare cases, read under its new name. Unreadable files are
    logged and skipped.
    """

    def __init__(self, layout: LogLayout) -> None:
        self.layout = layout

    def read_all(self) -> str:
        chunks: List[str] = []
        for artifact in self.layout.discover():
            try:
                data = artifact.path.read_bytes()
            except OSError as exc:
                LOGGER.warning("%s", ReadError(artifact.path, str(exc)))
                continue
            chunks.append(data.decode("utf-8", errors="replace"))
        return "".join(chunks)

    def export(self, name: Optional[str] = None) -> Path:
        """Write the aggregated text to ``name`` inside the log directory."""

        name = name or self.layout.config.export_name
        if Path(name).name != name:
            raise ValueError(f"Export name must be a plain file name: {name!r}")
        if self.layout.is_family_name(name):
            raise ValueError(f"Export name {name!r} collides with the log file family")

        destination = self.layout.directory / name
        atomic_write(destination, self.read_all().encode("utf-8"), prefix=".tmp_export_")
        return destination


__all__ = ["Aggregator"]
