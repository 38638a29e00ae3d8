"""Bulk deletion of the log file family."""
from __future__ import annotations

import logging

from .storage import LogLayout

LOGGER = logging.getLogger(__name__)


class Cleaner:
    """Deletes every active and rotated artifact.

    A record appended while a clear is running may or may not survive it.
    That race is accepted for a best-effort log; callers needing a clean cut
    go through :class:`~devicelog.manager.LogFileManager`, which queues the
    clear behind earlier appends.
    """

    def __init__(self, layout: LogLayout) -> None:
        self.layout = layout

    def clear_all(self) -> int:
        """Delete the family and return how many files were removed."""

        removed = 0
        for artifact in self.layout.discover():
            try:
                artifact.path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                LOGGER.warning("Unable to delete log artifact %s: %s", artifact.path, exc)
                continue
            removed += 1
        self.layout.bump_generation()
        if removed:
            LOGGER.info("Removed %d log file(s) from %s", removed, self.layout.directory)
        return removed


__all__ = ["Cleaner"]
