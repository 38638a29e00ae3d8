"""Storage location and naming of the log file family."""
from __future__ import annotations

import logging
import os
import re
import stat as stat_mod
import tempfile
from pathlib import Path
from threading import Lock
from typing import List, Optional

from ..config import LogConfig
from ..utils.types import ArtifactRole, LogArtifact

LOGGER = logging.getLogger(__name__)


def default_log_directory() -> Path:
    """Return the writable scratch directory used when none is configured."""

    return Path(tempfile.gettempdir())


def atomic_write(path: Path, data: bytes, *, prefix: str = ".tmp_devicelog_") -> None:
    """Replace ``path`` with ``data`` via a fsync'd temp file and ``os.replace``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=prefix,
        suffix=path.suffix or ".txt",
    )
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError:
                LOGGER.debug("Unable to remove temp file: %s", tmp_path)


class LogLayout:
    """Maps artifact roles to file names inside one directory.

    Rotated names carry a zero-padded sequence so that sorting the family by
    name yields creation order, with the active file last.

    ``generation`` changes whenever a new active file may come into being
    (creation, rotation, deletion, rewrite). An upload only removes bytes
    from the active file if the generation it read is still current.
    """

    def __init__(self, config: Optional[LogConfig] = None, directory: Optional[Path] = None) -> None:
        self.config = config or LogConfig()
        if directory is None:
            directory = self.config.directory or default_log_directory()
        self.directory = Path(directory)
        self.generation = 0
        self._generation_lock = Lock()
        self._pattern = re.compile(
            r"^{prefix}_(?:(?P<active>{marker})|(?P<seq>\d{{{width}}})){ext}$".format(
                prefix=re.escape(self.config.prefix),
                marker=re.escape(self.config.active_marker),
                width=self.config.sequence_width,
                ext=re.escape(self.config.extension),
            )
        )

    # ------------------------------------------------------------------
    @property
    def active_path(self) -> Path:
        return self.directory / self.config.active_name

    @property
    def max_sequence(self) -> int:
        return 10 ** self.config.sequence_width - 1

    def rotated_path(self, sequence: int) -> Path:
        if not 1 <= sequence <= self.max_sequence:
            raise ValueError(f"Sequence {sequence} out of range 1..{self.max_sequence}")
        width = self.config.sequence_width
        return self.directory / f"{self.config.prefix}_{sequence:0{width}d}{self.config.extension}"

    def bump_generation(self) -> int:
        with self._generation_lock:
            self.generation += 1
            return self.generation

    def is_family_name(self, name: str) -> bool:
        return self._pattern.match(name) is not None

    # ------------------------------------------------------------------
    def discover(self) -> List[LogArtifact]:
        """Return every artifact of the family, sorted by name.

        Files that vanish while the directory is scanned are skipped.
        """

        try:
            entries = list(self.directory.iterdir())
        except FileNotFoundError:
            return []
        except OSError as exc:
            LOGGER.warning("Unable to list log directory %s: %s", self.directory, exc)
            return []

        artifacts: List[LogArtifact] = []
        for path in sorted(entries, key=lambda item: item.name):
            match = self._pattern.match(path.name)
            if match is None:
                continue
            try:
                info = path.stat()
            except FileNotFoundError:
                continue
            except OSError as exc:
                LOGGER.warning("Unable to stat log artifact %s: %s", path, exc)
                continue
            if not stat_mod.S_ISREG(info.st_mode):
                continue
            size = info.st_size
            if match.group("active") is not None:
                artifacts.append(LogArtifact(path, ArtifactRole.ACTIVE, size))
            else:
                sequence = int(match.group("seq"))
                artifacts.append(LogArtifact(path, ArtifactRole.ROTATED, size, sequence))
        return artifacts


__all__ = ["LogLayout", "atomic_write", "default_log_directory"]
