"""Size-based rotation of the active log file."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import RotationExhausted
from .storage import LogLayout

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RotationAction:
    """Rename of the active file to the next free rotated name."""

    source: Path
    target: Path
    sequence: int


class RotationPolicy:
    """Decides when the active file is retired and where it goes."""

    def __init__(self, layout: LogLayout, max_bytes: Optional[int] = None) -> None:
        self.layout = layout
        self.max_bytes = max_bytes if max_bytes is not None else layout.config.max_bytes

    def maybe_rotate(self, active_size: int) -> Optional[RotationAction]:
        """Return the rename to perform, or ``None`` while under the threshold."""

        if active_size < self.max_bytes:
            return None
        sequence = self.next_sequence()
        return RotationAction(
            source=self.layout.active_path,
            target=self.layout.rotated_path(sequence),
            sequence=sequence,
        )

    def next_sequence(self) -> int:
        """Smallest sequence number >= 1 with no rotated file on disk."""

        for sequence in range(1, self.layout.max_sequence + 1):
            if not self.layout.rotated_path(sequence).exists():
                return sequence
        raise RotationExhausted(
            f"No free rotation slot left in {self.layout.directory} "
            f"(limit {self.layout.max_sequence})"
        )

    def apply(self, action: RotationAction) -> bool:
        """Rename the active file out of the way.

        A failed rename leaves the active file in place; the next append then
        grows the oversized file instead of failing.
        """

        try:
            action.source.rename(action.target)
        except OSError as exc:
            LOGGER.warning(
                "Rotation of %s to %s failed, continuing with oversized file: %s",
                action.source,
                action.target.name,
                exc,
            )
            return False
        LOGGER.debug("Rotated %s to %s", action.source.name, action.target.name)
        return True


__all__ = ["RotationAction", "RotationPolicy"]
