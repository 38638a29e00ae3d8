"""Serialized appends to the active log file."""
from __future__ import annotations

import os
from threading import Lock
from typing import Optional

from ..utils.types import LogRecord
from .errors import WriteError
from .rotation import RotationPolicy
from .storage import LogLayout


class AppendWriter:
    """Append-only writer that rotates before a write could overflow the file.

    Every call holds ``lock`` for the rotation check, the write and the flush,
    so concurrent producers never interleave partial records or race a
    rotation. The same lock is shared with the uploader's acknowledgement.
    """

    def __init__(
        self,
        layout: LogLayout,
        policy: Optional[RotationPolicy] = None,
        *,
        lock: Optional[Lock] = None,
    ) -> None:
        self.layout = layout
        self.policy = policy or RotationPolicy(layout)
        self.lock = lock or Lock()

    # ------------------------------------------------------------------
    def append(self, record: LogRecord) -> None:
        """Append ``record`` durably, raising :class:`WriteError` on failure."""

        data = record.to_bytes()
        with self.lock:
            existed = self._rotate_if_needed()
            path = self.layout.active_path
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                with path.open("ab") as handle:
                    if not existed:
                        self.layout.bump_generation()
                    handle.write(data)
                    handle.flush()
                    os.fsync(handle.fileno())
            except OSError as exc:
                raise WriteError(f"Unable to append to {path}: {exc}") from exc

    # ------------------------------------------------------------------
    def _rotate_if_needed(self) -> bool:
        """Rotate when over the threshold; return whether the active file remains."""

        try:
            size = self.layout.active_path.stat().st_size
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise WriteError(f"Unable to inspect {self.layout.active_path}: {exc}") from exc

        action = self.policy.maybe_rotate(size)
        if action is None:
            return True
        if self.policy.apply(action):
            self.layout.bump_generation()
            return False
        return True


__all__ = ["AppendWriter"]
