"""Upload of the active log file with delete-on-acknowledge semantics."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from threading import Lock
from typing import TYPE_CHECKING, Optional, Tuple
from urllib.parse import urlsplit

from ..utils.types import UploadResponse
from .errors import InvalidDestination, NotFound, TransportError, UploadError, WriteError
from .storage import LogLayout, atomic_write

if TYPE_CHECKING:  # pragma: no cover
    from ..transport import Transport

LOGGER = logging.getLogger(__name__)

_ALLOWED_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class UploadPayload:
    """Bytes read from the active file and the identity of the file they came from."""

    data: bytes
    generation: int
    device: int
    inode: int

    @property
    def identity(self) -> Tuple[int, int]:
        return (self.device, self.inode)


class Uploader:
    """Ships the active file and removes it only once the server accepted it.

    :meth:`upload` runs every phase inline. The manager instead calls
    :meth:`read_payload`, :meth:`send` and :meth:`acknowledge` separately so
    that the network call happens outside the serialization point.
    """

    def __init__(
        self,
        layout: LogLayout,
        transport: Transport,
        *,
        content_type: Optional[str] = None,
        lock: Optional[Lock] = None,
    ) -> None:
        self.layout = layout
        self.transport = transport
        self.content_type = content_type or layout.config.content_type
        self.lock = lock or Lock()

    # ------------------------------------------------------------------
    def upload(self, destination: str) -> UploadResponse:
        with self.lock:
            payload = self.read_payload()
        response = self.send(destination, payload.data)
        with self.lock:
            self.acknowledge(payload)
        return response

    # ------------------------------------------------------------------
    def read_payload(self) -> UploadPayload:
        path = self.layout.active_path
        generation = self.layout.generation
        try:
            with path.open("rb") as handle:
                info = os.fstat(handle.fileno())
                data = handle.read()
        except FileNotFoundError as exc:
            raise NotFound(f"No active log file at {path}") from exc
        except OSError as exc:
            raise UploadError(f"Active log file {path} is unreadable: {exc}") from exc
        return UploadPayload(data, generation, info.st_dev, info.st_ino)

    @staticmethod
    def validate_destination(destination: str) -> str:
        try:
            parts = urlsplit(destination)
        except (TypeError, ValueError) as exc:
            raise InvalidDestination(f"Malformed upload destination: {destination!r}") from exc
        if parts.scheme.lower() not in _ALLOWED_SCHEMES or not parts.hostname:
            raise InvalidDestination(f"Upload destination must be an http(s) URL: {destination!r}")
        return destination

    def send(self, destination: str, data: bytes) -> UploadResponse:
        """POST ``data``; raise :class:`TransportError` unless the server accepted it."""

        url = self.validate_destination(destination)
        try:
            response = self.transport.post(url, data, self.content_type)
        except TransportError:
            raise
        except Exception as exc:
            raise TransportError(f"Transport failed for {url}: {exc}") from exc
        if not response.ok:
            raise TransportError(
                f"Upload to {url} rejected with status {response.status}",
                status=response.status,
            )
        LOGGER.info("Uploaded %d bytes to %s (status %d)", len(data), url, response.status)
        return UploadResponse(status=response.status, body=response.body or "")

    def acknowledge(self, payload: UploadPayload) -> None:
        """Drop the uploaded bytes from the active file.

        Nothing is touched unless the active file is still the one the
        payload was read from: same generation, device and inode. In that
        case the file is deleted when it holds exactly the payload, or the
        uploaded prefix is cut away when records were appended meanwhile.
        A file that was rotated, cleared, recreated or uploaded by an
        overlapping call is left alone even if its bytes look identical.
        """

        path = self.layout.active_path
        if self.layout.generation != payload.generation:
            LOGGER.info("Active log %s was replaced during upload; leaving it in place", path)
            return
        try:
            with path.open("rb") as handle:
                info = os.fstat(handle.fileno())
                current = handle.read()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise WriteError(f"Unable to read {path} after upload: {exc}") from exc

        if (info.st_dev, info.st_ino) != payload.identity:
            LOGGER.info("Active log %s is a different file than the one uploaded", path)
            return

        if current == payload.data:
            try:
                path.unlink()
            except FileNotFoundError:
                pass
            except OSError as exc:
                raise WriteError(f"Unable to delete uploaded log {path}: {exc}") from exc
            self.layout.bump_generation()
            return

        if not current.startswith(payload.data):
            LOGGER.warning("Active log %s changed during upload; leaving it in place", path)
            return

        try:
            atomic_write(path, current[len(payload.data):], prefix=".tmp_upload_")
        except OSError as exc:
            raise WriteError(f"Unable to trim uploaded records from {path}: {exc}") from exc
        self.layout.bump_generation()


__all__ = ["UploadPayload", "Uploader"]
