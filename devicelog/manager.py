"""Serialized, non-blocking front end for the log file lifecycle."""
from __future__ import annotations

import inspect
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from threading import Lock
from typing import Callable, List, Optional, TypeVar

from .config import LogConfig
from .core.aggregator import Aggregator
from .core.cleaner import Cleaner
from .core.errors import DeviceLogError
from .core.rotation import RotationPolicy
from .core.storage import LogLayout
from .core.uploader import Uploader
from .core.writer import AppendWriter
from .formatting import EntryFormatter
from .transport import HttpxTransport, Transport
from .utils.types import LogRecord, UploadResponse

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class LogFileManager:
    """Owns one log directory and the single worker that mutates it.

    Every operation touching the files is queued on a one-thread executor,
    so they complete in submission order. Calls return a
    :class:`~concurrent.futures.Future` immediately; :meth:`log` is the
    best-effort entry point that never raises.

    Each upload runs on its own thread, so a hung network call delays only
    that upload. Only the read of the payload and the removal of the uploaded
    bytes go through the serial worker; the network call does not hold it.
    """

    def __init__(
        self,
        config: Optional[LogConfig] = None,
        *,
        directory: Optional[Path] = None,
        transport: Optional[Transport] = None,
        formatter: Optional[EntryFormatter] = None,
    ) -> None:
        self.config = config or LogConfig()
        self.layout = LogLayout(self.config, directory)
        self._lock = Lock()
        self.writer = AppendWriter(self.layout, RotationPolicy(self.layout), lock=self._lock)
        self.aggregator = Aggregator(self.layout)
        self.cleaner = Cleaner(self.layout)
        self._owns_transport = transport is None
        self._transport = transport
        self._uploader: Optional[Uploader] = None
        self._formatter = formatter
        self._serial = ThreadPoolExecutor(max_workers=1, thread_name_prefix="devicelog-io")
        self._upload_lock = Lock()
        self._upload_threads: List[threading.Thread] = []
        self._closed = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def directory(self) -> Path:
        return self.layout.directory

    @property
    def formatter(self) -> EntryFormatter:
        if self._formatter is None:
            self._formatter = EntryFormatter()
        return self._formatter

    @property
    def uploader(self) -> Uploader:
        with self._upload_lock:
            if self._uploader is None:
                if self._transport is None:
                    self._transport = HttpxTransport(timeout=self.config.upload_timeout)
                self._uploader = Uploader(self.layout, self._transport, lock=self._lock)
            return self._uploader

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------
    def append(self, record: LogRecord) -> "Future[None]":
        """Queue ``record``; the future raises :class:`WriteError` on failure."""

        return self._submit(self.writer.append, record)

    def log(self, message: str) -> Optional["Future[None]"]:
        """Format and queue ``message``. Failures are logged, never raised."""

        frame = inspect.currentframe()
        caller = frame.f_back if frame is not None else None
        try:
            if caller is not None:
                text = self.formatter.format(
                    message,
                    source_file=caller.f_code.co_filename,
                    line=caller.f_lineno,
                    function=caller.f_code.co_name,
                )
            else:
                text = self.formatter.format(message)
            future = self.append(LogRecord.from_text(text))
        except Exception:
            LOGGER.exception("Dropping log message")
            return None
        finally:
            del frame, caller
        future.add_done_callback(_report_failure)
        return future

    # ------------------------------------------------------------------
    # Reading and housekeeping
    # ------------------------------------------------------------------
    def read_all(self) -> "Future[str]":
        return self._submit(self.aggregator.read_all)

    def export(self, name: Optional[str] = None) -> "Future[Path]":
        """Write every log file into one export file inside the directory."""

        return self._submit(self.aggregator.export, name)

    def clear_all(self) -> "Future[int]":
        return self._submit(self.cleaner.clear_all)

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------
    def upload(self, destination: str) -> "Future[UploadResponse]":
        """Upload the active file; it is removed only after a 2xx answer."""

        future: "Future[UploadResponse]" = Future()
        thread = threading.Thread(
            target=self._run_upload,
            args=(future, destination),
            name="devicelog-upload",
            daemon=True,
        )
        with self._upload_lock:
            if self._closed:
                raise RuntimeError("cannot schedule new uploads after close")
            self._upload_threads = [t for t in self._upload_threads if t.is_alive()]
            self._upload_threads.append(thread)
            thread.start()
        return future

    def _run_upload(self, future: "Future[UploadResponse]", destination: str) -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            response = self._upload(destination)
        except Exception as exc:
            future.set_exception(exc)
        else:
            future.set_result(response)

    def _upload(self, destination: str) -> UploadResponse:
        uploader = self.uploader
        payload = self._submit(uploader.read_payload).result()
        response = uploader.send(destination, payload.data)
        self._submit(uploader.acknowledge, payload).result()
        return response

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def flush(self) -> None:
        """Block until every operation queued so far has completed."""

        self._serial.submit(lambda: None).result()

    def close(self) -> None:
        with self._upload_lock:
            self._closed = True
            pending = list(self._upload_threads)
        for thread in pending:
            thread.join()
        self._serial.shutdown(wait=True)
        if self._owns_transport and isinstance(self._transport, HttpxTransport):
            self._transport.close()

    def __enter__(self) -> "LogFileManager":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    def _submit(self, fn: Callable[..., T], *args) -> "Future[T]":
        return self._serial.submit(fn, *args)


def _report_failure(future: "Future[None]") -> None:
    exc = future.exception()
    if exc is None:
        return
    if isinstance(exc, DeviceLogError):
        LOGGER.warning("Log write failed: %s", exc)
    else:
        LOGGER.error("Unexpected failure while writing log", exc_info=exc)


__all__ = ["LogFileManager"]
