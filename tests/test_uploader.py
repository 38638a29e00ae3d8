"""Tests for the upload-then-delete protocol."""

from __future__ import annotations

from pathlib import Path

import pytest

from devicelog.config import LogConfig
from devicelog.core.cleaner import Cleaner
from devicelog.core.errors import InvalidDestination, NotFound, TransportError, UploadError
from devicelog.core.storage import LogLayout
from devicelog.core.uploader import Uploader
from devicelog.core.writer import AppendWriter
from devicelog.utils.types import LogRecord

from .fakes import CrashingTransport, FailingTransport, RecordingTransport

URL = "https://logs.example.com/ingest"


@pytest.fixture()
def layout(tmp_path: Path) -> LogLayout:
    layout = LogLayout(LogConfig(), tmp_path)
    writer = AppendWriter(layout)
    writer.append(LogRecord.from_text("hello"))
    writer.append(LogRecord.from_text("world"))
    return layout


def test_successful_upload_deletes_active_file(layout: LogLayout) -> None:
    transport = RecordingTransport(body="stored")
    response = Uploader(layout, transport).upload(URL)

    assert response.status == 200
    assert response.body == "stored"
    assert transport.calls == [(URL, b"hello\nworld\n", "text/plain")]
    assert not layout.active_path.exists()


def test_empty_body_is_reported_as_empty_success(layout: LogLayout) -> None:
    response = Uploader(layout, RecordingTransport(status=204)).upload(URL)
    assert response.is_empty
    assert not layout.active_path.exists()


def test_transport_failure_keeps_file_byte_for_byte(layout: LogLayout) -> None:
    before = layout.active_path.read_bytes()

    with pytest.raises(TransportError):
        Uploader(layout, FailingTransport()).upload(URL)

    assert layout.active_path.read_bytes() == before


def test_unexpected_transport_exception_is_wrapped(layout: LogLayout) -> None:
    with pytest.raises(TransportError) as excinfo:
        Uploader(layout, CrashingTransport()).upload(URL)
    assert isinstance(excinfo.value.__cause__, ConnectionResetError)
    assert layout.active_path.exists()


def test_server_rejection_keeps_file(layout: LogLayout) -> None:
    with pytest.raises(TransportError) as excinfo:
        Uploader(layout, RecordingTransport(status=503)).upload(URL)
    assert excinfo.value.status == 503
    assert layout.active_path.read_text("utf-8") == "hello\nworld\n"


def test_missing_active_file_is_not_found(tmp_path: Path) -> None:
    transport = RecordingTransport()
    with pytest.raises(NotFound):
        Uploader(LogLayout(LogConfig(), tmp_path), transport).upload(URL)
    assert transport.calls == []


@pytest.mark.parametrize("destination", ["", "ftp://logs.example.com/", "not a url", "https:///path"])
def test_invalid_destination_is_rejected_before_sending(layout: LogLayout, destination: str) -> None:
    transport = RecordingTransport()
    with pytest.raises(InvalidDestination):
        Uploader(layout, transport).upload(destination)
    assert transport.calls == []
    assert layout.active_path.exists()


def test_records_appended_during_upload_survive(layout: LogLayout) -> None:
    writer = AppendWriter(layout)

    def _late_append() -> None:
        writer.append(LogRecord.from_text("late"))

    uploader = Uploader(layout, RecordingTransport(on_post=_late_append))
    payload = uploader.read_payload()
    uploader.send(URL, payload.data)
    uploader.acknowledge(payload)

    assert layout.active_path.read_text("utf-8") == "late\n"


def test_acknowledge_leaves_replaced_file_alone(layout: LogLayout) -> None:
    uploader = Uploader(layout, RecordingTransport())
    payload = uploader.read_payload()
    layout.active_path.write_text("fresh\n", encoding="utf-8")

    uploader.acknowledge(payload)

    assert layout.active_path.read_text("utf-8") == "fresh\n"


def test_unreadable_active_file_is_not_reported_as_missing(
    layout: LogLayout, monkeypatch: pytest.MonkeyPatch
) -> None:
    original = Path.open

    def _open(self: Path, *args, **kwargs):
        if self == layout.active_path:
            raise PermissionError("denied")
        return original(self, *args, **kwargs)

    monkeypatch.setattr(Path, "open", _open)
    with pytest.raises(UploadError) as excinfo:
        Uploader(layout, RecordingTransport()).upload(URL)
    assert not isinstance(excinfo.value, NotFound)
    assert isinstance(excinfo.value.__cause__, PermissionError)


def test_identical_file_recreated_during_upload_is_kept(layout: LogLayout) -> None:
    writer = AppendWriter(layout)

    def _clear_and_rewrite() -> None:
        Cleaner(layout).clear_all()
        writer.append(LogRecord.from_text("hello"))
        writer.append(LogRecord.from_text("world"))

    Uploader(layout, RecordingTransport(on_post=_clear_and_rewrite)).upload(URL)

    assert layout.active_path.read_text("utf-8") == "hello\nworld\n"


def test_rotation_during_upload_keeps_both_files(tmp_path: Path) -> None:
    layout = LogLayout(LogConfig(max_bytes=1), tmp_path)
    writer = AppendWriter(layout)
    writer.append(LogRecord.from_text("beat"))

    uploader = Uploader(layout, RecordingTransport(on_post=lambda: writer.append(LogRecord.from_text("beat"))))
    uploader.upload(URL)

    assert layout.rotated_path(1).read_text("utf-8") == "beat\n"
    assert layout.active_path.read_text("utf-8") == "beat\n"


def test_acknowledge_skips_a_different_inode(layout: LogLayout) -> None:
    uploader = Uploader(layout, RecordingTransport())
    payload = uploader.read_payload()
    replacement = layout.directory / "replacement.txt"
    replacement.write_bytes(payload.data)
    replacement.replace(layout.active_path)

    uploader.acknowledge(payload)

    assert layout.active_path.read_bytes() == payload.data
