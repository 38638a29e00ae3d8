"""Rendering of human-readable log entries."""
from __future__ import annotations

import os
import platform
import uuid
from datetime import datetime, timezone
from importlib import metadata
from pathlib import Path
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .utils.types import AppIdentity

_LOCALTIME = Path("/etc/localtime")


def default_identity(distribution: Optional[str] = None) -> AppIdentity:
    """Describe the running application and host.

    ``distribution`` names an installed package whose metadata supplies the
    app name and version; unknown values fall back to placeholders.
    """

    app_name = AppIdentity.app_name
    app_version = AppIdentity.app_version
    if distribution:
        try:
            dist = metadata.distribution(distribution)
        except metadata.PackageNotFoundError:
            pass
        else:
            app_name = dist.metadata.get("Name") or distribution
            app_version = dist.version or app_version

    os_name = " ".join(part for part in (platform.system(), platform.release()) if part)
    return AppIdentity(
        app_name=app_name,
        app_version=app_version,
        build=AppIdentity.build,
        os=os_name or AppIdentity.os,
        model=platform.machine() or AppIdentity.model,
        device_id=f"{uuid.getnode():012x}",
    )


def local_zone_name() -> Optional[str]:
    """Return the IANA name of the host time zone, e.g. ``Europe/Berlin``.

    Looks at ``TZ`` first, then at the ``/etc/localtime`` symlink. Returns
    ``None`` when neither names a zone known to :mod:`zoneinfo`.
    """

    candidates = []
    tz_env = os.environ.get("TZ", "").lstrip(":")
    if tz_env:
        candidates.append(tz_env)
    try:
        target = str(_LOCALTIME.resolve())
    except OSError:
        target = ""
    marker = "zoneinfo/"
    if marker in target:
        candidates.append(target.split(marker, 1)[1])

    for name in candidates:
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            continue
        return name
    return None


def _local_now() -> datetime:
    name = local_zone_name()
    if name is not None:
        return datetime.now(ZoneInfo(name))
    return datetime.now(timezone.utc).astimezone()


def zone_label(moment: datetime) -> str:
    """IANA key for ``ZoneInfo``-aware datetimes, the abbreviation otherwise."""

    key = getattr(moment.tzinfo, "key", None)
    if key:
        return key
    return moment.tzname() or "UTC"


class EntryFormatter:
    """Formats ``message`` with timestamp, app details and call site.

    A single trailing newline on the message is dropped; the writer adds the
    record separator.
    """

    def __init__(
        self,
        identity: Optional[AppIdentity] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.identity = identity or default_identity()
        self._clock = clock or _local_now

    def format(
        self,
        message: str,
        *,
        source_file: str = "",
        line: int = 0,
        function: str = "",
    ) -> str:
        if message.endswith("\n"):
            message = message[:-1]
        now = self._clock()
        location = f"{Path(source_file).name}:{line} → {function}" if source_file else function
        identity = self.identity
        return (
            f"[{now.isoformat(timespec='seconds')}]"
            f"[{identity.app_name}][{identity.app_version}]"
            f"[{zone_label(now)}][{identity.os}][{location}] {message}"
        )


__all__ = ["EntryFormatter", "default_identity", "local_zone_name", "zone_label"]
