"""Time helpers shared by the session clock and the reference server."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

TimeSource = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
