"""Countdown towards a fixed attempt deadline.

Remaining time is always recomputed as ``deadline - now`` on every tick. The
periodic trigger only decides *when* the clock looks at the time, so a late or
skipped tick never shifts the deadline.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from enum import Enum, auto
import logging
import math
from typing import Callable, Protocol

from quiz_portal.constants.session_constants import TICK_INTERVAL_SECONDS
from quiz_portal.utils.time_utils import TimeSource, utc_now

logger = logging.getLogger(__name__)


class TickHandle(Protocol):
    def cancel(self) -> None:
        ...


class TickScheduler(Protocol):
    """Calls ``callback`` every ``interval_seconds`` until the handle is cancelled."""

    def schedule_repeating(self, interval_seconds: float, callback: Callable[[], None]) -> TickHandle:
        ...


class _AsyncioTickHandle:
    def __init__(self, loop: asyncio.AbstractEventLoop, interval_seconds: float, callback: Callable[[], None]) -> None:
        self._loop = loop
        self._interval = interval_seconds
        self._callback = callback
        self._timer: asyncio.TimerHandle | None = loop.call_later(interval_seconds, self._fire)
        self._cancelled = False

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._timer = self._loop.call_later(self._interval, self._fire)
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class AsyncioTickScheduler:
    """Tick scheduler backed by the running asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def schedule_repeating(self, interval_seconds: float, callback: Callable[[], None]) -> TickHandle:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioTickHandle(loop, interval_seconds, callback)


class ClockState(Enum):
    PENDING = auto()
    RUNNING = auto()
    STOPPED = auto()


class CountdownClock:
    """Emits ticks while running and fires ``expired`` exactly once."""

    def __init__(
        self,
        deadline: datetime,
        scheduler: TickScheduler,
        *,
        time_source: TimeSource = utc_now,
        interval_seconds: float = TICK_INTERVAL_SECONDS,
    ) -> None:
        if deadline.tzinfo is None:
            raise ValueError("Deadline must be timezone-aware.")
        self._deadline = deadline
        self._scheduler = scheduler
        self._time_source = time_source
        self._interval = interval_seconds
        self._state = ClockState.PENDING
        self._handle: TickHandle | None = None
        self._expired_fired = False
        self._tick_listeners: list[Callable[[timedelta], None]] = []
        self._expired_listeners: list[Callable[[], None]] = []

    @classmethod
    def for_duration(
        cls,
        started_at: datetime,
        duration_minutes: int,
        scheduler: TickScheduler,
        **kwargs,
    ) -> "CountdownClock":
        return cls(started_at + timedelta(minutes=duration_minutes), scheduler, **kwargs)

    @property
    def deadline(self) -> datetime:
        return self._deadline

    @property
    def state(self) -> ClockState:
        return self._state

    def is_running(self) -> bool:
        return self._state is ClockState.RUNNING

    def has_expired(self) -> bool:
        return self._expired_fired

    def on_tick(self, listener: Callable[[timedelta], None]) -> None:
        self._tick_listeners.append(listener)

    def on_expired(self, listener: Callable[[], None]) -> None:
        self._expired_listeners.append(listener)

    def remaining(self) -> timedelta:
        return max(timedelta(0), self._deadline - self._time_source())

    def remaining_seconds(self) -> int:
        """Whole seconds left, rounded up so the display hits 0 only at expiry."""
        return math.ceil(self.remaining().total_seconds())

    def start(self) -> None:
        if self._state is not ClockState.PENDING:
            raise RuntimeError(f"Clock cannot be started from state {self._state.name}.")
        self._state = ClockState.RUNNING
        self._handle = self._scheduler.schedule_repeating(self._interval, self._tick)
        logger.debug("Countdown started, deadline %s", self._deadline.isoformat())
        self._tick()

    def stop(self) -> None:
        if self._state is ClockState.STOPPED:
            return
        self._state = ClockState.STOPPED
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        logger.debug("Countdown stopped with %s remaining", self.remaining())

    def _tick(self) -> None:
        if self._state is not ClockState.RUNNING:
            return
        remaining = self.remaining()
        for listener in list(self._tick_listeners):
            listener(remaining)
        if self._state is not ClockState.RUNNING:
            return
        if remaining > timedelta(0) or self._expired_fired:
            return
        self._expired_fired = True
        logger.info("Countdown reached zero")
        # Stop before notifying so listeners observe a stopped clock.
        self.stop()
        for listener in list(self._expired_listeners):
            listener()
