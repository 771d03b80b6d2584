import asyncio
from datetime import datetime, timedelta

import pytest

from quiz_portal.core.services.countdown_clock import (
    AsyncioTickScheduler,
    ClockState,
    CountdownClock,
)


@pytest.fixture
def clock(scheduler, time_source):
    return CountdownClock.for_duration(time_source(), 1, scheduler, time_source=time_source)


def test_deadline_is_start_plus_duration(clock, time_source):
    assert clock.deadline == time_source() + timedelta(minutes=1)
    assert clock.state is ClockState.PENDING
    assert clock.remaining() == timedelta(minutes=1)


def test_naive_deadline_is_rejected(scheduler):
    with pytest.raises(ValueError):
        CountdownClock(datetime(2024, 5, 1, 9, 0), scheduler)


def test_start_ticks_immediately(clock, scheduler):
    ticks = []
    clock.on_tick(ticks.append)

    clock.start()

    assert ticks == [timedelta(minutes=1)]
    assert clock.is_running()
    assert len(scheduler.active_handles) == 1


def test_start_twice_is_an_error(clock):
    clock.start()
    with pytest.raises(RuntimeError):
        clock.start()


def test_remaining_does_not_drift_with_missed_ticks(clock, scheduler, time_source):
    ticks = []
    clock.on_tick(ticks.append)
    clock.start()

    time_source.advance(10)
    scheduler.fire()
    # Three periods pass with no tick delivered at all.
    time_source.advance(25)
    scheduler.fire()

    assert ticks[-2:] == [timedelta(seconds=50), timedelta(seconds=25)]
    assert clock.remaining() == timedelta(seconds=25)


def test_remaining_seconds_rounds_up(clock, time_source):
    time_source.advance(0.5)

    assert clock.remaining_seconds() == 60


def test_expiry_fires_exactly_once(clock, scheduler, time_source):
    expired = []
    clock.on_expired(lambda: expired.append(clock.state))
    clock.start()

    time_source.advance(61)
    scheduler.fire()
    scheduler.fire()
    time_source.advance(30)
    scheduler.fire()

    assert expired == [ClockState.STOPPED]
    assert clock.has_expired()
    assert clock.remaining() == timedelta(0)
    assert scheduler.active_handles == []


def test_clock_already_past_deadline_expires_on_start(scheduler, time_source):
    started_at = time_source()
    time_source.advance(120)
    clock = CountdownClock.for_duration(started_at, 1, scheduler, time_source=time_source)
    expired = []
    clock.on_expired(lambda: expired.append(True))

    clock.start()

    assert expired == [True]
    assert clock.state is ClockState.STOPPED


def test_stop_cancels_ticks_and_expiry(clock, scheduler, time_source):
    ticks = []
    expired = []
    clock.on_tick(ticks.append)
    clock.on_expired(lambda: expired.append(True))
    clock.start()

    clock.stop()
    clock.stop()
    time_source.advance(120)
    scheduler.fire()

    assert len(ticks) == 1
    assert expired == []
    assert scheduler.handles[0].cancelled


def test_tick_listener_stopping_clock_suppresses_expiry(clock, scheduler, time_source):
    expired = []
    clock.on_tick(lambda remaining: clock.stop() if remaining == timedelta(0) else None)
    clock.on_expired(lambda: expired.append(True))
    clock.start()

    time_source.advance(60)
    scheduler.fire()

    assert expired == []


@pytest.mark.asyncio
async def test_asyncio_scheduler_repeats_until_cancelled():
    calls = []
    handle = AsyncioTickScheduler().schedule_repeating(0.01, lambda: calls.append(1))

    await asyncio.sleep(0.06)
    handle.cancel()
    seen = len(calls)
    await asyncio.sleep(0.03)

    assert seen >= 2
    assert len(calls) == seen
