"""Tick scheduler driven by Qt timers."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QObject, QTimer


class _QtTickHandle:
    def __init__(self, timer: QTimer) -> None:
        self._timer: QTimer | None = timer

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None


class QtTickScheduler:
    """Schedules repeating callbacks on QTimers parented to ``owner``.

    Timers die with the owner widget, so a torn-down view never keeps ticking.
    """

    def __init__(self, owner: QObject) -> None:
        self._owner = owner

    def schedule_repeating(self, interval_seconds: float, callback: Callable[[], None]) -> _QtTickHandle:
        timer = QTimer(self._owner)
        timer.setInterval(int(interval_seconds * 1000))
        timer.timeout.connect(callback)
        timer.start()
        return _QtTickHandle(timer)
