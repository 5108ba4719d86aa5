"""Clock sources used to stamp audit log lines."""

import threading
from datetime import datetime, timedelta
from typing import Optional, Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class RealClock:
    """Wall clock."""

    def now(self) -> datetime:
        return datetime.now()


class FakeClock:
    """Clock frozen at a given instant until stepped."""

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime.now()
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def step(self, delta: timedelta) -> None:
        with self._lock:
            self._now += delta

    def set(self, instant: datetime) -> None:
        with self._lock:
            self._now = instant
