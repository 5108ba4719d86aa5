"""Cancellation tokens threaded through every blocking call."""

import threading
import time
from typing import Optional

from .errors import CancellationError


class CancelToken:
    """Cooperative cancellation signal with an optional deadline.

    A child token created with :meth:`with_timeout` is cancelled when its
    parent is, or when its own deadline passes, whichever comes first.
    """

    def __init__(
        self,
        deadline: Optional[float] = None,
        parent: Optional["CancelToken"] = None,
    ):
        self._event = threading.Event()
        self._deadline = deadline
        self._parent = parent
        self._reason = ""

    def with_timeout(self, seconds: Optional[float]) -> "CancelToken":
        """Derive a child token expiring ``seconds`` from now (None = no deadline)."""
        deadline = time.monotonic() + seconds if seconds is not None else None
        if self._deadline is not None and (deadline is None or self._deadline < deadline):
            deadline = self._deadline
        return CancelToken(deadline=deadline, parent=self)

    def cancel(self, reason: str = "context canceled") -> None:
        self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return True
        return self._parent is not None and self._parent.cancelled

    @property
    def reason(self) -> str:
        if self._event.is_set():
            return self._reason
        if self._parent is not None and self._parent.cancelled:
            return self._parent.reason
        return "context deadline exceeded"

    def remaining(self) -> Optional[float]:
        """Seconds left before the nearest deadline, None if unbounded."""
        deadlines = []
        token: Optional[CancelToken] = self
        while token is not None:
            if token._deadline is not None:
                deadlines.append(token._deadline)
            token = token._parent
        if not deadlines:
            return None
        return max(0.0, min(deadlines) - time.monotonic())

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise CancellationError(self.reason)

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; returns True if cancelled meanwhile."""
        end = time.monotonic() + seconds
        while True:
            if self.cancelled:
                return True
            left = end - time.monotonic()
            remaining = self.remaining()
            if remaining is not None:
                left = min(left, remaining)
            if left <= 0:
                return self.cancelled
            self._event.wait(min(left, 0.1))
