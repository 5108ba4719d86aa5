"""Failure policy applied when a unit fails."""

from typing import Optional

from ..cancel import CancelToken
from ..driver import Scheduler


class Failer:
    """Marks units failed; with fail-fast, also stops the rest of the run."""

    def __init__(self, fail_fast: bool = False, cancel: Optional[CancelToken] = None):
        self.fail_fast = fail_fast
        self.cancel = cancel

    def fail(self, t: Scheduler) -> None:
        t.fail()
        if self.fail_fast and self.cancel is not None:
            self.cancel.cancel("fail fast")
