"""Deferred teardown of resources created during a run."""

import threading
from dataclasses import dataclass
from typing import Callable, Optional

from ..cancel import CancelToken
from ..client.resource import Resource
from ..errors import ChainsawError, NotFoundError
from ..logging import BOLD_RED, Operation, Status, err_section

DeleteFn = Callable[[Resource, CancelToken], None]


@dataclass
class CleanupEntry:
    """A resource and the callback deleting it."""
    obj: Resource
    callback: DeleteFn


class Cleaner:
    """Collects cleanup obligations and runs them last-in, first-out."""

    def __init__(self, timeout: Optional[float] = None):
        """Initialize cleaner.

        Args:
            timeout: Deadline in seconds for each deletion (None = unbounded).
        """
        self.timeout = timeout
        self._entries: list[CleanupEntry] = []
        self._lock = threading.Lock()

    def add(self, obj: Resource, callback: DeleteFn) -> None:
        with self._lock:
            self._entries.append(CleanupEntry(obj=obj, callback=callback))

    @property
    def empty(self) -> bool:
        with self._lock:
            return not self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def run(self, tc) -> list[Exception]:
        """Run all registered callbacks in reverse order.

        Deletions run even when the run itself was cancelled. Already-deleted
        resources are not errors. Returns the errors of the
        callbacks that failed; the remaining callbacks still run.
        """
        with self._lock:
            entries = list(reversed(self._entries))
            self._entries.clear()

        errors: list[Exception] = []
        for entry in entries:
            log = tc.logger.with_resource(entry.obj) if tc.logger is not None else None
            cancel = CancelToken().with_timeout(self.timeout)
            try:
                entry.callback(entry.obj, cancel)
            except NotFoundError:
                pass
            except ChainsawError as e:
                if log is not None:
                    log.log(Operation.DELETE, Status.ERROR, err_section(e), color=BOLD_RED)
                errors.append(e)
            else:
                if log is not None:
                    log.log(Operation.DELETE, Status.OK)
        return errors
