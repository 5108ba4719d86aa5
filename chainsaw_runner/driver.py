"""Test-tree driver running named, nested execution units.

Each call to :meth:`T.run` registers a child unit and runs its body on its
own thread. A body that calls :meth:`T.parallel` is released back to its
parent immediately and resumes once the parent's body has returned, bounded
by the tree-wide parallelism. A unit's cleanups run after its body and all
of its parallel children have finished, last registered first.

Example:
    def batch(t):
        t.run("first", lambda t: ...)
        t.run("first", lambda t: ...)   # registered as "first#01"

    root = run_tree("chainsaw", batch, parallel=4)
    print(root.failed)
"""

import re
import threading
import time
from typing import Callable, Optional, Protocol

from .log_config import get_logger

logger = get_logger("driver")

Body = Callable[["T"], None]


class _FailNow(BaseException):
    """Unwinds a body after fail_now()."""


class _SkipNow(BaseException):
    """Unwinds a body after skip()."""


class Scheduler(Protocol):
    """What the runner needs from a test-tree driver."""

    name: str

    def run(self, name: str, body: Body) -> bool: ...

    def fail(self) -> None: ...

    @property
    def failed(self) -> bool: ...

    def cleanup(self, fn: Callable[[], None]) -> None: ...

    def parallel(self) -> None: ...

    def skip(self, reason: str = "") -> None: ...


class T:
    """One node of the execution tree."""

    __test__ = False

    def __init__(
        self,
        name: str,
        parent: Optional["T"] = None,
        semaphore: Optional[threading.Semaphore] = None,
    ):
        self.name = name
        self.parent = parent
        self.children: list[T] = []
        self.messages: list[str] = []
        self.skip_reason = ""
        self.duration = 0.0
        self._semaphore = semaphore
        self._holds_slot = False
        self._lock = threading.Lock()
        self._failed = False
        self._skipped = False
        self._is_parallel = False
        self._child_names: dict[str, int] = {}
        self._cleanups: list[Callable[[], None]] = []
        self._parallel_threads: list[threading.Thread] = []
        self._body_done = threading.Event()
        self._released = threading.Event()

    @property
    def base_name(self) -> str:
        return self.name.rsplit("/", 1)[-1]

    @property
    def failed(self) -> bool:
        with self._lock:
            return self._failed

    @property
    def skipped(self) -> bool:
        with self._lock:
            return self._skipped

    def fail(self) -> None:
        with self._lock:
            self._failed = True

    def fail_now(self) -> None:
        self.fail()
        raise _FailNow()

    def error(self, message: str) -> None:
        self.log(message)
        self.fail()

    def skip(self, reason: str = "") -> None:
        with self._lock:
            self._skipped = True
        self.skip_reason = reason
        raise _SkipNow()

    def log(self, message: str) -> None:
        with self._lock:
            self.messages.append(message)

    def cleanup(self, fn: Callable[[], None]) -> None:
        with self._lock:
            self._cleanups.append(fn)

    def parallel(self) -> None:
        """Pause until the parent's body returns, then run alongside siblings."""
        if self.parent is None:
            raise RuntimeError("parallel() called on the root unit")
        self._is_parallel = True
        self._released.set()
        self.parent._body_done.wait()
        if self._semaphore is not None:
            self._semaphore.acquire()
            self._holds_slot = True

    def run(self, name: str, body: Body) -> bool:
        """Run ``body`` as a child unit named ``name``.

        Returns False if the child failed; True if it passed or went
        parallel (its outcome is then known once this unit finishes).
        """
        child = T(f"{self.name}/{self._unique_name(name)}", parent=self, semaphore=self._semaphore)
        with self._lock:
            self.children.append(child)
        thread = threading.Thread(target=child._execute, args=(body,), name=child.name, daemon=True)
        thread.start()
        child._released.wait()
        if child._is_parallel:
            with self._lock:
                self._parallel_threads.append(thread)
            return True
        thread.join()
        return not child.failed

    def _unique_name(self, name: str) -> str:
        name = re.sub(r"\s", "_", name)
        with self._lock:
            count = self._child_names.get(name, 0)
            self._child_names[name] = count + 1
        if count == 0:
            return name
        return f"{name}#{count:02d}"

    def _execute(self, body: Body) -> None:
        start = time.monotonic()
        try:
            body(self)
        except (_FailNow, _SkipNow):
            pass
        except Exception as e:
            logger.exception(f"Unit {self.name} raised")
            self.error(f"panic: {type(e).__name__}: {e}")
        finally:
            self._body_done.set()
            self._wait_parallel_children()
            self._run_cleanups()
            if self._holds_slot:
                self._semaphore.release()
                self._holds_slot = False
            self.duration = time.monotonic() - start
            if self.failed and self.parent is not None:
                self.parent.fail()
            self._released.set()

    def _wait_parallel_children(self) -> None:
        with self._lock:
            threads = list(self._parallel_threads)
        if not threads:
            return
        # give the slot back while children run, they may need it
        held = self._holds_slot
        if held:
            self._semaphore.release()
            self._holds_slot = False
        for thread in threads:
            thread.join()
        if held:
            self._semaphore.acquire()
            self._holds_slot = True

    def _run_cleanups(self) -> None:
        with self._lock:
            cleanups = list(reversed(self._cleanups))
            self._cleanups.clear()
        for fn in cleanups:
            try:
                fn()
            except (_FailNow, _SkipNow):
                pass
            except Exception as e:
                logger.exception(f"Cleanup of {self.name} raised")
                self.error(f"cleanup panic: {type(e).__name__}: {e}")

    def walk(self):
        """Yield this unit and all its descendants, depth first."""
        yield self
        for child in list(self.children):
            yield from child.walk()


def run_tree(name: str, body: Body, parallel: int = 1) -> T:
    """Run ``body`` as the root unit on the calling thread.

    Args:
        name: Root unit name.
        body: Callable receiving the root :class:`T`.
        parallel: Maximum number of parallel units running at once.

    Returns:
        The finished root unit.
    """
    root = T(name, semaphore=threading.BoundedSemaphore(max(1, parallel)))
    root._execute(body)
    return root
