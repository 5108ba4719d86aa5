"""Execution context shared by every unit of a batch.

:class:`TestContext` is a frozen value; ``with_*`` methods derive new
contexts. All contexts derived from one batch share the same
:class:`Summary`, the only mutable state crossing execution units.
"""

import dataclasses
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping, Optional

from ..cancel import CancelToken
from .compilers import Compilers

if TYPE_CHECKING:
    from ..client.client import Client
    from ..logging import Logger


class Summary:
    """Thread-safe pass/fail/skip counters."""

    def __init__(self):
        self._lock = threading.Lock()
        self._passed = 0
        self._failed = 0
        self._skipped = 0

    def inc_passed(self) -> None:
        with self._lock:
            self._passed += 1

    def inc_failed(self) -> None:
        with self._lock:
            self._failed += 1

    def inc_skipped(self) -> None:
        with self._lock:
            self._skipped += 1

    @property
    def passed(self) -> int:
        with self._lock:
            return self._passed

    @property
    def failed(self) -> int:
        with self._lock:
            return self._failed

    @property
    def skipped(self) -> int:
        with self._lock:
            return self._skipped

    def to_dict(self) -> dict[str, int]:
        with self._lock:
            return {"passed": self._passed, "failed": self._failed, "skipped": self._skipped}


@dataclass(frozen=True)
class Timeouts:
    """Per-operation timeouts in seconds."""
    apply: float = 5.0
    assertion: float = 30.0
    cleanup: float = 30.0
    delete: float = 15.0
    error: float = 30.0
    exec: float = 5.0


@dataclass(frozen=True)
class TestContext:
    """Everything a unit needs to run, threaded explicitly through calls."""
    summary: Summary = field(default_factory=Summary)
    client: Optional["Client"] = None
    compilers: Compilers = field(default_factory=Compilers)
    bindings: Mapping[str, Any] = field(default_factory=dict)
    timeouts: Timeouts = field(default_factory=Timeouts)
    full_name: bool = False
    skip_delete: bool = False
    namespace: str = ""
    cancel: CancelToken = field(default_factory=CancelToken)
    logger: Optional["Logger"] = None

    __test__ = False  # not a pytest class

    def inc_passed(self) -> None:
        self.summary.inc_passed()

    def inc_failed(self) -> None:
        self.summary.inc_failed()

    def inc_skipped(self) -> None:
        self.summary.inc_skipped()

    def with_logger(self, logger: "Logger") -> "TestContext":
        return dataclasses.replace(self, logger=logger)

    def with_client(self, client: "Client") -> "TestContext":
        return dataclasses.replace(self, client=client)

    def with_compilers(self, compilers: Compilers) -> "TestContext":
        return dataclasses.replace(self, compilers=compilers)

    def with_cancel(self, cancel: CancelToken) -> "TestContext":
        return dataclasses.replace(self, cancel=cancel)

    def with_binding(self, name: str, value: Any) -> "TestContext":
        bindings = dict(self.bindings)
        bindings[name] = value
        return dataclasses.replace(self, bindings=bindings)

    def with_bindings(self, values: Mapping[str, Any]) -> "TestContext":
        bindings = dict(self.bindings)
        bindings.update(values)
        return dataclasses.replace(self, bindings=bindings)

    def with_namespace(self, namespace: str) -> "TestContext":
        """Scope the context to ``namespace`` and bind ``$namespace``."""
        return dataclasses.replace(self, namespace=namespace).with_binding("namespace", namespace)
