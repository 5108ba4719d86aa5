"""Execution names of tests."""

import os
import threading

from ..discovery.model import Test
from ..errors import NameResolutionError


def resolve_test_name(full_name: bool, test: Test) -> str:
    """Name a test runs under.

    With ``full_name`` the name is ``<relative base path>[<test name>]``,
    otherwise just the test name.

    Raises:
        NameResolutionError: If the test failed discovery, has no
            definition or no name, or its path cannot be made relative.
    """
    if test.error is not None:
        raise NameResolutionError(f"test at {test.base_path} failed to load: {test.error}")
    if test.test is None:
        raise NameResolutionError(f"test at {test.base_path} has no definition")
    if not test.test.name:
        raise NameResolutionError(f"test at {test.base_path} has no name")
    if not full_name:
        return test.test.name
    try:
        rel = os.path.relpath(os.path.abspath(test.base_path), os.getcwd())
    except ValueError as e:
        raise NameResolutionError(f"cannot resolve path of test {test.test.name}: {e}") from e
    return f"{rel}[{test.test.name}]"



class NameResolver:
    """Resolves test names and rejects duplicates within one batch."""

    def __init__(self):
        self._seen: set[str] = set()
        self._lock = threading.Lock()

    def resolve(self, full_name: bool, test: Test) -> str:
        name = resolve_test_name(full_name, test)
        with self._lock:
            if name in self._seen:
                raise NameResolutionError(
                    f"duplicate test name '{name}' (from {test.base_path})"
                )
            self._seen.add(name)
        return name

    @property
    def resolved(self) -> frozenset:
        with self._lock:
            return frozenset(self._seen)
