"""Engine module - execution context and its collaborators."""

from .cleaner import Cleaner, CleanupEntry
from .compilers import DEFAULT_COMPILER, Compilers, resolve_reference
from .context import Summary, TestContext, Timeouts
from .namespacer import Namespacer

__all__ = [
    "Cleaner",
    "CleanupEntry",
    "DEFAULT_COMPILER",
    "Compilers",
    "resolve_reference",
    "Summary",
    "TestContext",
    "Timeouts",
    "Namespacer",
]
