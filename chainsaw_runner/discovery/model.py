"""Data models for declarative tests.

Defines dataclasses representing ``kind: Test`` documents.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

TEST_API_VERSIONS = {"chainsaw.kyverno.io/v1alpha1", "chainsaw.kyverno.io/v1alpha2"}
TEST_KIND = "Test"

# Step operations a test may declare.
VALID_OPERATIONS = {
    "apply",
    "assert",
    "command",
    "create",
    "delete",
    "error",
    "patch",
    "script",
    "sleep",
    "update",
    "wait",
}


@dataclass
class Binding:
    """A named value made available to templates as ``$name``."""
    name: str
    value: Any = None


@dataclass
class Scenario:
    """One set of bindings the test runs under."""
    bindings: list[Binding] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {b.name: b.value for b in self.bindings}


@dataclass
class Step:
    """A single test step: an ordered list of operations."""
    name: str = ""
    description: str = ""
    operations: list[dict[str, Any]] = field(default_factory=list)
    cleanup: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class TestSpec:
    """A parsed ``kind: Test`` document."""
    name: str
    description: str = ""
    namespace: str = ""
    namespace_template: Optional[dict[str, Any]] = None
    concurrent: Optional[bool] = None
    skip: bool = False
    bindings: list[Binding] = field(default_factory=list)
    scenarios: list[Scenario] = field(default_factory=list)
    steps: list[Step] = field(default_factory=list)

    __test__ = False


@dataclass
class Test:
    """A discovered test: where it came from and what it parsed to.

    ``error`` is set, and ``test`` may be None, when the file could not be
    loaded or failed validation.
    """
    base_path: str
    test: Optional[TestSpec] = None
    error: Optional[Exception] = None

    __test__ = False


@dataclass
class ValidationError:
    """A single validation error."""
    path: str
    message: str
    severity: str = "error"  # "error" or "warning"


@dataclass
class ValidationResult:
    """Result of test validation."""
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def __str__(self) -> str:
        if self.valid:
            msg = "Valid"
            if self.warnings:
                msg += f" ({self.warning_count} warnings)"
            return msg
        details = "; ".join(f"{e.path}: {e.message}" for e in self.errors)
        return f"Invalid: {details}"
