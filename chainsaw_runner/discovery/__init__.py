"""Discovery module - loading declarative tests."""

from .loader import DEFAULT_FILE_NAME, discover_tests, load_test_file, parse_test_data
from .model import (
    Binding,
    Scenario,
    Step,
    Test,
    TestSpec,
    ValidationError,
    ValidationResult,
)
from .validator import validate_test

__all__ = [
    "DEFAULT_FILE_NAME",
    "discover_tests",
    "load_test_file",
    "parse_test_data",
    "Binding",
    "Scenario",
    "Step",
    "Test",
    "TestSpec",
    "ValidationError",
    "ValidationResult",
    "validate_test",
]
