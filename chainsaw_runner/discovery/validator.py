"""Test validator.

Validates parsed TestSpec objects before they reach the runner.
"""

import re

from .model import (
    Step,
    TestSpec,
    ValidationError,
    ValidationResult,
    VALID_OPERATIONS,
)

BINDING_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
TEST_NAME = re.compile(r"^[a-z0-9]([-a-z0-9.]*[a-z0-9])?$")


def validate_test(spec: TestSpec) -> ValidationResult:
    """Validate a parsed test.

    Checks:
    - Name present and DNS-1123 compatible
    - Binding names, globally and per scenario
    - Every operation of every step is a single known operation

    Args:
        spec: Parsed TestSpec to validate.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []

    if not spec.name:
        errors.append(ValidationError(
            path="metadata.name",
            message="'name' is required and must not be empty.",
        ))
    elif not TEST_NAME.match(spec.name):
        errors.append(ValidationError(
            path="metadata.name",
            message=f"Invalid name '{spec.name}'. Must be lowercase alphanumeric, '-' or '.'.",
        ))

    _validate_bindings(spec.bindings, "spec.bindings", errors)
    for i, scenario in enumerate(spec.scenarios):
        _validate_bindings(scenario.bindings, f"spec.scenarios[{i}].bindings", errors)

    for i, step in enumerate(spec.steps):
        _validate_step(step, f"spec.steps[{i}]", errors, warnings)

    if not spec.steps:
        warnings.append(ValidationError(
            path="spec.steps",
            message="No steps defined.",
            severity="warning",
        ))

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_bindings(bindings, path: str, errors: list[ValidationError]) -> None:
    seen: set[str] = set()
    for i, binding in enumerate(bindings):
        if not binding.name or not BINDING_NAME.match(binding.name):
            errors.append(ValidationError(
                path=f"{path}[{i}].name",
                message=f"Invalid binding name '{binding.name}'.",
            ))
        elif binding.name in seen:
            errors.append(ValidationError(
                path=f"{path}[{i}].name",
                message=f"Duplicate binding '{binding.name}'.",
            ))
        seen.add(binding.name)


def _validate_step(
    step: Step,
    path: str,
    errors: list[ValidationError],
    warnings: list[ValidationError],
) -> None:
    if not step.operations:
        warnings.append(ValidationError(
            path=f"{path}.try",
            message="Step has no operations.",
            severity="warning",
        ))
    for field_name, operations in (("try", step.operations), ("cleanup", step.cleanup)):
        for j, operation in enumerate(operations):
            op_path = f"{path}.{field_name}[{j}]"
            if not isinstance(operation, dict):
                errors.append(ValidationError(
                    path=op_path,
                    message="Operation must be a mapping.",
                ))
                continue
            kinds = [key for key in operation if key in VALID_OPERATIONS]
            if len(kinds) != 1:
                errors.append(ValidationError(
                    path=op_path,
                    message=f"Operation must declare exactly one of: {', '.join(sorted(VALID_OPERATIONS))}",
                ))
