"""Expansion of a test into its execution units."""

from dataclasses import dataclass, field
from typing import Any

from ..discovery.model import Test


@dataclass(frozen=True)
class ExecutionUnit:
    """A named test or test/scenario pair ready to run.

    ``test_id`` is 1-based; ``scenario_id`` is 0 for tests without
    scenarios and 1-based otherwise.
    """
    name: str
    test_id: int
    scenario_id: int = 0
    bindings: dict[str, Any] = field(default_factory=dict)


def expand_scenarios(name: str, test_id: int, test: Test) -> list[ExecutionUnit]:
    """One unit per declared scenario, or a single unit if there are none."""
    scenarios = test.test.scenarios if test.test is not None else []
    if not scenarios:
        return [ExecutionUnit(name=name, test_id=test_id)]
    return [
        ExecutionUnit(
            name=name,
            test_id=test_id,
            scenario_id=i + 1,
            bindings=scenario.as_dict(),
        )
        for i, scenario in enumerate(scenarios)
    ]
