"""Top-level run entry point."""

from dataclasses import dataclass
from typing import Any, Optional

import click

from ..clock import Clock, RealClock
from ..config import Configuration, NamespaceOptions
from ..discovery.model import Test
from ..driver import Scheduler, T, run_tree
from ..engine.compilers import Compilers
from ..engine.context import Summary, TestContext
from ..engine.namespacer import Namespacer
from ..logging import Sink
from .failer import Failer
from .test_runner import TestRunner
from .tests import run_tests

ROOT_NAME = "chainsaw"


@dataclass
class RunResult:
    """Outcome of a run: the execution tree and the counters."""
    root: T
    summary: Summary

    @property
    def failed(self) -> bool:
        return self.root.failed or self.summary.failed > 0


class Runner:
    """Runs batches of tests.

    Args:
        clock: Clock stamping log lines (wall clock by default).
        sink: Where audit lines go (``click.echo`` by default).
        failer: Failure policy; plain failing by default.
        test_runner: Per-unit runner; built from the other collaborators
            when not given.
        color: Style statuses in the audit log.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        sink: Optional[Sink] = None,
        failer: Optional[Failer] = None,
        test_runner: Optional[TestRunner] = None,
        color: bool = True,
    ):
        self.clock = clock or RealClock()
        self.sink = sink or click.echo
        self.failer = failer or Failer()
        self.color = color
        self.test_runner = test_runner or TestRunner(
            sink=self.sink, clock=self.clock, failer=self.failer, color=color
        )

    def run(
        self,
        tc: TestContext,
        ns_options: NamespaceOptions,
        tests: list[Test],
        parallel: int = 1,
    ) -> RunResult:
        """Run ``tests`` as one batch under a root unit."""
        root = run_tree(
            ROOT_NAME,
            lambda t: self.run_tests(tc, t, ns_options, *tests),
            parallel=parallel,
        )
        return RunResult(root=root, summary=tc.summary)

    def run_tests(self, tc: TestContext, t: Scheduler, ns_options: NamespaceOptions, *tests: Test) -> None:
        run_tests(self, tc, t, ns_options, *tests)

    def run_test(
        self,
        tc: TestContext,
        t: Scheduler,
        ns_options: NamespaceOptions,
        namespacer: Optional[Namespacer],
        test: Test,
        test_id: int,
        scenario_id: int,
        bindings: dict[str, Any],
    ) -> None:
        self.test_runner.run(tc, t, ns_options, namespacer, test, test_id, scenario_id, bindings)


def new_context(config: Configuration, client=None, compilers: Optional[Compilers] = None) -> TestContext:
    """Build the batch context from a configuration."""
    return TestContext(
        client=client,
        compilers=compilers or Compilers(),
        timeouts=config.timeouts,
        full_name=config.full_name,
        skip_delete=config.skip_delete,
    )
