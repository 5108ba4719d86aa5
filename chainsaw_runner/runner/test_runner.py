"""Per-unit runner: one test, or one test/scenario pair.

Runs inside the unit registered by the orchestrator:
1. Goes parallel if the test is concurrent
2. Skips tests marked skip, or everything once the run is cancelled
3. Binds ``$test`` and provisions a namespace if the batch has none
4. Binds test and scenario bindings
5. Runs each step with its own logger
6. Counts the unit once its cleanups have run
"""

import random
from typing import Any, Optional

from ..clock import Clock
from ..config import NamespaceOptions
from ..discovery.model import Test
from ..driver import Scheduler
from ..engine.context import TestContext
from ..engine.namespacer import Namespacer
from ..errors import CancellationError, ChainsawError
from ..logging import (
    BOLD_FG,
    BOLD_RED,
    Operation,
    Sink,
    Status,
    err_section,
    into_context,
    log,
    new_logger,
)
from .cleanup import setup_cleanup
from .failer import Failer
from .namespace import NamespaceData, setup_namespace
from .steps import StepExecutor

SETUP_STEP = "@setup"

_ADJECTIVES = [
    "amazed", "brave", "calm", "clever", "eager", "fancy", "gentle", "happy",
    "jolly", "kind", "lively", "mighty", "noble", "proud", "quick", "witty",
]
_NOUNS = [
    "badger", "beetle", "cobra", "falcon", "gecko", "heron", "jackal", "koala",
    "lemur", "marmot", "otter", "panda", "quail", "raven", "tapir", "walrus",
]


def random_namespace() -> str:
    """``chainsaw-<adjective>-<noun>``, unique enough for a run."""
    return f"chainsaw-{random.choice(_ADJECTIVES)}-{random.choice(_NOUNS)}-{random.randint(0, 9999):04d}"


class TestRunner:
    """Runs a single execution unit."""

    __test__ = False

    def __init__(
        self,
        sink: Sink,
        clock: Clock,
        failer: Failer,
        step_executor: Optional[StepExecutor] = None,
        color: bool = True,
        concurrent: bool = True,
    ):
        """Initialize test runner.

        Args:
            sink: Where audit lines go.
            clock: Clock stamping audit lines.
            failer: Failure policy.
            step_executor: Runs step operations (default: StepExecutor()).
            color: Style statuses.
            concurrent: Whether tests not saying otherwise run in parallel.
        """
        self.sink = sink
        self.clock = clock
        self.failer = failer
        self.step_executor = step_executor or StepExecutor()
        self.color = color
        self.concurrent = concurrent

    def run(
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
        spec = test.test
        concurrent = spec.concurrent if spec.concurrent is not None else self.concurrent
        if concurrent:
            t.parallel()
        if tc.cancel.cancelled:
            tc.inc_skipped()
            t.skip(f"run cancelled: {tc.cancel.reason}")
        if spec.skip:
            tc.inc_skipped()
            t.skip("test skipped")

        tc = into_context(tc, new_logger(self.sink, self.clock, spec.name, SETUP_STEP, color=self.color))
        outcome = {"cancelled": False}
        t.cleanup(lambda: self._count(tc, t, outcome["cancelled"]))

        tc = tc.with_binding("test", {
            "id": test_id,
            "scenarioId": scenario_id,
            "metadata": {"name": spec.name},
        })
        tc = tc.with_bindings(bindings)
        cleaner = setup_cleanup(tc, t, self.failer)

        try:
            # a test-level namespace overrides the shared one
            if namespacer is None or spec.namespace:
                compilers = tc.compilers
                if ns_options.compiler:
                    compilers = compilers.with_default_compiler(ns_options.compiler)
                tc, namespace = setup_namespace(tc, NamespaceData(
                    cleaner=cleaner,
                    compilers=compilers,
                    name=spec.namespace or random_namespace(),
                    template=spec.namespace_template or ns_options.template,
                ))
                namespacer = Namespacer(namespace.get_name())
            else:
                tc = tc.with_namespace(namespacer.get_namespace())

            tc = tc.with_bindings(self._evaluate(tc, {b.name: b.value for b in spec.bindings}))
            tc = tc.with_bindings(self._evaluate(tc, bindings))
        except ChainsawError as e:
            outcome["cancelled"] = isinstance(e, CancellationError)
            self._fail(tc, t, e)
            return

        for i, step in enumerate(spec.steps):
            step_name = step.name or f"step-{i + 1}"
            step_tc = into_context(tc, new_logger(self.sink, self.clock, spec.name, step_name, color=self.color))
            log(step_tc, Operation.INTERNAL, Status.BEGIN, color=BOLD_FG)
            try:
                self.step_executor.execute(step_tc, step, test.base_path, namespacer, cleaner)
            except ChainsawError as e:
                outcome["cancelled"] = isinstance(e, CancellationError)
                self._fail(step_tc, t, e)
                return
            finally:
                log(step_tc, Operation.INTERNAL, Status.END, color=BOLD_FG)

    @staticmethod
    def _evaluate(tc: TestContext, values: dict[str, Any]) -> dict[str, Any]:
        evaluated: dict[str, Any] = {}
        for name, value in values.items():
            evaluated[name] = tc.compilers.evaluate_template(value, {**tc.bindings, **evaluated})
        return evaluated

    def _fail(self, tc: TestContext, t: Scheduler, err: ChainsawError) -> None:
        log(tc, Operation.INTERNAL, Status.ERROR, err_section(err), color=BOLD_RED)
        self.failer.fail(t)

    @staticmethod
    def _count(tc: TestContext, t: Scheduler, cancelled: bool) -> None:
        if cancelled:
            return
        if t.failed:
            tc.inc_failed()
        else:
            tc.inc_passed()
