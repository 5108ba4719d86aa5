"""Batch orchestration: turns discovered tests into named execution units.

For one batch the orchestrator:
1. Injects a logger for the batch (step ``@chainsaw``) into the context
2. Registers a cleaner on the batch unit
3. Provisions the shared namespace, once, if one is configured
4. Resolves a unique name for every test
5. Registers one unit per scenario (or one unit) with the driver
"""

from typing import Optional

from ..config import NamespaceOptions
from ..discovery.model import Test
from ..driver import Scheduler
from ..engine.context import TestContext
from ..engine.namespacer import Namespacer
from ..errors import CancellationError, ChainsawError, NameResolutionError
from ..logging import BOLD_RED, Operation, Status, err_section, into_context, log, new_logger
from .cleanup import setup_cleanup
from .names import NameResolver
from .namespace import NamespaceData, setup_namespace
from .scenarios import ExecutionUnit, expand_scenarios

BATCH_STEP = "@chainsaw"


def run_tests(
    runner,
    tc: TestContext,
    t: Scheduler,
    ns_options: NamespaceOptions,
    *tests: Test,
) -> None:
    """Register every test of the batch as units of ``t``.

    Namespace failures abort the batch before any unit is registered. Name
    failures skip the one test and the batch carries on.
    """
    tc = into_context(tc, new_logger(runner.sink, runner.clock, t.name, BATCH_STEP, color=runner.color))
    cleaner = setup_cleanup(tc, t, runner.failer)

    namespacer: Optional[Namespacer] = None
    if ns_options.name:
        compilers = tc.compilers
        if ns_options.compiler:
            compilers = compilers.with_default_compiler(ns_options.compiler)
        data = NamespaceData(
            cleaner=cleaner,
            compilers=compilers,
            name=ns_options.name,
            template=ns_options.template,
        )
        try:
            ns_tc, namespace = setup_namespace(tc, data)
        except ChainsawError as e:
            fail(runner, tc, t, e)
            return
        tc = ns_tc
        if namespace is not None:
            namespacer = Namespacer(namespace.get_name())

    resolver = NameResolver()
    for i, test in enumerate(tests):
        try:
            name = resolver.resolve(tc.full_name, test)
        except NameResolutionError as e:
            fail(runner, tc, t, e)
            continue
        for unit in expand_scenarios(name, i + 1, test):
            t.run(unit.name, _unit_body(runner, tc, ns_options, namespacer, test, unit))


def fail(runner, tc: TestContext, t: Scheduler, err: ChainsawError) -> None:
    """Log ``err`` and fail ``t``; cancellation is not counted as a failure."""
    log(tc, Operation.INTERNAL, Status.ERROR, err_section(err), color=BOLD_RED)
    t.fail()
    if not isinstance(err, CancellationError):
        tc.inc_failed()
    runner.failer.fail(t)


def _unit_body(runner, tc, ns_options, namespacer, test, unit: ExecutionUnit):
    def body(t: Scheduler) -> None:
        runner.run_test(
            tc,
            t,
            ns_options,
            namespacer,
            test,
            unit.test_id,
            unit.scenario_id,
            unit.bindings,
        )

    return body
