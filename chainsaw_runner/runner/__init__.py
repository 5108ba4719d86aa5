"""Runner module - test orchestration."""

from .cleanup import setup_cleanup
from .failer import Failer
from .names import NameResolver, resolve_test_name
from .namespace import NamespaceData, build_namespace, setup_namespace
from .runner import ROOT_NAME, Runner, RunResult, new_context
from .scenarios import ExecutionUnit, expand_scenarios
from .steps import StepExecutor
from .test_runner import TestRunner, random_namespace
from .tests import BATCH_STEP, run_tests

__all__ = [
    "setup_cleanup",
    "Failer",
    "NameResolver",
    "resolve_test_name",
    "NamespaceData",
    "build_namespace",
    "setup_namespace",
    "ROOT_NAME",
    "Runner",
    "RunResult",
    "new_context",
    "ExecutionUnit",
    "expand_scenarios",
    "StepExecutor",
    "TestRunner",
    "random_namespace",
    "BATCH_STEP",
    "run_tests",
]
