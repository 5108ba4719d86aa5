from datetime import timedelta
from unittest.mock import Mock

import click
import pytest

from chainsaw_runner.client import GroupVersionKind, Resource
from chainsaw_runner.engine import TestContext
from chainsaw_runner.logging import (
    BOLD_RED,
    Logger,
    Operation,
    Status,
    err_section,
    from_context,
    into_context,
    log,
    new_logger,
    section,
)


class FakeResource:
    def __init__(self, name, namespace, gvk):
        self._name = name
        self._namespace = namespace
        self._gvk = gvk

    def get_name(self):
        return self._name

    def get_namespace(self):
        return self._namespace

    def group_version_kind(self):
        return self._gvk


@pytest.fixture
def resource():
    return FakeResource("testResource", "default", GroupVersionKind("testGroup", "v1", "testKind"))


class TestNewLogger:
    def test_fields(self, sink, fake_clock):
        logger = new_logger(sink, fake_clock, "testName", "stepName")

        assert logger.sink is sink
        assert logger.clock is fake_clock
        assert logger.test == "testName"
        assert logger.step == "stepName"
        assert logger.resource is None


class TestLog:
    def test_without_resource(self, sink, fake_clock):
        logger = new_logger(sink, fake_clock, "testName", "stepName")

        logger.log(Operation.CREATE, Status.OK, "arg1", "arg2")

        assert len(sink.messages) == 1
        line = sink.messages[0]
        for expected in ("testName", "stepName", "CREATE", "OK", "arg1", "arg2"):
            assert expected in line
        assert " @ " not in line

    def test_with_resource(self, sink, fake_clock, resource):
        logger = new_logger(sink, fake_clock, "testName", "stepName").with_resource(resource)

        logger.log(Operation.CREATE, Status.OK, "arg1", "arg2")

        line = sink.messages[0]
        for expected in ("testName", "stepName", "CREATE", "default/testResource", "testGroup/v1/testKind", "arg1", "arg2"):
            assert expected in line

    def test_field_order(self, sink, fake_clock, resource):
        logger = new_logger(sink, fake_clock, "testName", "stepName", color=False).with_resource(resource)

        logger.log(Operation.APPLY, Status.OK, "tail")

        line = sink.messages[0]
        positions = [line.index(s) for s in ("10:02:03", "testName", "stepName", "testGroup/v1/testKind", "APPLY", "OK", "tail")]
        assert positions == sorted(positions)

    def test_core_group_resource(self, sink, fake_clock, pod):
        new_logger(sink, fake_clock, "t", "s").with_resource(pod).log(Operation.GET, Status.OK)

        assert "v1/Pod @ default/web" in sink.messages[0]

    def test_cluster_scoped_resource(self, sink, fake_clock):
        ns = Resource.new("v1", "Namespace", "chainsaw")

        new_logger(sink, fake_clock, "t", "s").with_resource(ns).log(Operation.CREATE, Status.OK)

        assert "v1/Namespace @ chainsaw |" in sink.messages[0]

    def test_clock_stamp(self, sink, fake_clock):
        logger = new_logger(sink, fake_clock, "t", "s")
        logger.log(Operation.INTERNAL, Status.LOG)
        fake_clock.step(timedelta(seconds=7))
        logger.log(Operation.INTERNAL, Status.LOG)

        assert sink.messages[0].startswith("| 10:02:03 |")
        assert sink.messages[1].startswith("| 10:02:10 |")

    def test_one_write_per_call_with_sections(self, sink, fake_clock):
        logger = new_logger(sink, fake_clock, "t", "s")

        logger.log(Operation.INTERNAL, Status.ERROR, err_section(ValueError("boom\nsecond line")))

        assert len(sink.messages) == 1
        assert sink.messages[0].splitlines()[1:] == ["=== ERROR", "boom", "second line"]

    def test_named_section(self, sink, fake_clock):
        new_logger(sink, fake_clock, "t", "s").log(Operation.SCRIPT, Status.LOG, section("STDOUT", "hello"))

        assert "=== STDOUT\nhello" in sink.messages[0]

    def test_color(self, sink, fake_clock):
        new_logger(sink, fake_clock, "t", "s").log(Operation.INTERNAL, Status.ERROR, color=BOLD_RED)
        new_logger(sink, fake_clock, "t", "s", color=False).log(Operation.INTERNAL, Status.ERROR, color=BOLD_RED)

        assert "\x1b[" in sink.messages[0]
        assert click.unstyle(sink.messages[0]) == sink.messages[1]

    def test_sink_failure_does_not_raise(self, fake_clock):
        failing = Mock(side_effect=OSError("closed"))
        logger = new_logger(failing, fake_clock, "t", "s")

        logger.log(Operation.INTERNAL, Status.LOG, "ignored")

        failing.assert_called_once()


class TestWithResource:
    def test_valid_resource(self, sink, fake_clock, resource):
        logger = Logger(sink=sink, clock=fake_clock, test="testName", step="stepName")

        derived = logger.with_resource(resource)

        assert derived.resource is resource
        assert derived.sink is logger.sink
        assert derived.clock is logger.clock
        assert derived.test == logger.test
        assert derived.step == logger.step

    def test_none_resource(self, sink, fake_clock, resource):
        logger = Logger(sink=sink, clock=fake_clock, test="testName", step="stepName", resource=resource)

        derived = logger.with_resource(None)

        assert derived.resource is None
        assert derived.test == "testName"

    def test_does_not_mutate_receiver(self, sink, fake_clock, resource):
        base = new_logger(sink, fake_clock, "testName", "stepName")

        base.with_resource(resource)
        base.log(Operation.GET, Status.OK)

        assert base.resource is None
        assert "testResource" not in sink.messages[0]
        assert "testGroup" not in sink.messages[0]

    def test_sibling_derivations_are_independent(self, sink, fake_clock, resource, pod):
        base = new_logger(sink, fake_clock, "testName", "stepName")

        first = base.with_resource(resource)
        second = base.with_resource(pod)
        first.log(Operation.GET, Status.OK)

        assert first.resource is resource
        assert second.resource is pod
        assert "default/web" not in sink.messages[0]

    def test_identity_is_frozen(self, sink, fake_clock):
        logger = new_logger(sink, fake_clock, "testName", "stepName")

        with pytest.raises(AttributeError):
            logger.test = "other"


class TestContextAccessors:
    def test_round_trip(self, sink, fake_clock):
        logger = new_logger(sink, fake_clock, "t", "s")
        base = TestContext()

        derived = into_context(base, logger)

        assert from_context(derived) is logger
        assert from_context(base) is None

    def test_log_helper(self, sink, fake_clock):
        tc = into_context(TestContext(), new_logger(sink, fake_clock, "t", "s"))

        log(tc, Operation.INTERNAL, Status.LOG, "hello")
        log(TestContext(), Operation.INTERNAL, Status.LOG, "dropped")

        assert len(sink.messages) == 1
        assert "hello" in sink.messages[0]
