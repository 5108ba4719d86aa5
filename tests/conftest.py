import threading
from datetime import datetime

import pytest

from chainsaw_runner.client import FakeClient, Resource
from chainsaw_runner.clock import FakeClock
from chainsaw_runner.discovery import Binding, Scenario, Step, Test, TestSpec
from chainsaw_runner.engine import TestContext


class CaptureSink:
    """Sink recording every line written to it."""

    def __init__(self):
        self.messages = []
        self._lock = threading.Lock()

    def __call__(self, line):
        with self._lock:
            self.messages.append(line)

    @property
    def text(self):
        return "\n".join(self.messages)


@pytest.fixture
def fake_clock():
    return FakeClock(datetime(2024, 5, 1, 10, 2, 3))


@pytest.fixture
def sink():
    return CaptureSink()


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def tc(fake_client):
    return TestContext(client=fake_client)


@pytest.fixture
def pod():
    return Resource({
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {"name": "web", "namespace": "default"},
    })


def make_test(name="test", base_path=".", scenarios=None, steps=None, error=None, **kwargs):
    """Build a discovered test; scenarios are lists of binding dicts."""
    spec = TestSpec(
        name=name,
        scenarios=[
            Scenario(bindings=[Binding(name=k, value=v) for k, v in bindings.items()])
            for bindings in (scenarios or [])
        ],
        steps=steps or [],
        **kwargs,
    )
    return Test(base_path=base_path, test=spec, error=error)


def make_step(*operations, name=""):
    return Step(name=name, operations=list(operations))


@pytest.fixture(name="make_test")
def make_test_fixture():
    return make_test


@pytest.fixture(name="make_step")
def make_step_fixture():
    return make_step
