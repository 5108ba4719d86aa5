import pytest

from chainsaw_runner.client import FakeClient, Resource
from chainsaw_runner.discovery import Step
from chainsaw_runner.engine import Cleaner, Namespacer, TestContext
from chainsaw_runner.errors import AlreadyExistsError, CancellationError, DiscoveryError
from chainsaw_runner.logging import into_context, new_logger
from chainsaw_runner.runner import StepExecutor

POD = {"apiVersion": "v1", "kind": "Pod", "metadata": {"name": "web"}}


@pytest.fixture
def step_tc(sink, fake_clock, fake_client):
    tc = TestContext(client=fake_client).with_binding("suffix", "blue")
    return into_context(tc, new_logger(sink, fake_clock, "test", "step", color=False))


@pytest.fixture
def executor():
    return StepExecutor()


class TestApply:
    def test_apply_creates_and_registers_cleanup(self, executor, step_tc, fake_client, sink):
        cleaner = Cleaner()

        executor.execute(step_tc, Step(operations=[{"apply": {"resource": POD}}]), ".", Namespacer("ns"), cleaner)

        assert fake_client.create_calls == 1
        assert len(cleaner) == 1
        assert any("v1/Pod @ ns/web" in m and "APPLY" in m for m in sink.messages)

    def test_apply_existing_is_unchanged(self, executor, step_tc, fake_client, sink):
        fake_client.create(Resource(dict(POD, metadata={"name": "web", "namespace": "ns"})))
        cleaner = Cleaner()

        executor.execute(step_tc, Step(operations=[{"apply": {"resource": POD}}]), ".", Namespacer("ns"), cleaner)

        assert cleaner.empty
        assert any("unchanged" in m for m in sink.messages)

    def test_create_existing_fails(self, executor, step_tc, fake_client):
        fake_client.create(Resource.new("v1", "Pod", "web"))

        with pytest.raises(AlreadyExistsError):
            executor.execute(step_tc, Step(operations=[{"create": {"resource": POD}}]), ".", None, None)

    def test_templates_are_evaluated(self, executor, step_tc, fake_client):
        manifest = {"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "($suffix)"}}

        executor.execute(step_tc, Step(operations=[{"create": {"resource": manifest}}]), ".", None, None)

        assert [key[3] for key in fake_client.objects] == ["blue"]

    def test_file_resources(self, executor, step_tc, fake_client, tmp_path):
        (tmp_path / "pods.yaml").write_text(
            "apiVersion: v1\nkind: Pod\nmetadata:\n  name: a\n---\n"
            "apiVersion: v1\nkind: Pod\nmetadata:\n  name: b\n"
        )

        executor.execute(step_tc, Step(operations=[{"apply": {"file": "pods.yaml"}}]), str(tmp_path), None, None)

        assert fake_client.create_calls == 2

    def test_missing_file(self, executor, step_tc, tmp_path):
        with pytest.raises(DiscoveryError):
            executor.execute(step_tc, Step(operations=[{"apply": {"file": "nope.yaml"}}]), str(tmp_path), None, None)


class TestDelete:
    def test_delete_missing_is_ok(self, executor, step_tc, fake_client, sink):
        executor.execute(step_tc, Step(operations=[{"delete": {"ref": POD}}]), ".", None, None)

        assert fake_client.delete_calls == 1
        assert any("DELETE" in m for m in sink.messages)


class TestSleep:
    def test_sleep_is_cancellable(self, executor, step_tc):
        step_tc.cancel.cancel("stop")

        with pytest.raises(CancellationError):
            executor.sleep(step_tc, {"duration": "10s"})

    def test_zero_sleep(self, executor, step_tc, sink):
        executor.execute(step_tc, Step(operations=[{"sleep": {"duration": "0s"}}]), ".", None, None)

        assert any("SLEEP" in m and "DONE" in m for m in sink.messages)


class TestUnsupported:
    def test_warns(self, executor, step_tc, sink):
        executor.execute(step_tc, Step(operations=[{"assert": {"resource": POD}}]), ".", None, None)

        assert any("WARN" in m and "no engine for operation: assert" in m for m in sink.messages)


class TestCleanupOperations:
    def test_cleanup_runs_after_failure(self, executor, step_tc, fake_client):
        fake_client.create(Resource.new("v1", "Pod", "web"))
        step = Step(
            operations=[{"create": {"resource": POD}}],
            cleanup=[{"delete": {"ref": POD}}],
        )

        with pytest.raises(AlreadyExistsError):
            executor.execute(step_tc, step, ".", None, None)

        assert fake_client.delete_calls == 1
        assert fake_client.objects == {}
