from unittest.mock import Mock

from chainsaw_runner.client import Resource
from chainsaw_runner.engine import Cleaner, Namespacer, TestContext
from chainsaw_runner.errors import ClientError, NotFoundError
from chainsaw_runner.logging import into_context, new_logger


class TestCleaner:
    def test_runs_in_reverse_order(self):
        cleaner = Cleaner()
        calls = []
        for name in ("first", "second", "third"):
            cleaner.add(Resource.new("v1", "ConfigMap", name, "ns"), lambda obj, cancel: calls.append(obj.get_name()))

        errors = cleaner.run(TestContext())

        assert errors == []
        assert calls == ["third", "second", "first"]
        assert cleaner.empty

    def test_collects_errors_and_continues(self, sink, fake_clock):
        cleaner = Cleaner()
        ok = Mock()
        cleaner.add(Resource.new("v1", "ConfigMap", "a", "ns"), ok)
        cleaner.add(Resource.new("v1", "ConfigMap", "b", "ns"), Mock(side_effect=ClientError("forbidden", 403)))
        tc = into_context(TestContext(), new_logger(sink, fake_clock, "t", "s", color=False))

        errors = cleaner.run(tc)

        assert len(errors) == 1
        ok.assert_called_once()
        assert any("DELETE" in m and "ERROR" in m and "ns/b" in m for m in sink.messages)
        assert any("DELETE" in m and "OK" in m and "ns/a" in m for m in sink.messages)

    def test_already_deleted_is_not_an_error(self):
        cleaner = Cleaner()
        cleaner.add(Resource.new("v1", "ConfigMap", "a", "ns"), Mock(side_effect=NotFoundError("gone", 404)))

        assert cleaner.run(TestContext()) == []

    def test_runs_even_when_run_is_cancelled(self):
        tc = TestContext()
        tc.cancel.cancel()
        cleaner = Cleaner(timeout=5)
        seen = []
        cleaner.add(Resource.new("v1", "ConfigMap", "a", "ns"), lambda obj, cancel: seen.append(cancel.cancelled))

        cleaner.run(tc)

        assert seen == [False]


class TestNamespacer:
    def test_sets_missing_namespace(self):
        obj = Resource.new("v1", "ConfigMap", "a")

        Namespacer("chainsaw").apply(obj)

        assert obj.get_namespace() == "chainsaw"

    def test_keeps_explicit_namespace(self):
        obj = Resource.new("v1", "ConfigMap", "a", "other")

        Namespacer("chainsaw").apply(obj)

        assert obj.get_namespace() == "other"

    def test_ignores_cluster_scoped(self):
        obj = Resource.new("v1", "Namespace", "a")

        Namespacer("chainsaw").apply(obj)

        assert obj.get_namespace() == ""
