"""Default namespace for resources that do not set one."""

from ..client.http_client import CLUSTER_SCOPED_KINDS
from ..client.resource import Resource


class Namespacer:
    """Fills in the namespace of namespaced resources lacking one."""

    def __init__(self, namespace: str):
        self._namespace = namespace

    def apply(self, obj: Resource) -> None:
        if obj.group_version_kind().kind in CLUSTER_SCOPED_KINDS:
            return
        if not obj.get_namespace():
            obj.set_namespace(self._namespace)

    def get_namespace(self) -> str:
        return self._namespace

    def __repr__(self) -> str:
        return f"Namespacer({self._namespace!r})"
