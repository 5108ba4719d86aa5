"""Unstructured resource model shared by the client, cleaner and logger."""

import copy
from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class GroupVersionKind:
    """API group, version and kind of a resource."""
    group: str
    version: str
    kind: str

    @classmethod
    def from_api_version(cls, api_version: str, kind: str) -> "GroupVersionKind":
        if "/" in api_version:
            group, version = api_version.split("/", 1)
        else:
            group, version = "", api_version
        return cls(group=group, version=version, kind=kind)

    @property
    def api_version(self) -> str:
        if self.group:
            return f"{self.group}/{self.version}"
        return self.version

    def __str__(self) -> str:
        return f"{self.api_version}/{self.kind}"


@dataclass(frozen=True)
class ObjectKey:
    """Namespace and name identifying a resource of a known kind."""
    name: str
    namespace: str = ""

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name


@runtime_checkable
class ResourceLike(Protocol):
    """Anything exposing a name, a namespace and a group/version/kind."""

    def get_name(self) -> str: ...

    def get_namespace(self) -> str: ...

    def group_version_kind(self) -> GroupVersionKind: ...


class Resource:
    """A cluster resource held as its raw mapping.

    Example:
        ns = Resource({"apiVersion": "v1", "kind": "Namespace",
                       "metadata": {"name": "chainsaw"}})
    """

    def __init__(self, data: Optional[dict[str, Any]] = None):
        self.data: dict[str, Any] = data if data is not None else {}
        self.data.setdefault("metadata", {})

    @classmethod
    def new(
        cls,
        api_version: str,
        kind: str,
        name: str,
        namespace: str = "",
    ) -> "Resource":
        metadata: dict[str, Any] = {"name": name}
        if namespace:
            metadata["namespace"] = namespace
        return cls({"apiVersion": api_version, "kind": kind, "metadata": metadata})

    @property
    def metadata(self) -> dict[str, Any]:
        return self.data["metadata"]

    def get_name(self) -> str:
        return self.metadata.get("name", "") or ""

    def get_namespace(self) -> str:
        return self.metadata.get("namespace", "") or ""

    def set_namespace(self, namespace: str) -> None:
        self.metadata["namespace"] = namespace

    def get_labels(self) -> dict[str, str]:
        return self.metadata.get("labels") or {}

    def group_version_kind(self) -> GroupVersionKind:
        return GroupVersionKind.from_api_version(
            self.data.get("apiVersion", ""), self.data.get("kind", "")
        )

    def key(self) -> ObjectKey:
        return ObjectKey(name=self.get_name(), namespace=self.get_namespace())

    def deep_copy(self) -> "Resource":
        return Resource(copy.deepcopy(self.data))

    def to_dict(self) -> dict[str, Any]:
        return self.data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Resource):
            return NotImplemented
        return self.data == other.data

    def __repr__(self) -> str:
        return f"Resource({self.group_version_kind()} {self.key()})"


def merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``overlay`` into a copy of ``base``; overlay wins."""
    result = copy.deepcopy(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result
