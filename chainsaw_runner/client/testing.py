"""In-memory client for tests and dry runs."""

import threading
from typing import Callable, Optional

from ..cancel import CancelToken
from ..errors import AlreadyExistsError, NotFoundError
from .resource import GroupVersionKind, ObjectKey, Resource

GetFn = Callable[[int, GroupVersionKind, ObjectKey], Resource]
CreateFn = Callable[[int, Resource], Optional[Resource]]
DeleteFn = Callable[[int, Resource], None]


class FakeClient:
    """Client double backed by a dict, with per-call overrides.

    When ``get_fn``/``create_fn``/``delete_fn`` are set they receive the
    0-based call number and replace the in-memory behaviour.
    """

    def __init__(
        self,
        get_fn: Optional[GetFn] = None,
        create_fn: Optional[CreateFn] = None,
        delete_fn: Optional[DeleteFn] = None,
    ):
        self.get_fn = get_fn
        self.create_fn = create_fn
        self.delete_fn = delete_fn
        self.get_calls = 0
        self.create_calls = 0
        self.delete_calls = 0
        self.objects: dict[tuple, Resource] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _store_key(gvk: GroupVersionKind, key: ObjectKey) -> tuple:
        return (gvk.group, gvk.kind, key.namespace, key.name)

    def get(
        self,
        gvk: GroupVersionKind,
        key: ObjectKey,
        cancel: Optional[CancelToken] = None,
    ) -> Resource:
        if cancel is not None:
            cancel.raise_if_cancelled()
        with self._lock:
            call = self.get_calls
            self.get_calls += 1
        if self.get_fn is not None:
            return self.get_fn(call, gvk, key)
        with self._lock:
            obj = self.objects.get(self._store_key(gvk, key))
        if obj is None:
            raise NotFoundError(f"{gvk.kind} {key} not found", 404, "NotFound")
        return obj.deep_copy()

    def create(self, obj: Resource, cancel: Optional[CancelToken] = None) -> Resource:
        if cancel is not None:
            cancel.raise_if_cancelled()
        with self._lock:
            call = self.create_calls
            self.create_calls += 1
        if self.create_fn is not None:
            return self.create_fn(call, obj) or obj
        store_key = self._store_key(obj.group_version_kind(), obj.key())
        with self._lock:
            if store_key in self.objects:
                raise AlreadyExistsError(f"{obj.group_version_kind().kind} {obj.key()} already exists", 409)
            self.objects[store_key] = obj.deep_copy()
        return obj

    def delete(self, obj: Resource, cancel: Optional[CancelToken] = None) -> None:
        if cancel is not None:
            cancel.raise_if_cancelled()
        with self._lock:
            call = self.delete_calls
            self.delete_calls += 1
        if self.delete_fn is not None:
            self.delete_fn(call, obj)
            return
        store_key = self._store_key(obj.group_version_kind(), obj.key())
        with self._lock:
            if self.objects.pop(store_key, None) is None:
                raise NotFoundError(f"{obj.group_version_kind().kind} {obj.key()} not found", 404)
