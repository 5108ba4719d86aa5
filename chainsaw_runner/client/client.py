"""Resource API client capability used by the runner."""

from typing import Optional, Protocol

from ..cancel import CancelToken
from .resource import GroupVersionKind, ObjectKey, Resource


class Client(Protocol):
    """Minimal resource API surface.

    ``get`` raises :class:`~chainsaw_runner.errors.NotFoundError` when the
    resource does not exist; every other failure is a
    :class:`~chainsaw_runner.errors.ClientError`. Calls honour ``cancel`` and
    raise :class:`~chainsaw_runner.errors.CancellationError` once it fires.
    """

    def get(
        self,
        gvk: GroupVersionKind,
        key: ObjectKey,
        cancel: Optional[CancelToken] = None,
    ) -> Resource: ...

    def create(self, obj: Resource, cancel: Optional[CancelToken] = None) -> Resource: ...

    def delete(self, obj: Resource, cancel: Optional[CancelToken] = None) -> None: ...
