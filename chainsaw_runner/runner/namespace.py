"""Provisioning of the namespace tests run in."""

from dataclasses import dataclass
from typing import Any, Optional

from ..client.resource import Resource, merge
from ..engine.cleaner import Cleaner
from ..engine.compilers import Compilers
from ..engine.context import TestContext
from ..errors import (
    CancellationError,
    ChainsawError,
    NamespaceCreateError,
    NamespaceFetchError,
    NotFoundError,
)
from ..logging import Operation, Status, from_context


@dataclass
class NamespaceData:
    """What is needed to provision a namespace."""
    cleaner: Optional[Cleaner]
    compilers: Compilers
    name: str
    template: Optional[dict[str, Any]] = None


def build_namespace(tc: TestContext, data: NamespaceData) -> Resource:
    """Namespace object for ``data.name``, merged with the evaluated template."""
    namespace = Resource.new("v1", "Namespace", data.name)
    if data.template:
        bindings = dict(tc.bindings)
        bindings["namespace"] = data.name
        overlay = data.compilers.evaluate_template(data.template, bindings)
        if not isinstance(overlay, dict):
            raise NamespaceCreateError(f"namespace template must be a mapping, got {type(overlay).__name__}")
        namespace = Resource(merge(namespace.to_dict(), overlay))
        namespace.metadata["name"] = data.name
        namespace.metadata.pop("namespace", None)
    return namespace


def setup_namespace(
    tc: TestContext,
    data: NamespaceData,
) -> tuple[TestContext, Optional[Resource]]:
    """Ensure the namespace exists, creating it if needed.

    A namespace that already exists is used as is and left alone at
    teardown. A created one is registered with the cleaner.

    Returns:
        The context scoped to the namespace and the namespace object; the
        context unchanged and None when no name is requested.

    Raises:
        NamespaceFetchError: If looking the namespace up fails.
        NamespaceCreateError: If it cannot be built or created.
        CancellationError: If the context is cancelled meanwhile.
    """
    if not data.name:
        return tc, None
    if tc.client is None:
        raise NamespaceFetchError(f"cannot fetch namespace {data.name}: no cluster client configured")

    try:
        namespace = build_namespace(tc, data)
    except NamespaceCreateError:
        raise
    except ChainsawError as e:
        raise NamespaceCreateError(f"failed to build namespace {data.name}: {e}") from e

    client = tc.client
    current = from_context(tc)
    log = current.with_resource(namespace) if current is not None else None

    try:
        client.get(namespace.group_version_kind(), namespace.key(), cancel=tc.cancel)
    except CancellationError:
        raise
    except NotFoundError:
        try:
            client.create(namespace.deep_copy(), cancel=tc.cancel)
        except CancellationError:
            raise
        except ChainsawError as e:
            raise NamespaceCreateError(f"failed to create namespace {data.name}: {e}") from e
        if log is not None:
            log.log(Operation.CREATE, Status.OK)
        if data.cleaner is not None:
            data.cleaner.add(namespace, lambda obj, cancel: client.delete(obj, cancel=cancel))
    except ChainsawError as e:
        raise NamespaceFetchError(f"failed to get namespace {data.name}: {e}") from e

    return tc.with_namespace(data.name), namespace
