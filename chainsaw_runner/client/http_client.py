"""HTTP client for Kubernetes-style resource APIs.

Implements the REST paths used by the runner:
- GET    /api/v1/namespaces/:name                         - core, cluster scoped
- GET    /apis/:group/:version/namespaces/:ns/:plural/:name - grouped, namespaced
- POST   <collection path>                                 - create
- DELETE <resource path>                                   - delete
"""

import time
from typing import Any, Optional

import requests

from ..cancel import CancelToken
from ..errors import AlreadyExistsError, CancellationError, ClientError, NotFoundError
from ..log_config import get_logger
from .resource import GroupVersionKind, ObjectKey, Resource
from .retry_policy import RetryPolicy, default_retry_policy

logger = get_logger("client")

# Kinds served without a namespace segment.
CLUSTER_SCOPED_KINDS = frozenset({
    "Namespace",
    "Node",
    "PersistentVolume",
    "StorageClass",
    "ClusterRole",
    "ClusterRoleBinding",
    "CustomResourceDefinition",
    "PriorityClass",
    "ValidatingWebhookConfiguration",
    "MutatingWebhookConfiguration",
})

IRREGULAR_PLURALS = {
    "Endpoints": "endpoints",
    "NetworkPolicy": "networkpolicies",
    "PodSecurityPolicy": "podsecuritypolicies",
}


def plural(kind: str) -> str:
    """Best-effort resource name for a kind (``Ingress`` -> ``ingresses``)."""
    if kind in IRREGULAR_PLURALS:
        return IRREGULAR_PLURALS[kind]
    lower = kind.lower()
    if lower.endswith(("s", "x", "ch", "sh")):
        return lower + "es"
    if lower.endswith("y") and lower[-2:-1] not in ("a", "e", "i", "o", "u"):
        return lower[:-1] + "ies"
    return lower + "s"


def collection_path(gvk: GroupVersionKind, namespace: str = "") -> str:
    """URL path of the collection holding resources of ``gvk``."""
    if gvk.group:
        prefix = f"/apis/{gvk.group}/{gvk.version}"
    else:
        prefix = f"/api/{gvk.version}"
    if namespace and gvk.kind not in CLUSTER_SCOPED_KINDS:
        prefix += f"/namespaces/{namespace}"
    return f"{prefix}/{plural(gvk.kind)}"


def resource_path(gvk: GroupVersionKind, key: ObjectKey) -> str:
    return f"{collection_path(gvk, key.namespace)}/{key.name}"


class HttpClient:
    """Resource API client over HTTP.

    Talks to a Kubernetes-compatible API server with a bearer token.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        verify: bool = True,
        retry_policy: Optional[RetryPolicy] = None,
        request_timeout: float = 30.0,
    ):
        """Initialize HTTP client.

        Args:
            base_url: API server URL (e.g., https://127.0.0.1:6443).
            token: Bearer token; None = anonymous.
            verify: Verify the server TLS certificate.
            retry_policy: Retry policy for transient failures.
            request_timeout: Upper bound for a single request in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.retry_policy = retry_policy or default_retry_policy()
        self.request_timeout = request_timeout
        self._session = requests.Session()
        self._session.verify = verify
        self._session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    def get(
        self,
        gvk: GroupVersionKind,
        key: ObjectKey,
        cancel: Optional[CancelToken] = None,
    ) -> Resource:
        """Fetch a resource.

        Raises:
            NotFoundError: If the resource does not exist.
            ClientError: On any other API failure.
            CancellationError: If ``cancel`` fires first.
        """
        path = resource_path(gvk, key)
        response = self._request_with_retry("GET", path, cancel)
        return self._decode("GET", path, response)

    def create(self, obj: Resource, cancel: Optional[CancelToken] = None) -> Resource:
        """Create a resource and return the server's copy.

        Raises:
            AlreadyExistsError: If a resource with the same key exists.
            ClientError: On any other API failure.
            CancellationError: If ``cancel`` fires first.
        """
        path = collection_path(obj.group_version_kind(), obj.get_namespace())
        response = self._request_with_retry("POST", path, cancel, json=obj.to_dict())
        return self._decode("POST", path, response)

    def delete(self, obj: Resource, cancel: Optional[CancelToken] = None) -> None:
        """Delete a resource; background propagation."""
        path = resource_path(obj.group_version_kind(), obj.key())
        self._request_with_retry(
            "DELETE",
            path,
            cancel,
            json={"kind": "DeleteOptions", "apiVersion": "v1", "propagationPolicy": "Background"},
        )

    def _request_with_retry(
        self,
        method: str,
        path: str,
        cancel: Optional[CancelToken],
        **kwargs: Any,
    ) -> requests.Response:
        """Execute HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, DELETE).
            path: URL path below the base URL.
            cancel: Cancellation token bounding the whole call.
            **kwargs: Additional arguments for requests.

        Returns:
            Response object.
        """
        cancel = cancel or CancelToken()
        url = f"{self.base_url}{path}"
        attempt = 0

        while True:
            cancel.raise_if_cancelled()
            timeout = self.request_timeout
            remaining = cancel.remaining()
            if remaining is not None:
                # requests rejects a zero timeout
                if remaining <= 0:
                    raise CancellationError(cancel.reason)
                timeout = min(timeout, remaining)

            try:
                response = self._session.request(method, url, timeout=timeout, **kwargs)
            except (requests.ConnectionError, requests.Timeout) as e:
                if cancel.cancelled:
                    raise CancellationError(cancel.reason) from e
                if not self.retry_policy.should_retry(attempt):
                    raise ClientError(f"{method} {path} failed: {e}") from e
                self._backoff(method, path, attempt, str(e), cancel)
                attempt += 1
                continue
            except requests.RequestException as e:
                # malformed URL or request, not retried
                raise ClientError(f"{method} {path} failed: {e}") from e

            if response.status_code < 400:
                return response

            if self.retry_policy.should_retry(attempt, response.status_code):
                self._backoff(method, path, attempt, f"HTTP {response.status_code}", cancel)
                attempt += 1
                continue

            raise self._classify(method, path, response)

    def _backoff(
        self,
        method: str,
        path: str,
        attempt: int,
        error: str,
        cancel: CancelToken,
    ) -> None:
        delay = self.retry_policy.get_delay(attempt)
        logger.warning(
            f"{method} {path} failed (attempt {attempt + 1}), retrying in {delay:.2f}s: {error}",
            extra={"attempt": attempt + 1, "delay": delay, "error": error},
        )
        if cancel.wait(delay):
            raise CancellationError(cancel.reason)

    @staticmethod
    def _decode(method: str, path: str, response: requests.Response) -> Resource:
        """Parse a successful response body into a resource."""
        try:
            data = response.json()
        except ValueError as e:
            raise ClientError(f"{method} {path}: response is not JSON: {e}", response.status_code) from e
        if not isinstance(data, dict):
            raise ClientError(
                f"{method} {path}: expected a JSON object, got {type(data).__name__}",
                response.status_code,
            )
        return Resource(data)

    @staticmethod
    def _classify(method: str, path: str, response: requests.Response) -> ClientError:
        """Map an error response onto the client error kinds."""
        reason = ""
        message = response.text
        try:
            status = response.json()
            reason = status.get("reason", "")
            message = status.get("message", message)
        except ValueError:
            pass
        text = f"{method} {path}: {message or response.reason}"
        if response.status_code == 404:
            return NotFoundError(text, response.status_code, reason or "NotFound")
        if response.status_code == 409 and reason in ("", "AlreadyExists"):
            return AlreadyExistsError(text, response.status_code, reason or "AlreadyExists")
        return ClientError(text, response.status_code, reason)

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
