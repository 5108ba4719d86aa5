"""Client module - resource API access."""

from .client import Client
from .http_client import HttpClient
from .resource import GroupVersionKind, ObjectKey, Resource, ResourceLike
from .retry_policy import RetryPolicy, default_retry_policy, no_retry_policy
from .testing import FakeClient

__all__ = [
    "Client",
    "HttpClient",
    "GroupVersionKind",
    "ObjectKey",
    "Resource",
    "ResourceLike",
    "RetryPolicy",
    "default_retry_policy",
    "no_retry_policy",
    "FakeClient",
]
