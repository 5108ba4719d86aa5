"""Exception hierarchy for chainsaw-runner."""


class ChainsawError(Exception):
    """Base exception for all chainsaw-runner errors."""

    pass


class CancellationError(ChainsawError):
    """Raised when the caller gave up: cancellation or deadline."""

    pass


class ClientError(ChainsawError):
    """Raised when the resource API rejects or fails a request."""

    def __init__(self, message: str, status_code: int = 0, reason: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


class NotFoundError(ClientError):
    """Raised when the requested resource does not exist."""

    pass


class AlreadyExistsError(ClientError):
    """Raised when creating a resource that already exists."""

    pass


class NamespaceFetchError(ChainsawError):
    """Raised when fetching the shared namespace fails for a reason other than absence."""

    pass


class NamespaceCreateError(ChainsawError):
    """Raised when the shared namespace cannot be created."""

    pass


class NameResolutionError(ChainsawError):
    """Raised when a test name is malformed or collides with a sibling."""

    pass


class DiscoveryError(ChainsawError):
    """Raised when a test file cannot be loaded or is invalid."""

    pass


class ConfigurationError(ChainsawError):
    """Raised when configuration is invalid or missing."""

    pass


class TemplateError(ChainsawError):
    """Raised when a template expression cannot be evaluated."""

    pass
