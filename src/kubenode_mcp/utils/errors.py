"""Error types for kubenode-mcp.

Every error carries a stable ``code`` so tool callers can react to the
failure class without parsing messages.
"""

from typing import Any


class KubeNodeError(Exception):
    """Base exception for kubenode-mcp errors."""

    code = "internal"
    retryable = False

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Render the error as a tool response payload."""
        result: dict[str, Any] = {
            "error": self.__class__.__name__,
            "code": self.code,
            "retryable": self.retryable,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class NotFoundError(KubeNodeError):
    """Requested resource does not exist."""

    code = "not_found"

    def __init__(self, resource_type: str, name: str, namespace: str | None = None) -> None:
        location = f" in namespace '{namespace}'" if namespace else ""
        super().__init__(
            f"{resource_type} '{name}' not found{location}",
            {"resource_type": resource_type, "name": name, "namespace": namespace},
        )
        self.resource_type = resource_type
        self.name = name
        self.namespace = namespace


class ConflictError(KubeNodeError):
    """Optimistic-concurrency collision with another writer."""

    code = "conflict"
    retryable = True


class ValidationError(KubeNodeError):
    """Malformed or unacceptable input."""

    code = "validation"


class UpstreamError(KubeNodeError):
    """Kubernetes API or network failure."""

    code = "upstream"


class DeadlineExceededError(UpstreamError):
    """The caller's deadline passed before the operation could complete."""

    code = "deadline_exceeded"
    retryable = True


class TemplatingError(KubeNodeError):
    """Building the desired state of an object failed."""

    code = "templating"


class AuthenticationError(KubeNodeError):
    """Authentication or authorization against the cluster failed."""

    code = "unauthorized"


class ConfigurationError(KubeNodeError):
    """Server configuration is invalid or incomplete."""

    code = "configuration"


class OperationNotAllowedError(KubeNodeError):
    """Operation disabled by the server's safety settings."""

    code = "not_allowed"
