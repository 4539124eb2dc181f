"""Utility functions and helpers for kubenode-mcp."""

from kubenode_mcp.utils.errors import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    DeadlineExceededError,
    KubeNodeError,
    NotFoundError,
    OperationNotAllowedError,
    TemplatingError,
    UpstreamError,
    ValidationError,
)
from kubenode_mcp.utils.response import (
    PaginatedResponse,
    ResponseBuilder,
    Verbosity,
    paginate,
)

__all__ = [
    # Errors
    "KubeNodeError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "UpstreamError",
    "DeadlineExceededError",
    "TemplatingError",
    "AuthenticationError",
    "ConfigurationError",
    "OperationNotAllowedError",
    # Response formatting
    "Verbosity",
    "ResponseBuilder",
    "PaginatedResponse",
    "paginate",
]
