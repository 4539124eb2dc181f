"""Configuration for the kubenode-mcp server."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TransportMode(str, Enum):
    """MCP transport used to serve tools."""

    STDIO = "stdio"
    SSE = "sse"
    STREAMABLE_HTTP = "streamable-http"


class AuthMode(str, Enum):
    """How the server authenticates against the user cluster."""

    AUTO = "auto"
    KUBECONFIG = "kubeconfig"
    TOKEN = "token"


class LogLevel(str, Enum):
    """Log level for the server process."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


DEFAULT_KUBECONFIG = Path.home() / ".kube" / "config"


class KubeNodeConfig(BaseSettings):
    """Server configuration.

    Loaded from environment variables with the KUBENODE_MCP_ prefix
    or from a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="KUBENODE_MCP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Transport
    transport: TransportMode = Field(default=TransportMode.STDIO, description="MCP transport")
    host: str = Field(default="127.0.0.1", description="Host for HTTP transports")
    port: int = Field(default=8000, ge=1, le=65535, description="Port for HTTP transports")

    # Cluster access
    auth_mode: AuthMode = Field(default=AuthMode.AUTO, description="Authentication mode")
    kubeconfig_path: str | None = Field(default=None, description="Path to kubeconfig file")
    kubeconfig_context: str | None = Field(default=None, description="Kubeconfig context")
    api_server: str | None = Field(default=None, description="API server URL for token auth")
    api_token: str | None = Field(default=None, description="Bearer token for token auth")
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Deadline in seconds applied to every Kubernetes API call",
    )

    # Safety
    read_only_mode: bool = Field(default=False, description="Disable all write operations")
    enable_dangerous_operations: bool = Field(
        default=False, description="Allow destructive operations such as delete"
    )

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    # Worker nodes
    cluster_name: str = Field(default="cluster", description="Name of the operated cluster")
    machine_namespace: str = Field(
        default="kube-system", description="Namespace holding Machine resources"
    )
    node_name_prefix: str = Field(
        default="kubenode-", description="Prefix for generated node names"
    )
    ssh_public_keys: list[str] = Field(
        default_factory=list, description="SSH public keys injected into new machines"
    )
    kubelet_version_constraint: str = Field(
        default=">=1.8", description="Version specifier a requested kubelet version must satisfy"
    )
    condition_grace_period_minutes: int = Field(
        default=5,
        ge=0,
        description="Age below which node conditions are hidden on request",
    )

    # Reconciliation
    reconcile_max_retries: int = Field(
        default=5, ge=0, description="Retries after an update conflict"
    )

    # Listing
    default_list_limit: int | None = Field(default=None, description="Default page size")
    max_list_limit: int = Field(default=100, ge=1, description="Maximum page size")

    @property
    def effective_kubeconfig_path(self) -> Path:
        """Kubeconfig path to load, falling back to ~/.kube/config."""
        if self.kubeconfig_path:
            return Path(self.kubeconfig_path).expanduser()
        return DEFAULT_KUBECONFIG

    def is_operation_allowed(self, operation: str) -> tuple[bool, str | None]:
        """Check whether a write operation may run.

        Args:
            operation: "create", "update" or "delete".

        Returns:
            Tuple of (allowed, reason when not allowed).
        """
        if self.read_only_mode and operation in ("create", "update", "delete"):
            return False, f"Operation '{operation}' not allowed: server is in read-only mode"
        if operation == "delete" and not self.enable_dangerous_operations:
            return False, (
                "Delete operations are disabled. "
                "Set KUBENODE_MCP_ENABLE_DANGEROUS_OPERATIONS=true to enable."
            )
        return True, None

    def validate_auth_config(self) -> list[str]:
        """Validate authentication settings.

        Returns:
            Warnings that do not prevent startup.

        Raises:
            ValueError: If the settings cannot work.
        """
        warnings: list[str] = []

        if self.auth_mode == AuthMode.TOKEN:
            if not self.api_server or not self.api_token:
                raise ValueError("Token auth requires both api_server and api_token")
        elif self.auth_mode == AuthMode.KUBECONFIG:
            if not self.effective_kubeconfig_path.exists():
                raise ValueError(f"Kubeconfig not found: {self.effective_kubeconfig_path}")
        elif not self.effective_kubeconfig_path.exists() and not self.api_token:
            warnings.append(
                f"Kubeconfig {self.effective_kubeconfig_path} not found; "
                "falling back to in-cluster configuration"
            )

        if self.api_token and self.auth_mode == AuthMode.KUBECONFIG:
            warnings.append("api_token is ignored when auth_mode is 'kubeconfig'")

        return warnings


_config: KubeNodeConfig | None = None


def get_config() -> KubeNodeConfig:
    """Get the process-wide configuration instance."""
    global _config
    if _config is None:
        _config = KubeNodeConfig()
    return _config
