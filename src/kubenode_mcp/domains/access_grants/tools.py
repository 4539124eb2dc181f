"""MCP Tools for access grant reconciliation."""

from typing import TYPE_CHECKING, Any

from mcp.server.fastmcp import FastMCP

from kubenode_mcp.domains.access_grants.client import AccessGrantClient
from kubenode_mcp.reconciling import ReconcileAction
from kubenode_mcp.utils.errors import KubeNodeError, OperationNotAllowedError

if TYPE_CHECKING:
    from kubenode_mcp.server import KubeNodeServer


def register_tools(mcp: FastMCP, server: "KubeNodeServer") -> None:
    """Register access grant tools with the MCP server."""

    @mcp.tool()
    def reconcile_access_grants() -> dict[str, Any]:
        """Create or repair the Roles and RoleBindings control plane components need.

        Safe to call repeatedly: objects already in the desired state are
        left untouched.

        Returns:
            One entry per object with the action taken (created, updated,
            unchanged) and the number of attempts.
        """
        allowed, reason = server.config.is_operation_allowed("update")
        if not allowed:
            return OperationNotAllowedError(reason or "Operation not allowed").to_dict()

        client = AccessGrantClient(
            server.k8s,
            max_retries=server.config.reconcile_max_retries,
            timeout=server.config.request_timeout,
        )
        try:
            results = client.ensure_access_grants()
        except KubeNodeError as e:
            return e.to_dict()

        return {
            "results": [r.to_dict() for r in results],
            "changed": sum(1 for r in results if r.action != ReconcileAction.UNCHANGED),
        }
