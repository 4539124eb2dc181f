"""Plugin registry for core domains.

Each core domain is exposed as a plugin class that registers its tools
through pluggy hooks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from kubenode_mcp import __version__
from kubenode_mcp.domains.nodes.crds import MachineCRDs
from kubenode_mcp.hooks import hookimpl
from kubenode_mcp.plugin import BasePlugin, PluginMetadata

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from kubenode_mcp.clients.base import CRDDefinition
    from kubenode_mcp.server import KubeNodeServer


class NodesPlugin(BasePlugin):
    """Plugin for worker node listing, inspection, creation and deletion.

    Workers are read from two sources, Machines and Nodes, and presented
    as one view per worker.
    """

    def __init__(self) -> None:
        super().__init__(
            PluginMetadata(
                name="nodes",
                version=__version__,
                description="Worker nodes backed by cluster-api Machines",
                maintainer="kubenode-mcp@kubermatic.io",
                requires_crds=["Machine"],
            )
        )

    @hookimpl
    def kubenode_register_tools(self, mcp: FastMCP, server: KubeNodeServer) -> None:
        from kubenode_mcp.domains.nodes.tools import register_tools

        register_tools(mcp, server)

    @hookimpl
    def kubenode_get_crd_definitions(self) -> list[CRDDefinition]:
        return MachineCRDs.all_crds()


class AccessGrantsPlugin(BasePlugin):
    """Plugin keeping the RBAC objects control plane components rely on."""

    def __init__(self) -> None:
        super().__init__(
            PluginMetadata(
                name="access-grants",
                version=__version__,
                description="Reconciliation of control plane Roles and RoleBindings",
                maintainer="kubenode-mcp@kubermatic.io",
                requires_crds=[],
            )
        )

    @hookimpl
    def kubenode_register_tools(self, mcp: FastMCP, server: KubeNodeServer) -> None:
        from kubenode_mcp.domains.access_grants.tools import register_tools

        register_tools(mcp, server)

    @hookimpl
    def kubenode_health_check(self, server: KubeNodeServer) -> tuple[bool, str]:  # noqa: ARG002
        return True, "Access grants use the core RBAC API"


def get_core_plugins() -> list[BasePlugin]:
    """Return instances of all core domain plugins."""
    return [NodesPlugin(), AccessGrantsPlugin()]
