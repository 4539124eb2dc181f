"""Pluggy hook specifications for kubenode-mcp plugins.

Plugins implement these hooks with the ``hookimpl`` marker to contribute
MCP tools, resources and health checks to the server.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from kubenode_mcp.clients.base import CRDDefinition
    from kubenode_mcp.plugin import PluginMetadata
    from kubenode_mcp.server import KubeNodeServer

PROJECT_NAME = "kubenode_mcp"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class KubeNodeMCPHookSpec:
    """Hooks a kubenode-mcp plugin may implement."""

    @hookspec
    def kubenode_get_plugin_metadata(self) -> PluginMetadata:  # type: ignore[empty-body]
        """Return the plugin's metadata."""

    @hookspec
    def kubenode_register_tools(self, mcp: FastMCP, server: KubeNodeServer) -> None:
        """Register MCP tools with the server."""

    @hookspec
    def kubenode_register_resources(self, mcp: FastMCP, server: KubeNodeServer) -> None:
        """Register MCP resources with the server."""

    @hookspec
    def kubenode_get_crd_definitions(self) -> list[CRDDefinition]:  # type: ignore[empty-body]
        """Return the custom resources the plugin works with."""

    @hookspec
    def kubenode_health_check(  # type: ignore[empty-body]
        self, server: KubeNodeServer
    ) -> tuple[bool, str]:
        """Report whether the plugin can serve requests."""
