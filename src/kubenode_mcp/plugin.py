"""Plugin interface for kubenode-mcp components.

This module defines the plugin base class and metadata that every plugin
uses to integrate with the server via pluggy hooks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from kubenode_mcp.hooks import hookimpl

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from kubenode_mcp.clients.base import CRDDefinition
    from kubenode_mcp.server import KubeNodeServer


@dataclass
class PluginMetadata:
    """Metadata describing a kubenode-mcp plugin."""

    name: str
    """Unique plugin name, e.g., 'nodes'."""

    version: str
    """Plugin version following semver, e.g., '1.0.0'."""

    description: str
    """Human-readable description of what this plugin provides."""

    maintainer: str
    """Maintainer email or team."""

    requires_crds: list[str] = field(default_factory=list)
    """CRD kinds this plugin needs.

    If any of these CRDs are missing from the cluster the plugin is
    marked unavailable and the server keeps running with the others.
    """


class BasePlugin:
    """Base implementation of a kubenode-mcp plugin.

    Subclasses override the hooks they need. Every hook method is decorated
    with @hookimpl so pluggy picks it up.

    Example entry point in pyproject.toml for external plugins:
        [project.entry-points."kubenode_mcp.plugins"]
        my_plugin = "my_package.plugin:MyPlugin"
    """

    def __init__(self, metadata: PluginMetadata) -> None:
        self._metadata = metadata

    @property
    def metadata(self) -> PluginMetadata:
        """Plugin metadata."""
        return self._metadata

    @hookimpl
    def kubenode_get_plugin_metadata(self) -> PluginMetadata:
        """Return plugin metadata."""
        return self._metadata

    @hookimpl
    def kubenode_register_tools(self, mcp: FastMCP, server: KubeNodeServer) -> None:
        """Register MCP tools. Override in subclass."""

    @hookimpl
    def kubenode_register_resources(self, mcp: FastMCP, server: KubeNodeServer) -> None:
        """Register MCP resources. Override in subclass."""

    @hookimpl
    def kubenode_get_crd_definitions(self) -> list[CRDDefinition]:
        """Return CRD definitions. Override in subclass."""
        return []

    @hookimpl
    def kubenode_health_check(self, server: KubeNodeServer) -> tuple[bool, str]:
        """Check plugin health by verifying required CRDs are served.

        The default implementation lists each CRD named in
        metadata.requires_crds and reports the ones that fail.
        """
        if not self._metadata.requires_crds:
            return True, "No CRD requirements"

        crd_map = {crd.kind: crd for crd in self.kubenode_get_crd_definitions()}

        missing_crds = []
        for crd_kind in self._metadata.requires_crds:
            crd = crd_map.get(crd_kind)
            if crd is None:
                missing_crds.append(crd_kind)
                continue
            try:
                server.k8s.list_resources(crd, limit=1)
            except Exception:
                missing_crds.append(crd_kind)

        if missing_crds:
            return False, f"Missing CRDs: {', '.join(missing_crds)}"

        return True, "All required CRDs available"
