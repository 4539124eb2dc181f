"""Plugin loading and health tracking for kubenode-mcp.

Core plugins come from :mod:`kubenode_mcp.domains.registry`, external ones
from the ``kubenode_mcp.plugins`` entry-point group. A plugin whose health
check fails stays registered, so its tools answer with errors instead of
disappearing, and is reported as unavailable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import pluggy

from kubenode_mcp.hooks import PROJECT_NAME, KubeNodeMCPHookSpec

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from kubenode_mcp.plugin import PluginMetadata
    from kubenode_mcp.server import KubeNodeServer

logger = logging.getLogger(__name__)

PLUGIN_ENTRY_POINT_GROUP = "kubenode_mcp.plugins"


@dataclass(frozen=True)
class PluginHealth:
    """Outcome of one plugin's health check."""

    healthy: bool
    message: str


class PluginManager:
    """Registry of the server's plugins and their last known health."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(KubeNodeMCPHookSpec)
        self._plugins: dict[str, Any] = {}
        self._health: dict[str, PluginHealth] = {}

    @property
    def hook(self) -> Any:
        return self._pm.hook

    @property
    def registered_plugins(self) -> dict[str, Any]:
        """Plugins by registration name."""
        return dict(self._plugins)

    @property
    def healthy_plugins(self) -> dict[str, Any]:
        """Plugins whose last health check passed."""
        return {
            name: plugin
            for name, plugin in self._plugins.items()
            if name in self._health and self._health[name].healthy
        }

    @property
    def unavailable_plugins(self) -> dict[str, str]:
        """Failure message of every plugin whose last health check failed."""
        return {
            name: health.message for name, health in self._health.items() if not health.healthy
        }

    def register_plugin(self, plugin: Any) -> str:
        """Register a plugin under the name from its metadata.

        Raises:
            ValueError: If a plugin with that name is already registered.
        """
        name = plugin.kubenode_get_plugin_metadata().name
        if name in self._plugins:
            raise ValueError(f"Plugin '{name}' is already registered")
        self._pm.register(plugin, name=name)
        self._plugins[name] = plugin
        logger.debug(f"Registered plugin: {name}")
        return name

    def load_core_plugins(self) -> list[str]:
        """Register the node and access-grant plugins."""
        from kubenode_mcp.domains.registry import get_core_plugins

        names = [self.register_plugin(plugin) for plugin in get_core_plugins()]
        logger.info(f"Loaded core plugins: {', '.join(names)}")
        return names

    def load_entrypoint_plugins(self) -> list[str]:
        """Register plugins published under the entry-point group."""
        self._pm.load_setuptools_entrypoints(PLUGIN_ENTRY_POINT_GROUP)

        loaded = []
        for plugin in self._pm.get_plugins():
            name = self._pm.get_name(plugin)
            if name and name not in self._plugins:
                self._plugins[name] = plugin
                loaded.append(name)
                logger.info(f"Loaded external plugin: {name}")
        return loaded

    def get_all_metadata(self) -> list[PluginMetadata]:
        return [meta for meta in self.hook.kubenode_get_plugin_metadata() if meta is not None]

    def register_all(self, mcp: FastMCP, server: KubeNodeServer) -> None:
        """Let every plugin add its tools and resources to ``mcp``."""
        self.hook.kubenode_register_tools(mcp=mcp, server=server)
        self.hook.kubenode_register_resources(mcp=mcp, server=server)
        logger.info(f"Registered tools and resources from {len(self._plugins)} plugins")

    def run_health_checks(self, server: KubeNodeServer) -> dict[str, PluginHealth]:
        """Check every plugin against the connected cluster.

        A check that raises counts as failed; the other plugins are still
        checked.
        """
        self._health.clear()
        for name, plugin in self._plugins.items():
            if not hasattr(plugin, "kubenode_health_check"):
                self._health[name] = PluginHealth(True, "No health check defined")
                continue
            try:
                healthy, message = plugin.kubenode_health_check(server=server)
            except Exception as e:
                healthy, message = False, f"Health check error: {e}"
            self._health[name] = PluginHealth(healthy, message)

            if healthy:
                logger.info(f"Plugin {name} available: {message}")
            else:
                logger.warning(f"Plugin {name} unavailable: {message}")
        return dict(self._health)
