"""FastMCP server definition for kubenode-mcp with pluggy-based plugins."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from http import HTTPStatus
from typing import Any

from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from kubenode_mcp import __version__
from kubenode_mcp.clients.base import K8sClient
from kubenode_mcp.config import KubeNodeConfig, get_config
from kubenode_mcp.plugin_manager import PluginManager

logger = logging.getLogger(__name__)


class KubeNodeServer:
    """kubenode-mcp server: one Kubernetes connection, plugins, and the MCP app."""

    def __init__(self, config: KubeNodeConfig | None = None) -> None:
        self._config = config or get_config()
        self._k8s_client: K8sClient | None = None
        self._mcp: FastMCP | None = None
        self._plugin_manager: PluginManager | None = None

    @property
    def config(self) -> KubeNodeConfig:
        """Get server configuration."""
        return self._config

    @property
    def k8s(self) -> K8sClient:
        """Get the Kubernetes client.

        Raises:
            RuntimeError: If server is not running.
        """
        if self._k8s_client is None:
            raise RuntimeError("Server not running. K8s client not available.")
        return self._k8s_client

    @property
    def mcp(self) -> FastMCP:
        """Get the MCP server instance.

        Raises:
            RuntimeError: If server is not initialized.
        """
        if self._mcp is None:
            raise RuntimeError("Server not initialized.")
        return self._mcp

    @property
    def plugin_manager(self) -> PluginManager:
        """Get the plugin manager.

        Raises:
            RuntimeError: If server is not initialized.
        """
        if self._plugin_manager is None:
            raise RuntimeError("Server not initialized.")
        return self._plugin_manager

    def startup(self) -> None:
        """Connect to Kubernetes and run plugin health checks.

        An already connected client is kept, so tests and embedders can
        inject one before startup.
        """
        if self._k8s_client is None or not self._k8s_client.is_connected:
            self._k8s_client = K8sClient(self._config)
            self._k8s_client.connect()

        if self._plugin_manager is not None:
            self._plugin_manager.run_health_checks(self)
            logger.info(
                f"kubenode-mcp server started with "
                f"{len(self._plugin_manager.healthy_plugins)}/"
                f"{len(self._plugin_manager.registered_plugins)} plugins active"
            )

    def shutdown(self) -> None:
        """Disconnect from Kubernetes."""
        if self._k8s_client is not None:
            self._k8s_client.disconnect()
        self._k8s_client = None

    def _create_lifespan(self) -> Callable[[Any], AbstractAsyncContextManager[None]]:
        """Create the lifespan context manager for the MCP server."""
        server_self = self

        @asynccontextmanager
        async def lifespan(_app: Any) -> AsyncIterator[None]:
            logger.info("Starting kubenode-mcp server...")
            try:
                server_self.startup()
                yield
            finally:
                logger.info("Shutting down kubenode-mcp server...")
                server_self.shutdown()
                logger.info("kubenode-mcp server shut down")

        return lifespan

    def create_mcp(self) -> FastMCP:
        """Create and configure the FastMCP server."""
        self._plugin_manager = PluginManager()
        self._plugin_manager.load_core_plugins()
        self._plugin_manager.load_entrypoint_plugins()

        mcp = FastMCP(
            name="kubenode-mcp",
            instructions="MCP server for Kubernetes worker nodes - lists, inspects, "
            "creates and deletes workers backed by cluster-api Machines, and keeps "
            "control plane RBAC in place.",
            lifespan=self._create_lifespan(),
            host=self._config.host,
            port=self._config.port,
        )
        self._mcp = mcp

        self._plugin_manager.register_all(mcp, self)
        self._register_core_resources(mcp)
        self._register_health_endpoint(mcp)

        return mcp

    def _register_core_resources(self, mcp: FastMCP) -> None:
        """Register core MCP resources describing the server."""

        @mcp.resource("kubenode://cluster/plugins")
        def cluster_plugins() -> dict:
            """Loaded plugins with their health status."""
            pm = self.plugin_manager
            plugin_info = {}
            for meta in pm.get_all_metadata():
                plugin_info[meta.name] = {
                    "version": meta.version,
                    "description": meta.description,
                    "maintainer": meta.maintainer,
                    "requires_crds": meta.requires_crds,
                    "healthy": meta.name in pm.healthy_plugins,
                    "unavailable_reason": pm.unavailable_plugins.get(meta.name),
                }
            return {
                "total_plugins": len(pm.registered_plugins),
                "active_plugins": len(pm.healthy_plugins),
                "plugins": plugin_info,
            }

        @mcp.resource("kubenode://cluster/config")
        def cluster_config() -> dict:
            """Cluster settings the node tools operate with."""
            return {
                "cluster_name": self._config.cluster_name,
                "machine_namespace": self._config.machine_namespace,
                "node_name_prefix": self._config.node_name_prefix,
                "kubelet_version_constraint": self._config.kubelet_version_constraint,
                "read_only_mode": self._config.read_only_mode,
                "version": __version__,
            }

    def _register_health_endpoint(self, mcp: FastMCP) -> None:
        """Expose GET /health for HTTP transports."""

        @mcp.custom_route("/health", methods=["GET"])
        async def health(_request: Request) -> JSONResponse:
            connected = self._k8s_client is not None and self._k8s_client.is_connected
            pm = self._plugin_manager
            total = len(pm.registered_plugins) if pm is not None else 0
            healthy = len(pm.healthy_plugins) if pm is not None else 0
            unavailable = pm.unavailable_plugins if pm is not None else {}

            status = HTTPStatus.OK if connected else HTTPStatus.SERVICE_UNAVAILABLE
            return JSONResponse(
                {
                    "status": "healthy" if connected else "unhealthy",
                    "connected": connected,
                    "plugins": {"total": total, "healthy": healthy, "unavailable": unavailable},
                },
                status_code=status,
            )


_server: KubeNodeServer | None = None


def get_server() -> KubeNodeServer:
    """Return the process-wide server, creating it on first use."""
    global _server
    if _server is None:
        _server = KubeNodeServer()
    return _server


def create_server(config: KubeNodeConfig | None = None) -> FastMCP:
    """Create the server and its FastMCP app."""
    global _server
    _server = KubeNodeServer(config)
    return _server.create_mcp()
