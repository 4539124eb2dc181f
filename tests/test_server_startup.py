"""Tests for KubeNodeServer wiring: plugins, tools and the Kubernetes connection."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from kubenode_mcp.config import KubeNodeConfig
from kubenode_mcp.server import KubeNodeServer, create_server, get_server
from kubenode_mcp.utils.errors import NotFoundError


@pytest.fixture
def server() -> KubeNodeServer:
    server = KubeNodeServer(KubeNodeConfig(cluster_name="abc123"))
    with patch("kubenode_mcp.server.PluginManager.load_entrypoint_plugins", return_value=[]):
        server.create_mcp()
    return server


def _tool_names(server: KubeNodeServer) -> set[str]:
    return {tool.name for tool in asyncio.run(server.mcp.list_tools())}


class TestCreateMcp:
    def test_registers_node_and_grant_tools(self, server: KubeNodeServer) -> None:
        assert _tool_names(server) == {
            "list_cluster_nodes",
            "get_cluster_node",
            "create_cluster_node",
            "delete_cluster_node",
            "reconcile_access_grants",
        }

    def test_registers_cluster_resources(self, server: KubeNodeServer) -> None:
        uris = {str(r.uri) for r in asyncio.run(server.mcp.list_resources())}

        assert {"kubenode://cluster/plugins", "kubenode://cluster/config"} <= uris

    def test_k8s_unavailable_until_startup(self, server: KubeNodeServer) -> None:
        with pytest.raises(RuntimeError, match="not running"):
            _ = server.k8s


class TestStartup:
    def test_connects_and_checks_machine_crd(self, server: KubeNodeServer) -> None:
        k8s = MagicMock()
        k8s.list_resources.side_effect = NotFoundError(
            "CustomResourceDefinition", "machines.cluster.k8s.io"
        )
        with patch("kubenode_mcp.server.K8sClient", return_value=k8s) as k8s_cls:
            server.startup()

        k8s_cls.assert_called_once_with(server.config)
        k8s.connect.assert_called_once()
        assert set(server.plugin_manager.healthy_plugins) == {"access-grants"}
        assert server.plugin_manager.unavailable_plugins == {"nodes": "Missing CRDs: Machine"}

    def test_keeps_connected_client(self, server: KubeNodeServer) -> None:
        k8s = MagicMock()
        k8s.is_connected = True
        k8s.list_resources.return_value = []
        server._k8s_client = k8s

        with patch("kubenode_mcp.server.K8sClient") as k8s_cls:
            server.startup()

        k8s_cls.assert_not_called()
        assert server.k8s is k8s
        assert set(server.plugin_manager.healthy_plugins) == {"nodes", "access-grants"}

    def test_replaces_disconnected_client(self, server: KubeNodeServer) -> None:
        stale = MagicMock()
        stale.is_connected = False
        server._k8s_client = stale
        fresh = MagicMock()

        with patch("kubenode_mcp.server.K8sClient", return_value=fresh):
            server.startup()

        assert server.k8s is fresh

    def test_without_plugins(self) -> None:
        bare = KubeNodeServer(KubeNodeConfig())
        with patch("kubenode_mcp.server.K8sClient"):
            bare.startup()

        with pytest.raises(RuntimeError, match="not initialized"):
            _ = bare.plugin_manager

    def test_node_tool_uses_started_client(self, server: KubeNodeServer) -> None:
        k8s = MagicMock()
        k8s.is_connected = True
        k8s.list_resources.return_value = []
        k8s.list_nodes.return_value = []
        server._k8s_client = k8s
        server.startup()

        result = asyncio.run(server.mcp.call_tool("list_cluster_nodes", {}))

        assert result is not None
        k8s.list_nodes.assert_called_once()


def test_shutdown_disconnects(server: KubeNodeServer) -> None:
    k8s = MagicMock()
    server._k8s_client = k8s

    server.shutdown()

    k8s.disconnect.assert_called_once()
    with pytest.raises(RuntimeError):
        _ = server.k8s


def test_create_server_replaces_module_server() -> None:
    with patch("kubenode_mcp.server.PluginManager.load_entrypoint_plugins", return_value=[]):
        mcp = create_server(KubeNodeConfig(cluster_name="prod"))

    assert get_server().mcp is mcp
    assert get_server().config.cluster_name == "prod"
