"""Tests for NodeClient."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from node_factories import NOT_READY, machine_cr, node_manifest

from kubenode_mcp.config import KubeNodeConfig
from kubenode_mcp.domains.nodes.client import (
    NAME_SUFFIX_ALPHABET,
    NodeClient,
    generate_node_name,
    validate_kubelet_version,
)
from kubenode_mcp.domains.nodes.crds import MachineCRDs
from kubenode_mcp.domains.nodes.models import (
    ClusterContext,
    NodeCloudSpec,
    NodeObjectMeta,
    NodeSpec,
    NodeVersionInfo,
    NodeView,
    OperatingSystemSpec,
)
from kubenode_mcp.utils.errors import ConfigurationError, NotFoundError, ValidationError


class TestValidateKubeletVersion:
    def test_accepts_version_in_range(self) -> None:
        assert validate_kubelet_version("1.12.3", ">=1.8") == "1.12.3"

    def test_strips_leading_v(self) -> None:
        assert validate_kubelet_version("v1.10.0", ">=1.8") == "1.10.0"

    def test_rejects_old_version(self) -> None:
        with pytest.raises(ValidationError, match="does not fit constraint"):
            validate_kubelet_version("1.7.4", ">=1.8")

    def test_rejects_garbage(self) -> None:
        with pytest.raises(ValidationError, match="failed to parse"):
            validate_kubelet_version("latest", ">=1.8")

    def test_bad_constraint_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            validate_kubelet_version("1.12.3", "about 1.8")


def test_generate_node_name() -> None:
    name = generate_node_name("kubenode-", "abc123")

    assert name.startswith("kubenode-abc123-")
    suffix = name.removeprefix("kubenode-abc123-")
    assert len(suffix) == 5
    assert set(suffix) <= set(NAME_SUFFIX_ALPHABET)


@pytest.fixture
def k8s() -> MagicMock:
    mock = MagicMock()
    mock.list_resources.return_value = []
    mock.list_nodes.return_value = []
    return mock


@pytest.fixture
def client(k8s: MagicMock, cluster: ClusterContext) -> NodeClient:
    return NodeClient(k8s, cluster)


def _request(name: str = "", kubelet: str = "", cloud: NodeCloudSpec | None = None) -> NodeView:
    return NodeView(
        metadata=NodeObjectMeta(name=name),
        spec=NodeSpec(
            versions=NodeVersionInfo(kubelet=kubelet),
            operating_system=OperatingSystemSpec.from_kind("ubuntu", {}),
            cloud=cloud
            if cloud is not None
            else NodeCloudSpec.from_provider("digitalocean", {"size": "s-2vcpu-4gb"}),
        ),
    )


class TestListAndGet:
    def test_from_config(self, k8s: MagicMock) -> None:
        k8s.get_server_version.return_value = "1.13.1"
        config = KubeNodeConfig(cluster_name="prod", condition_grace_period_minutes=10)

        client = NodeClient.from_config(k8s, config)

        k8s.get_server_version.assert_not_called()
        assert client.cluster.name == "prod"
        assert client.cluster.version == "1.13.1"
        assert client._grace_period == timedelta(minutes=10)

    def test_cluster_version_fetched_once_when_needed(self, k8s: MagicMock) -> None:
        k8s.get_server_version.return_value = "1.13.1"
        k8s.list_resources.return_value = [machine_cr("m1"), machine_cr("m2")]
        client = NodeClient.from_config(k8s, KubeNodeConfig(cluster_name="prod"))

        views = client.list_nodes()

        assert [v.spec.versions.kubelet for v in views] == ["1.13.1", "1.13.1"]
        k8s.get_server_version.assert_called_once()

    def test_cluster_version_not_fetched_when_machines_declare_one(
        self, k8s: MagicMock
    ) -> None:
        k8s.list_resources.return_value = [machine_cr("m1", kubelet="1.11.0")]
        k8s.list_nodes.return_value = [node_manifest("external")]
        client = NodeClient.from_config(k8s, KubeNodeConfig(cluster_name="prod"))

        client.list_nodes()
        client.get_node("external")

        k8s.get_server_version.assert_not_called()

    def test_list_nodes_reads_machine_namespace(
        self, client: NodeClient, k8s: MagicMock
    ) -> None:
        k8s.list_resources.return_value = [machine_cr("m1", uid="uid-m1")]
        k8s.list_nodes.return_value = [
            node_manifest("worker-1", owner_uid="uid-m1"),
            node_manifest("external", conditions=NOT_READY),
        ]

        views = client.list_nodes()

        k8s.list_resources.assert_called_once_with(MachineCRDs.MACHINE, namespace="kube-system")
        assert [v.metadata.name for v in views] == ["m1", "external"]
        assert views[0].metadata.display_name == "worker-1"
        assert views[0].spec.versions.kubelet == "1.12.3"
        assert views[1].status.error_reason == "KubeletNotReady"

    def test_list_nodes_refetches_every_call(self, client: NodeClient, k8s: MagicMock) -> None:
        client.list_nodes()
        client.list_nodes()

        assert k8s.list_resources.call_count == 2
        assert k8s.list_nodes.call_count == 2

    def test_get_node_not_found(self, client: NodeClient) -> None:
        with pytest.raises(NotFoundError):
            client.get_node("missing")

    def test_get_node_by_node_name(self, client: NodeClient, k8s: MagicMock) -> None:
        k8s.list_resources.return_value = [machine_cr("m1", uid="uid-m1")]
        k8s.list_nodes.return_value = [node_manifest("worker-1", owner_uid="uid-m1")]

        view = client.get_node("worker-1")

        assert view.metadata.name == "m1"
        assert view.status.machine_name == "m1"


class TestCreate:
    def test_requires_cloud_provider(self, client: NodeClient, k8s: MagicMock) -> None:
        with pytest.raises(ValidationError, match="cannot create node without cloud provider"):
            client.create_node(_request(cloud=NodeCloudSpec()))
        k8s.create.assert_not_called()

    def test_rejects_old_kubelet(self, client: NodeClient, k8s: MagicMock) -> None:
        with pytest.raises(ValidationError):
            client.create_node(_request(kubelet="1.7.0"))
        k8s.create.assert_not_called()

    def test_defaults_version_and_name(self, client: NodeClient, k8s: MagicMock) -> None:
        k8s.create.side_effect = lambda crd, body, namespace: body

        view = client.create_node(_request())

        _, kwargs = k8s.create.call_args
        body = kwargs["body"]
        assert kwargs["namespace"] == "kube-system"
        assert body["spec"]["versions"]["kubelet"] == "1.12.3"
        assert body["metadata"]["name"].startswith("kubenode-abc123-")
        assert view.metadata.name == body["metadata"]["name"]
        assert view.spec.cloud.provider is not None

    def test_keeps_requested_name_and_version(self, client: NodeClient, k8s: MagicMock) -> None:
        k8s.create.side_effect = lambda crd, body, namespace: body

        view = client.create_node(_request(name="gpu-1", kubelet="v1.11.2"))

        assert view.metadata.name == "gpu-1"
        assert view.spec.versions.kubelet == "1.11.2"

    def test_request_is_not_mutated(self, client: NodeClient, k8s: MagicMock) -> None:
        k8s.create.side_effect = lambda crd, body, namespace: body
        request = _request()

        client.create_node(request)

        assert request.metadata.name == ""
        assert request.spec.versions.kubelet == ""


class TestDelete:
    def test_deletes_machine_when_present(self, client: NodeClient, k8s: MagicMock) -> None:
        k8s.list_resources.return_value = [machine_cr("m1", uid="uid-m1")]
        k8s.list_nodes.return_value = [node_manifest("worker-1", owner_uid="uid-m1")]

        entity = client.delete_node("worker-1")

        k8s.delete.assert_called_once_with(MachineCRDs.MACHINE, "m1", namespace="kube-system")
        k8s.delete_node.assert_not_called()
        assert entity.machine is not None

    def test_deletes_node_without_machine(self, client: NodeClient, k8s: MagicMock) -> None:
        k8s.list_nodes.return_value = [node_manifest("external")]

        client.delete_node("external")

        k8s.delete_node.assert_called_once_with("external")
        k8s.delete.assert_not_called()

    def test_delete_missing(self, client: NodeClient) -> None:
        with pytest.raises(NotFoundError):
            client.delete_node("missing")

    def test_delete_skips_version_lookup(self, k8s: MagicMock) -> None:
        k8s.list_resources.return_value = [machine_cr("m1", uid="uid-m1")]
        client = NodeClient.from_config(k8s, KubeNodeConfig(cluster_name="prod"))

        client.delete_node("m1")

        k8s.get_server_version.assert_not_called()
        k8s.delete.assert_called_once_with(MachineCRDs.MACHINE, "m1", namespace="kube-system")


def test_get_matches_list_for_uid_linked_worker(client: NodeClient, k8s: MagicMock) -> None:
    k8s.list_resources.return_value = [machine_cr("worker-1", uid="m-uid")]
    k8s.list_nodes.return_value = [
        node_manifest("ip-10-0-0-1", uid="n-uid-1", owner_uid="m-uid"),
        node_manifest("worker-1", uid="n-uid-2", conditions=NOT_READY),
    ]

    listed = client.list_nodes()[0]
    fetched = client.get_node("worker-1")

    assert fetched == listed
    assert fetched.metadata.display_name == "ip-10-0-0-1"
    assert fetched.status.error_reason == ""
