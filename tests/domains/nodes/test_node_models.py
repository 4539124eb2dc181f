"""Tests for node models."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest
from kubernetes.client import (
    V1Node,
    V1NodeAddress,
    V1NodeStatus,
    V1ObjectMeta,
    V1OwnerReference,
)
from node_factories import machine_cr

from kubenode_mcp.domains.nodes.models import (
    AWSNodeSpec,
    CloudProviderKind,
    CorrelatedNode,
    DigitaloceanNodeSpec,
    HetznerNodeSpec,
    Machine,
    NodeCloudSpec,
    OperatingSystemKind,
    OperatingSystemSpec,
    RuntimeNode,
)
from kubenode_mcp.utils.errors import TemplatingError, ValidationError


class TestNodeCloudSpec:
    def test_no_provider(self) -> None:
        cloud = NodeCloudSpec()

        assert cloud.provider is None
        with pytest.raises(ValidationError, match="cannot create node without cloud provider"):
            cloud.require_single_provider()

    def test_single_provider(self) -> None:
        cloud = NodeCloudSpec(hetzner=HetznerNodeSpec(type="cx21"))

        assert cloud.require_single_provider() == CloudProviderKind.HETZNER
        assert cloud.settings == HetznerNodeSpec(type="cx21")

    def test_multiple_providers_rejected(self) -> None:
        cloud = NodeCloudSpec(
            digitalocean=DigitaloceanNodeSpec(size="s-1vcpu-2gb"),
            hetzner=HetznerNodeSpec(type="cx21"),
        )

        assert cloud.provider is None
        with pytest.raises(ValidationError, match="exactly one cloud provider"):
            cloud.require_single_provider()

    def test_from_provider_accepts_camel_case(self) -> None:
        cloud = NodeCloudSpec.from_provider("aws", {"instanceType": "t3.medium", "volumeSize": 50})

        assert isinstance(cloud.aws, AWSNodeSpec)
        assert cloud.aws.instance_type == "t3.medium"
        assert cloud.aws.model_dump(by_alias=True)["volumeSize"] == 50

    def test_from_provider_unknown(self) -> None:
        with pytest.raises(ValueError):
            NodeCloudSpec.from_provider("nimbus", {})


class TestOperatingSystemSpec:
    def test_from_kind(self) -> None:
        os_spec = OperatingSystemSpec.from_kind("containerLinux", {"disableAutoUpdate": True})

        assert os_spec.kind == OperatingSystemKind.CONTAINER_LINUX
        assert os_spec.container_linux is not None
        assert os_spec.container_linux.disable_auto_update is True


class TestMachine:
    def test_from_machine_cr(self) -> None:
        machine = Machine.from_machine_cr(
            machine_cr(
                "m1",
                uid="uid-m1",
                spec_name="worker-1",
                kubelet="1.12.3",
                node_ref_uid="uid-n1",
                error_reason="CreateError",
                error_message="quota",
            )
        )

        assert machine.name == "m1"
        assert machine.namespace == "kube-system"
        assert machine.spec_name == "worker-1"
        assert machine.kubelet_version == "1.12.3"
        assert machine.node_ref_uid == "uid-n1"
        assert machine.cloud.provider == CloudProviderKind.DIGITALOCEAN
        assert machine.operating_system.kind == OperatingSystemKind.UBUNTU
        assert machine.error_reason == "CreateError"
        assert isinstance(machine.creation_timestamp, datetime)

    def test_from_resource_field_like_object(self) -> None:
        resource = MagicMock()
        resource.to_dict.return_value = machine_cr("m1")

        assert Machine.from_machine_cr(resource).name == "m1"

    def test_provider_config_is_accepted(self) -> None:
        manifest = machine_cr("m1")
        manifest["spec"]["providerConfig"] = manifest["spec"].pop("providerSpec")

        assert Machine.from_machine_cr(manifest).cloud.provider == CloudProviderKind.DIGITALOCEAN

    def test_unknown_provider_raises_templating_error(self) -> None:
        with pytest.raises(TemplatingError):
            Machine.from_machine_cr(machine_cr("m1", provider="nimbus"))

    def test_bad_provider_settings_raise_templating_error(self) -> None:
        with pytest.raises(TemplatingError):
            Machine.from_machine_cr(machine_cr("m1", provider_settings={"backups": True}))

    def test_snapshot_is_frozen(self) -> None:
        machine = Machine.from_machine_cr(machine_cr("m1"))

        with pytest.raises(Exception):
            machine.name = "other"  # type: ignore[misc]


class TestRuntimeNode:
    def test_from_v1_node(self) -> None:
        node = V1Node(
            metadata=V1ObjectMeta(
                name="worker-1",
                uid="uid-n1",
                labels={"role": "worker"},
                creation_timestamp=datetime(2024, 1, 1),
                owner_references=[
                    V1OwnerReference(
                        api_version="cluster.k8s.io/v1alpha1",
                        kind="Machine",
                        name="m1",
                        uid="uid-m1",
                        controller=True,
                    )
                ],
            ),
            status=V1NodeStatus(
                addresses=[V1NodeAddress(type="InternalIP", address="10.0.0.5")],
                capacity={"cpu": "4", "memory": "8Gi"},
            ),
        )

        runtime = RuntimeNode.from_k8s_node(node)

        assert runtime.name == "worker-1"
        assert runtime.controller_uid == "uid-m1"
        assert runtime.annotations == {}
        assert runtime.addresses[0].address == "10.0.0.5"
        assert runtime.capacity.cpu == "4"
        assert runtime.allocatable.cpu == ""
        assert runtime.conditions == []

    def test_node_without_controller(self) -> None:
        node = V1Node(metadata=V1ObjectMeta(name="external"), status=V1NodeStatus())

        assert RuntimeNode.from_k8s_node(node).controller_uid is None


def test_correlated_node_needs_a_side() -> None:
    with pytest.raises(Exception, match="machine or a node"):
        CorrelatedNode()
