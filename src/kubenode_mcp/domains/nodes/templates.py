"""Machine manifests built from node create requests."""

from __future__ import annotations

from typing import Any, Protocol

from kubenode_mcp.domains.nodes.crds import MachineCRDs
from kubenode_mcp.domains.nodes.models import ClusterContext, NodeView
from kubenode_mcp.utils.errors import TemplatingError

CLUSTER_LABEL = "kubenode-mcp/cluster"


class MachineTemplateProvider(Protocol):
    """Turns a validated node request into a Machine manifest."""

    def build(self, cluster: ClusterContext, view: NodeView) -> dict[str, Any]: ...


class DefaultMachineTemplateProvider:
    """Builds machine-controller style Machines with an inline providerSpec."""

    def build(self, cluster: ClusterContext, view: NodeView) -> dict[str, Any]:
        """Build the Machine manifest for ``view``.

        Raises:
            TemplatingError: If the request lacks a cloud provider, an
                operating system, or a name.
        """
        cloud = view.spec.cloud
        operating_system = view.spec.operating_system
        if cloud.provider is None or cloud.settings is None:
            raise TemplatingError("machine template needs exactly one cloud provider")
        if operating_system.kind is None or operating_system.settings is None:
            raise TemplatingError("machine template needs exactly one operating system")
        if not view.metadata.name:
            raise TemplatingError("machine template needs a name")

        return {
            "apiVersion": MachineCRDs.MACHINE.api_version,
            "kind": MachineCRDs.MACHINE.kind,
            "metadata": {
                "name": view.metadata.name,
                "namespace": cluster.machine_namespace,
                "labels": {CLUSTER_LABEL: cluster.name},
            },
            "spec": {
                "metadata": {"name": view.metadata.display_name or view.metadata.name},
                "providerSpec": {
                    "value": {
                        "sshPublicKeys": list(cluster.ssh_public_keys),
                        "cloudProvider": cloud.provider.value,
                        "cloudProviderSpec": cloud.settings.model_dump(by_alias=True, mode="json"),
                        "operatingSystem": operating_system.kind.value,
                        "operatingSystemSpec": operating_system.settings.model_dump(
                            by_alias=True, mode="json"
                        ),
                    },
                },
                "versions": {"kubelet": view.spec.versions.kubelet},
            },
        }
