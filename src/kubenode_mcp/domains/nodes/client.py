"""Worker node client operations."""

from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from typing import TYPE_CHECKING

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from kubenode_mcp.domains.nodes.correlation import correlate, locate
from kubenode_mcp.domains.nodes.crds import MachineCRDs
from kubenode_mcp.domains.nodes.models import (
    ClusterContext,
    CorrelatedNode,
    Machine,
    NodeView,
    RuntimeNode,
)
from kubenode_mcp.domains.nodes.status import INITIAL_CONDITION_PARSING_DELAY, project
from kubenode_mcp.domains.nodes.templates import (
    DefaultMachineTemplateProvider,
    MachineTemplateProvider,
)
from kubenode_mcp.utils.errors import ConfigurationError, NotFoundError, ValidationError

if TYPE_CHECKING:
    from kubenode_mcp.clients.base import K8sClient
    from kubenode_mcp.config import KubeNodeConfig

logger = logging.getLogger(__name__)

# Alphabet of Kubernetes generated-name suffixes (no vowels, no confusable digits).
NAME_SUFFIX_ALPHABET = "bcdfghjklmnpqrstvwxz2456789"
NAME_SUFFIX_LENGTH = 5


def validate_kubelet_version(version: str, constraint: str) -> str:
    """Parse ``version`` and check it against ``constraint``.

    Returns:
        The normalized version string.

    Raises:
        ValidationError: If the version does not parse or is outside the constraint.
        ConfigurationError: If the constraint itself does not parse.
    """
    try:
        specifier = SpecifierSet(constraint)
    except InvalidSpecifier as e:
        raise ConfigurationError(f"invalid kubelet version constraint '{constraint}'") from e

    try:
        parsed = Version(version.lstrip("v"))
    except InvalidVersion as e:
        raise ValidationError(f"failed to parse kubelet version '{version}'") from e

    if not specifier.contains(parsed, prereleases=True):
        raise ValidationError(
            f"kubelet version does not fit constraint. Allowed {constraint}",
            {"version": version, "constraint": constraint},
        )
    return str(parsed)


def generate_node_name(prefix: str, cluster_name: str) -> str:
    suffix = "".join(secrets.choice(NAME_SUFFIX_ALPHABET) for _ in range(NAME_SUFFIX_LENGTH))
    return f"{prefix}{cluster_name}-{suffix}"


def build_cluster_context(config: KubeNodeConfig) -> ClusterContext:
    """Describe the operated cluster from configuration.

    The version is left empty; :class:`NodeClient` asks the API server for it
    on first use.
    """
    return ClusterContext(
        name=config.cluster_name,
        machine_namespace=config.machine_namespace,
        ssh_public_keys=list(config.ssh_public_keys),
    )


class NodeClient:
    """Client for worker node operations.

    Reads always fetch Machines and Nodes afresh; nothing is cached between
    calls.
    """

    def __init__(
        self,
        k8s: K8sClient,
        cluster: ClusterContext,
        *,
        version_constraint: str = ">=1.8",
        name_prefix: str = "kubenode-",
        grace_period: timedelta = INITIAL_CONDITION_PARSING_DELAY,
        template_provider: MachineTemplateProvider | None = None,
    ) -> None:
        self._k8s = k8s
        self._cluster = cluster
        self._version_constraint = version_constraint
        self._name_prefix = name_prefix
        self._grace_period = grace_period
        self._templates = template_provider or DefaultMachineTemplateProvider()

    @classmethod
    def from_config(cls, k8s: K8sClient, config: KubeNodeConfig) -> NodeClient:
        """Create a client configured from server settings."""
        return cls(
            k8s,
            build_cluster_context(config),
            version_constraint=config.kubelet_version_constraint,
            name_prefix=config.node_name_prefix,
            grace_period=timedelta(minutes=config.condition_grace_period_minutes),
        )

    @property
    def cluster(self) -> ClusterContext:
        """The operated cluster, with its version fetched on first use."""
        if not self._cluster.version:
            self._cluster = self._cluster.model_copy(
                update={"version": self._k8s.get_server_version()}
            )
        return self._cluster

    def _list_machines(self) -> list[Machine]:
        resources = self._k8s.list_resources(
            MachineCRDs.MACHINE, namespace=self._cluster.machine_namespace
        )
        return [Machine.from_machine_cr(resource) for resource in resources]

    def _list_runtime_nodes(self) -> list[RuntimeNode]:
        return [RuntimeNode.from_k8s_node(node) for node in self._k8s.list_nodes()]

    def _project(self, entity: CorrelatedNode, hide_initial_conditions: bool) -> NodeView:
        cluster_version = ""
        if entity.machine is not None and not entity.machine.kubelet_version:
            cluster_version = self.cluster.version
        return project(
            entity,
            hide_initial_conditions,
            cluster_version=cluster_version,
            grace_period=self._grace_period,
        )

    def list_nodes(self, hide_initial_conditions: bool = False) -> list[NodeView]:
        """List every worker: Machine-backed ones first, then externally joined Nodes."""
        machines = self._list_machines()
        nodes = self._list_runtime_nodes()
        entities = correlate(machines, nodes)
        logger.debug(
            f"Correlated {len(machines)} machines and {len(nodes)} nodes "
            f"into {len(entities)} workers"
        )
        return [self._project(entity, hide_initial_conditions) for entity in entities]

    def find_node(self, name: str) -> CorrelatedNode:
        """Find the Machine and/or Node behind ``name``.

        Raises:
            NotFoundError: If neither a Machine nor a Node matches.
        """
        entity = locate(name, self._list_machines(), self._list_runtime_nodes())
        if entity is None:
            raise NotFoundError("Node", name)
        return entity

    def get_node(self, name: str, hide_initial_conditions: bool = False) -> NodeView:
        """Get one worker by Machine or Node name."""
        return self._project(self.find_node(name), hide_initial_conditions)

    def create_node(self, request: NodeView) -> NodeView:
        """Create a Machine for a new worker.

        Raises:
            ValidationError: If the request names no single cloud provider or an
                unacceptable kubelet version.
            TemplatingError: If the Machine manifest cannot be built.
        """
        request.spec.cloud.require_single_provider()

        view = request.model_copy(deep=True)
        if view.spec.versions.kubelet:
            view.spec.versions.kubelet = validate_kubelet_version(
                view.spec.versions.kubelet, self._version_constraint
            )
        else:
            view.spec.versions.kubelet = self.cluster.version

        if not view.metadata.name:
            view.metadata.name = generate_node_name(self._name_prefix, self._cluster.name)

        body = self._templates.build(self.cluster, view)
        created = self._k8s.create(
            MachineCRDs.MACHINE, body=body, namespace=self._cluster.machine_namespace
        )
        logger.info(
            f"Created machine {view.metadata.name} in {self._cluster.machine_namespace} "
            f"for cluster {self._cluster.name}"
        )
        return self._project(CorrelatedNode(machine=Machine.from_machine_cr(created)), False)

    def delete_node(self, name: str) -> CorrelatedNode:
        """Delete a worker.

        Machine-backed workers are deleted through their Machine so the
        provisioner tears the instance down; externally joined workers are
        deleted as Nodes.

        Returns:
            The worker that was deleted.
        """
        entity = self.find_node(name)
        if entity.machine is not None:
            self._k8s.delete(
                MachineCRDs.MACHINE,
                entity.machine.name,
                namespace=entity.machine.namespace or self._cluster.machine_namespace,
            )
            logger.info(f"Deleted machine {entity.machine.name}")
        elif entity.node is not None:
            self._k8s.delete_node(entity.node.name)
            logger.info(f"Deleted node {entity.node.name}")
        return entity
