"""MCP Tools for worker node operations."""

from typing import TYPE_CHECKING, Any

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError as PydanticValidationError

from kubenode_mcp.domains.nodes.client import NodeClient
from kubenode_mcp.domains.nodes.conversion import to_legacy
from kubenode_mcp.domains.nodes.models import (
    NodeCloudSpec,
    NodeObjectMeta,
    NodeSpec,
    NodeVersionInfo,
    NodeView,
    OperatingSystemSpec,
)
from kubenode_mcp.utils.errors import (
    KubeNodeError,
    OperationNotAllowedError,
    ValidationError,
)
from kubenode_mcp.utils.response import (
    PaginatedResponse,
    ResponseBuilder,
    Verbosity,
    paginate,
)

if TYPE_CHECKING:
    from kubenode_mcp.server import KubeNodeServer

API_VERSIONS = ("v1", "v2")


def _shape(view: NodeView, api_version: str) -> Any:
    """Pick the read model for the requested API version."""
    if api_version not in API_VERSIONS:
        raise ValidationError(
            f"Unknown api_version '{api_version}', expected one of: {', '.join(API_VERSIONS)}"
        )
    return view if api_version == "v2" else to_legacy(view)


def _build_request(
    name: str,
    display_name: str,
    cloud_provider: str,
    cloud_settings: dict[str, Any] | None,
    operating_system: str,
    os_settings: dict[str, Any] | None,
    kubelet_version: str,
) -> NodeView:
    try:
        cloud = (
            NodeCloudSpec.from_provider(cloud_provider, cloud_settings)
            if cloud_provider
            else NodeCloudSpec()
        )
        os_spec = (
            OperatingSystemSpec.from_kind(operating_system, os_settings)
            if operating_system
            else OperatingSystemSpec()
        )
    except (ValueError, PydanticValidationError) as e:
        raise ValidationError(f"Invalid node settings: {e}") from e

    return NodeView(
        metadata=NodeObjectMeta(name=name, display_name=display_name),
        spec=NodeSpec(
            versions=NodeVersionInfo(kubelet=kubelet_version),
            operating_system=os_spec,
            cloud=cloud,
        ),
    )


def register_tools(mcp: FastMCP, server: "KubeNodeServer") -> None:
    """Register worker node tools with the MCP server."""

    @mcp.tool()
    def list_cluster_nodes(
        hide_initial_conditions: bool = False,
        api_version: str = "v1",
        limit: int | None = None,
        offset: int = 0,
        verbosity: str = "standard",
    ) -> dict[str, Any]:
        """List the worker nodes of the cluster with pagination.

        Workers created through Machines come first, followed by nodes that
        joined the cluster without a Machine.

        Args:
            hide_initial_conditions: Skip condition errors of nodes that joined
                less than the grace period ago.
            api_version: "v1" for the flat legacy shape, "v2" for the
                structured shape with labels and annotations.
            limit: Maximum number of items to return (None for all).
            offset: Starting offset for pagination (default: 0).
            verbosity: Response detail level - "minimal", "standard", or "full".

        Returns:
            Paginated list of worker nodes.
        """
        try:
            client = NodeClient.from_config(server.k8s, server.config)
            views = client.list_nodes(hide_initial_conditions)
            nodes = [_shape(view, api_version) for view in views]
        except KubeNodeError as e:
            return e.to_dict()

        effective_limit = limit
        if effective_limit is not None:
            effective_limit = min(effective_limit, server.config.max_list_limit)
        elif server.config.default_list_limit is not None:
            effective_limit = server.config.default_list_limit

        paginated, total = paginate(nodes, offset, effective_limit)

        v = Verbosity.from_str(verbosity)
        items = [ResponseBuilder.node_list_item(node, v) for node in paginated]

        return PaginatedResponse.build(items, total, offset, effective_limit)

    @mcp.tool()
    def get_cluster_node(
        name: str,
        hide_initial_conditions: bool = False,
        api_version: str = "v1",
    ) -> dict[str, Any]:
        """Get one worker node by its Machine or Node name.

        Args:
            name: Machine name, or Node name for nodes without a Machine.
            hide_initial_conditions: Skip condition errors while the node is new.
            api_version: "v1" for the legacy shape, "v2" for the structured one.

        Returns:
            The worker node.
        """
        try:
            client = NodeClient.from_config(server.k8s, server.config)
            view = client.get_node(name, hide_initial_conditions)
            return ResponseBuilder.node_detail(_shape(view, api_version))
        except KubeNodeError as e:
            return e.to_dict()

    @mcp.tool()
    def create_cluster_node(
        cloud_provider: str,
        cloud_settings: dict[str, Any] | None = None,
        operating_system: str = "ubuntu",
        os_settings: dict[str, Any] | None = None,
        name: str = "",
        display_name: str = "",
        kubelet_version: str = "",
        api_version: str = "v1",
    ) -> dict[str, Any]:
        """Create a worker node by creating its Machine.

        Args:
            cloud_provider: One of digitalocean, aws, openstack, hetzner,
                vsphere, azure.
            cloud_settings: Provider settings, e.g. {"size": "s-2vcpu-4gb"}
                for digitalocean or {"instanceType": "t3.medium"} for aws.
            operating_system: One of ubuntu, centos, containerLinux.
            os_settings: Operating system settings, e.g. {"distUpgradeOnBoot": true}.
            name: Machine name; generated from the cluster name when empty.
            display_name: Node name the Machine declares; defaults to name.
            kubelet_version: Kubelet version; defaults to the cluster version.
            api_version: "v1" for the legacy shape, "v2" for the structured one.

        Returns:
            The created worker node.
        """
        allowed, reason = server.config.is_operation_allowed("create")
        if not allowed:
            return OperationNotAllowedError(reason or "Operation not allowed").to_dict()

        try:
            request = _build_request(
                name,
                display_name,
                cloud_provider,
                cloud_settings,
                operating_system,
                os_settings,
                kubelet_version,
            )
            client = NodeClient.from_config(server.k8s, server.config)
            view = client.create_node(request)
            result = ResponseBuilder.node_detail(_shape(view, api_version))
        except KubeNodeError as e:
            return e.to_dict()

        result["message"] = f"Node '{view.metadata.name}' created"
        return result

    @mcp.tool()
    def delete_cluster_node(
        name: str,
        confirm: bool = False,
    ) -> dict[str, Any]:
        """Delete a worker node.

        WARNING: Deleting a Machine-backed node deprovisions its cloud
        instance. Nodes without a Machine are removed from the cluster only.

        Args:
            name: Machine name, or Node name for nodes without a Machine.
            confirm: Must be True to actually delete.

        Returns:
            Confirmation of deletion.
        """
        allowed, reason = server.config.is_operation_allowed("delete")
        if not allowed:
            return OperationNotAllowedError(reason or "Operation not allowed").to_dict()

        if not confirm:
            return {
                "error": "Deletion not confirmed",
                "message": (
                    f"To delete node '{name}', set confirm=True. "
                    "WARNING: Machine-backed nodes lose their cloud instance."
                ),
            }

        try:
            client = NodeClient.from_config(server.k8s, server.config)
            entity = client.delete_node(name)
        except KubeNodeError as e:
            return e.to_dict()

        kind = "Machine" if entity.machine is not None else "Node"
        return {
            "name": name,
            "kind": kind,
            "deleted": True,
            "message": f"{kind} '{name}' deleted",
        }
