"""Nodes domain - worker nodes backed by Machines and Nodes."""

from kubenode_mcp.domains.nodes.client import NodeClient
from kubenode_mcp.domains.nodes.conversion import from_legacy, to_legacy, to_legacy_list
from kubenode_mcp.domains.nodes.correlation import correlate, locate
from kubenode_mcp.domains.nodes.models import (
    ClusterContext,
    CorrelatedNode,
    LegacyNode,
    Machine,
    NodeCloudSpec,
    NodeView,
    RuntimeNode,
)
from kubenode_mcp.domains.nodes.status import project

__all__ = [
    "NodeClient",
    "ClusterContext",
    "CorrelatedNode",
    "LegacyNode",
    "Machine",
    "NodeCloudSpec",
    "NodeView",
    "RuntimeNode",
    "correlate",
    "locate",
    "project",
    "to_legacy",
    "from_legacy",
    "to_legacy_list",
]
