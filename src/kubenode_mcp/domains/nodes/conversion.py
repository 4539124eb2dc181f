"""Conversion between the structured and the legacy node shapes.

The legacy shape flattens metadata into ``id`` (the node identity) and
``name`` (the display name) and carries no labels or annotations.
"""

from collections.abc import Iterable

from kubenode_mcp.domains.nodes.models import LegacyNode, NodeObjectMeta, NodeView


def to_legacy(view: NodeView) -> LegacyNode:
    return LegacyNode(
        id=view.metadata.name,
        name=view.metadata.display_name,
        creation_timestamp=view.metadata.creation_timestamp,
        deletion_timestamp=view.metadata.deletion_timestamp,
        spec=view.spec.model_copy(deep=True),
        status=view.status.model_copy(deep=True),
    )


def from_legacy(legacy: LegacyNode) -> NodeView:
    return NodeView(
        metadata=NodeObjectMeta(
            name=legacy.id,
            display_name=legacy.name,
            creation_timestamp=legacy.creation_timestamp,
            deletion_timestamp=legacy.deletion_timestamp,
        ),
        spec=legacy.spec.model_copy(deep=True),
        status=legacy.status.model_copy(deep=True),
    )


def to_legacy_list(views: Iterable[NodeView]) -> list[LegacyNode]:
    return [to_legacy(view) for view in views]
