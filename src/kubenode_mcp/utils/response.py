"""Response shaping for tool output: verbosity levels and pagination."""

from enum import Enum
from typing import Any, TypeVar

T = TypeVar("T")


class Verbosity(str, Enum):
    """How much of each item a tool returns."""

    MINIMAL = "minimal"
    STANDARD = "standard"
    FULL = "full"

    @classmethod
    def from_str(cls, value: str | None) -> "Verbosity":
        """Parse a verbosity name, falling back to STANDARD."""
        if not value:
            return cls.STANDARD
        try:
            return cls(value.lower())
        except ValueError:
            return cls.STANDARD


def paginate(items: list[T], offset: int = 0, limit: int | None = None) -> tuple[list[T], int]:
    """Slice ``items`` and return the page together with the total count."""
    total = len(items)
    offset = max(offset, 0)
    if limit is None:
        return items[offset:], total
    return items[offset : offset + limit], total


class PaginatedResponse:
    """Envelope for paginated list results."""

    @staticmethod
    def build(
        items: list[dict[str, Any]],
        total: int,
        offset: int,
        limit: int | None,
    ) -> dict[str, Any]:
        return {
            "items": items,
            "total": total,
            "offset": offset,
            "limit": limit,
            "has_more": offset + len(items) < total,
        }


class ResponseBuilder:
    """Renders worker nodes at a given verbosity.

    Accepts either read model: the structured one (``metadata.name`` and
    ``metadata.display_name``) or the legacy one (``id`` and ``name``).
    Identity keys keep the shape of the model passed in.
    """

    @staticmethod
    def _identity(node: Any) -> dict[str, Any]:
        if hasattr(node, "metadata"):
            return {"name": node.metadata.name, "display_name": node.metadata.display_name}
        return {"id": node.id, "name": node.name}

    @staticmethod
    def node_list_item(node: Any, verbosity: Verbosity = Verbosity.STANDARD) -> dict[str, Any]:
        """Render one node of a list."""
        if verbosity == Verbosity.FULL:
            return node.model_dump(mode="json")

        result = ResponseBuilder._identity(node)
        result["error_reason"] = node.status.error_reason
        if verbosity == Verbosity.MINIMAL:
            return result

        cloud = node.spec.cloud.provider
        result.update(
            {
                "kubelet_version": node.spec.versions.kubelet,
                "cloud_provider": cloud.value if cloud else None,
                "machine_name": node.status.machine_name,
                "addresses": [a.model_dump() for a in node.status.addresses],
                "error_message": node.status.error_message,
            }
        )
        return result

    @staticmethod
    def node_detail(node: Any, verbosity: Verbosity = Verbosity.FULL) -> dict[str, Any]:
        """Render a single node; detail views default to everything."""
        return ResponseBuilder.node_list_item(node, verbosity)
