"""Common Pydantic models shared across Kubernetes resources."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def field_of(obj: Any, *names: str, default: Any = None) -> Any:
    """Read the first present field from an API object or a manifest dict.

    Core API models expose snake_case attributes while manifests and
    dynamic-client objects use camelCase keys, so callers pass both spellings.
    """
    if obj is None:
        return default
    for name in names:
        if isinstance(obj, dict):
            if name in obj and obj[name] is not None:
                return obj[name]
        else:
            value = getattr(obj, name, None)
            if value is not None:
                return value
    return default


class Condition(BaseModel):
    """Kubernetes-style condition."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., description="Condition type")
    status: str = Field(..., description="Condition status (True, False, Unknown)")
    reason: str = Field("", description="Machine-readable reason")
    message: str = Field("", description="Human-readable message")
    last_transition_time: datetime | None = Field(None, description="Last transition time")

    @property
    def is_true(self) -> bool:
        """Check if condition status is True."""
        return self.status == "True"

    @classmethod
    def from_k8s_condition(cls, condition: Any) -> "Condition":
        """Create from a Kubernetes condition object or dict."""
        return cls(
            type=field_of(condition, "type"),
            status=field_of(condition, "status", default="Unknown"),
            reason=field_of(condition, "reason", default=""),
            message=field_of(condition, "message", default=""),
            last_transition_time=field_of(
                condition, "last_transition_time", "lastTransitionTime"
            ),
        )


class OwnerReference(BaseModel):
    """Kubernetes owner reference."""

    model_config = ConfigDict(frozen=True)

    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = False
    block_owner_deletion: bool = False

    @classmethod
    def from_k8s_owner_reference(cls, ref: Any) -> "OwnerReference":
        """Create from a Kubernetes owner reference object or dict."""
        return cls(
            api_version=field_of(ref, "api_version", "apiVersion", default=""),
            kind=field_of(ref, "kind", default=""),
            name=field_of(ref, "name", default=""),
            uid=field_of(ref, "uid", default=""),
            controller=bool(field_of(ref, "controller", default=False)),
            block_owner_deletion=bool(
                field_of(ref, "block_owner_deletion", "blockOwnerDeletion", default=False)
            ),
        )


def controller_of(owner_references: list[OwnerReference]) -> OwnerReference | None:
    """Return the controlling owner reference, if any."""
    for ref in owner_references:
        if ref.controller:
            return ref
    return None
