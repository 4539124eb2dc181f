"""Access grants domain - RBAC objects for control plane components."""

from kubenode_mcp.domains.access_grants.client import AccessGrantClient
from kubenode_mcp.domains.access_grants.templates import (
    access_grant_creators,
    kube_scheduler_role_binding_creator,
    kube_scheduler_role_creator,
)

__all__ = [
    "AccessGrantClient",
    "access_grant_creators",
    "kube_scheduler_role_creator",
    "kube_scheduler_role_binding_creator",
]
