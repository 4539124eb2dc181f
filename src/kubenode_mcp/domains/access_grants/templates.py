"""Desired state of the RBAC objects the kube-scheduler needs.

Each creator getter returns ``(name, desired_fn)`` for use with
``kubenode_mcp.reconciling.reconcile``. Desired-state functions copy the
object they are given, overwrite the fields they manage, and leave every
other field (resourceVersion, labels set by others) as it was.
"""

import copy
from typing import Any

from kubenode_mcp.reconciling.reconciler import DesiredStateFn

RBAC_API_GROUP = "rbac.authorization.k8s.io"
RBAC_API_VERSION = f"{RBAC_API_GROUP}/v1"

KUBE_SCHEDULER_NAMESPACE = "openshift-kube-scheduler"
KUBE_SCHEDULER_LEADER_ELECTION_NAME = "system:openshift:sa-leader-election-configmaps"
KUBE_SCHEDULER_USER = "system:kube-scheduler"


def _base(existing: dict[str, Any] | None, kind: str, name: str, namespace: str) -> dict[str, Any]:
    if existing is None:
        obj: dict[str, Any] = {"apiVersion": RBAC_API_VERSION, "kind": kind}
    else:
        obj = copy.deepcopy(existing)
    metadata = obj.setdefault("metadata", {})
    metadata["name"] = name
    metadata["namespace"] = namespace
    return obj


def kube_scheduler_role_creator() -> tuple[str, DesiredStateFn]:
    """Role letting the scheduler hold its leader-election ConfigMap lock."""

    def desired(existing: dict[str, Any] | None) -> dict[str, Any]:
        role = _base(
            existing, "Role", KUBE_SCHEDULER_LEADER_ELECTION_NAME, KUBE_SCHEDULER_NAMESPACE
        )
        role["rules"] = [
            {
                "apiGroups": [""],
                "resources": ["configmaps"],
                "verbs": ["get", "create", "update"],
            }
        ]
        return role

    return KUBE_SCHEDULER_LEADER_ELECTION_NAME, desired


def kube_scheduler_role_binding_creator() -> tuple[str, DesiredStateFn]:
    """RoleBinding granting the leader-election Role to the scheduler user."""

    def desired(existing: dict[str, Any] | None) -> dict[str, Any]:
        binding = _base(
            existing, "RoleBinding", KUBE_SCHEDULER_LEADER_ELECTION_NAME, KUBE_SCHEDULER_NAMESPACE
        )
        binding["roleRef"] = {
            "apiGroup": RBAC_API_GROUP,
            "kind": "Role",
            "name": KUBE_SCHEDULER_LEADER_ELECTION_NAME,
        }
        binding["subjects"] = [
            {
                "apiGroup": RBAC_API_GROUP,
                "kind": "User",
                "name": KUBE_SCHEDULER_USER,
            }
        ]
        return binding

    return KUBE_SCHEDULER_LEADER_ELECTION_NAME, desired


def role_creators() -> list[tuple[str, DesiredStateFn]]:
    return [kube_scheduler_role_creator()]


def role_binding_creators() -> list[tuple[str, DesiredStateFn]]:
    return [kube_scheduler_role_binding_creator()]


def access_grant_creators() -> list[tuple[str, list[tuple[str, DesiredStateFn]]]]:
    """Creators grouped by kind, Roles before the bindings that reference them."""
    return [("Role", role_creators()), ("RoleBinding", role_binding_creators())]
