"""Idempotent create-or-update of Kubernetes objects."""

from kubenode_mcp.reconciling.reconciler import (
    DEFAULT_MAX_RETRIES,
    DesiredStateFn,
    ObjectStore,
    ReconcileAction,
    ReconcileResult,
    reconcile,
    reconcile_all,
)
from kubenode_mcp.reconciling.stores import RoleBindingStore, RoleStore

__all__ = [
    "DEFAULT_MAX_RETRIES",
    "DesiredStateFn",
    "ObjectStore",
    "ReconcileAction",
    "ReconcileResult",
    "reconcile",
    "reconcile_all",
    "RoleStore",
    "RoleBindingStore",
]
