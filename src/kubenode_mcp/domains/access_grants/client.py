"""Client applying access grants to the cluster."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from kubenode_mcp.domains.access_grants.templates import (
    KUBE_SCHEDULER_NAMESPACE,
    access_grant_creators,
)
from kubenode_mcp.reconciling import (
    DEFAULT_MAX_RETRIES,
    ObjectStore,
    ReconcileAction,
    ReconcileResult,
    RoleBindingStore,
    RoleStore,
    reconcile_all,
)

if TYPE_CHECKING:
    from kubenode_mcp.clients.base import K8sClient

logger = logging.getLogger(__name__)


class AccessGrantClient:
    """Reconciles the Roles and RoleBindings control plane components need."""

    def __init__(
        self,
        k8s: K8sClient,
        namespace: str = KUBE_SCHEDULER_NAMESPACE,
        max_retries: int = DEFAULT_MAX_RETRIES,
        timeout: float | None = None,
    ) -> None:
        self._k8s = k8s
        self._namespace = namespace
        self._max_retries = max_retries
        self._timeout = timeout

    def _store(self, kind: str) -> ObjectStore:
        if kind == "Role":
            return RoleStore(self._k8s, self._namespace)
        if kind == "RoleBinding":
            return RoleBindingStore(self._k8s, self._namespace)
        raise ValueError(f"No object store for kind {kind}")

    def ensure_access_grants(self) -> list[ReconcileResult]:
        """Create or update every access grant, stopping at the first failure."""
        results: list[ReconcileResult] = []
        for kind, creators in access_grant_creators():
            results.extend(
                reconcile_all(
                    creators,
                    self._store(kind),
                    max_retries=self._max_retries,
                    timeout=self._timeout,
                )
            )
        changed = sum(1 for r in results if r.action != ReconcileAction.UNCHANGED)
        logger.info(
            f"Reconciled {len(results)} access grants in {self._namespace}, {changed} changed"
        )
        return results
