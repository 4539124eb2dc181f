"""CRD definitions for cluster-api Machine resources."""

from kubenode_mcp.clients.base import CRDDefinition


class MachineCRDs:
    """cluster-api CRD definitions."""

    MACHINE = CRDDefinition(
        group="cluster.k8s.io",
        version="v1alpha1",
        plural="machines",
        kind="Machine",
    )

    @classmethod
    def all_crds(cls) -> list[CRDDefinition]:
        """Return all CRD definitions."""
        return [cls.MACHINE]
