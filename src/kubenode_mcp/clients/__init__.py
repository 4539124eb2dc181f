"""Kubernetes client layer."""

from kubenode_mcp.clients.base import CRDDefinition, K8sClient, translate_api_exception

__all__ = ["CRDDefinition", "K8sClient", "translate_api_exception"]
