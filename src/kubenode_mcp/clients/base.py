"""Kubernetes client wrapper used by every domain.

Wraps the official ``kubernetes`` client: connection handling, a dynamic
client for custom resources, typed accessors for Nodes and RBAC objects,
and translation of API failures into kubenode-mcp errors.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

import urllib3
from kubernetes import client as k8s_client  # type: ignore[import-untyped]
from kubernetes import config as k8s_config  # type: ignore[import-untyped]
from kubernetes.client import ApiException  # type: ignore[import-untyped]
from kubernetes.config.config_exception import ConfigException  # type: ignore[import-untyped]
from kubernetes.dynamic import DynamicClient  # type: ignore[import-untyped]
from kubernetes.dynamic.exceptions import ResourceNotFoundError  # type: ignore[import-untyped]

from kubenode_mcp.config import AuthMode
from kubenode_mcp.utils.errors import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    KubeNodeError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)

if TYPE_CHECKING:
    from kubenode_mcp.config import KubeNodeConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CRDDefinition:
    """Identity of a custom resource type."""

    group: str
    version: str
    plural: str
    kind: str

    @property
    def api_version(self) -> str:
        """Full API version string (group/version)."""
        return f"{self.group}/{self.version}"


def translate_api_exception(
    exc: ApiException,
    resource_type: str,
    name: str | None = None,
    namespace: str | None = None,
) -> KubeNodeError:
    """Map a Kubernetes API failure onto the error taxonomy."""
    status = getattr(exc, "status", None)
    reason = getattr(exc, "reason", None) or str(exc)
    details = {"status": status, "resource_type": resource_type, "name": name}

    if status == 404:
        return NotFoundError(resource_type, name or "<list>", namespace)
    if status == 409:
        return ConflictError(f"Conflict writing {resource_type} '{name}': {reason}", details)
    if status in (400, 422):
        return ValidationError(f"Invalid {resource_type} '{name}': {reason}", details)
    if status in (401, 403):
        return AuthenticationError(f"Access to {resource_type} denied: {reason}", details)
    return UpstreamError(f"Kubernetes API error for {resource_type}: {reason}", details)


class K8sClient:
    """Connection to the user cluster's Kubernetes API."""

    def __init__(self, config: KubeNodeConfig) -> None:
        self._config = config
        self._api_client: k8s_client.ApiClient | None = None
        self._core_v1: k8s_client.CoreV1Api | None = None
        self._rbac_v1: k8s_client.RbacAuthorizationV1Api | None = None
        self._dynamic: DynamicClient | None = None

    @property
    def is_connected(self) -> bool:
        """Whether connect() has succeeded and disconnect() has not run since."""
        return self._api_client is not None

    def connect(self) -> None:
        """Load credentials and build the API clients.

        Raises:
            ConfigurationError: If no usable credentials are found.
        """
        configuration = k8s_client.Configuration()
        try:
            if self._config.auth_mode == AuthMode.TOKEN:
                configuration.host = self._config.api_server
                configuration.api_key = {"authorization": f"Bearer {self._config.api_token}"}
            elif (
                self._config.auth_mode == AuthMode.KUBECONFIG
                or self._config.effective_kubeconfig_path.exists()
            ):
                k8s_config.load_kube_config(
                    config_file=str(self._config.effective_kubeconfig_path),
                    context=self._config.kubeconfig_context,
                    client_configuration=configuration,
                )
            else:
                k8s_config.load_incluster_config(client_configuration=configuration)
        except ConfigException as e:
            raise ConfigurationError(f"Failed to load Kubernetes configuration: {e}") from e

        self._api_client = k8s_client.ApiClient(configuration)
        self._core_v1 = k8s_client.CoreV1Api(self._api_client)
        self._rbac_v1 = k8s_client.RbacAuthorizationV1Api(self._api_client)
        self._dynamic = DynamicClient(self._api_client)
        logger.info(f"Connected to Kubernetes API at {configuration.host}")

    def disconnect(self) -> None:
        """Close the underlying API client."""
        if self._api_client is not None:
            self._api_client.close()
        self._api_client = None
        self._core_v1 = None
        self._rbac_v1 = None
        self._dynamic = None
        logger.info("Disconnected from Kubernetes API")

    @property
    def core_v1(self) -> k8s_client.CoreV1Api:
        """Core v1 API."""
        if self._core_v1 is None:
            raise RuntimeError("K8s client not connected")
        return self._core_v1

    @property
    def rbac_v1(self) -> k8s_client.RbacAuthorizationV1Api:
        """RBAC v1 API."""
        if self._rbac_v1 is None:
            raise RuntimeError("K8s client not connected")
        return self._rbac_v1

    @property
    def dynamic(self) -> DynamicClient:
        """Dynamic client for custom resources."""
        if self._dynamic is None:
            raise RuntimeError("K8s client not connected")
        return self._dynamic

    def to_dict(self, obj: Any) -> dict[str, Any]:
        """Serialize an API model into a plain manifest dict (camelCase keys)."""
        if self._api_client is None:
            raise RuntimeError("K8s client not connected")
        return self._api_client.sanitize_for_serialization(obj)

    def _call(
        self,
        ref: tuple[str, str | None, str | None],
        fn: Callable[..., T],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Run an API call under the configured deadline, translating failures.

        Args:
            ref: (resource type, name, namespace) used to describe failures.
            fn: API method to invoke.
        """
        resource_type, name, namespace = ref
        try:
            return fn(*args, _request_timeout=self._config.request_timeout, **kwargs)
        except ApiException as e:
            raise translate_api_exception(e, resource_type, name, namespace) from e
        except urllib3.exceptions.HTTPError as e:
            raise UpstreamError(f"Failed to reach Kubernetes API for {resource_type}: {e}") from e

    # Version

    def get_server_version(self) -> str:
        """Return the API server's version without the leading 'v'."""
        if self._api_client is None:
            raise RuntimeError("K8s client not connected")
        version_api = k8s_client.VersionApi(self._api_client)
        info = self._call(("Version", None, None), version_api.get_code)
        return str(info.git_version).lstrip("v")

    # Custom resources

    def _resource(self, crd: CRDDefinition) -> Any:
        try:
            return self.dynamic.resources.get(api_version=crd.api_version, kind=crd.kind)
        except ResourceNotFoundError as e:
            raise NotFoundError("CustomResourceDefinition", f"{crd.plural}.{crd.group}") from e

    def list_resources(
        self,
        crd: CRDDefinition,
        namespace: str | None = None,
        label_selector: str | None = None,
        limit: int | None = None,
    ) -> list[Any]:
        """List custom resources of one kind."""
        resource = self._resource(crd)
        kwargs: dict[str, Any] = {}
        if label_selector:
            kwargs["label_selector"] = label_selector
        if limit:
            kwargs["limit"] = limit
        result = self._call(
            (crd.kind, None, namespace), self.dynamic.get, resource, namespace=namespace, **kwargs
        )
        return list(result.items)

    def get(self, crd: CRDDefinition, name: str, namespace: str | None = None) -> Any:
        """Get a custom resource by name."""
        resource = self._resource(crd)
        return self._call(
            (crd.kind, name, namespace), self.dynamic.get, resource, name=name, namespace=namespace
        )

    def create(
        self, crd: CRDDefinition, body: dict[str, Any], namespace: str | None = None
    ) -> Any:
        """Create a custom resource."""
        resource = self._resource(crd)
        name = body.get("metadata", {}).get("name")
        ref = (crd.kind, name, namespace)
        return self._call(ref, self.dynamic.create, resource, body=body, namespace=namespace)

    def delete(self, crd: CRDDefinition, name: str, namespace: str | None = None) -> None:
        """Delete a custom resource by name."""
        resource = self._resource(crd)
        ref = (crd.kind, name, namespace)
        self._call(ref, self.dynamic.delete, resource, name=name, namespace=namespace)

    # Nodes

    def list_nodes(self, label_selector: str | None = None) -> list[Any]:
        """List cluster Nodes."""
        kwargs: dict[str, Any] = {}
        if label_selector:
            kwargs["label_selector"] = label_selector
        result = self._call(("Node", None, None), self.core_v1.list_node, **kwargs)
        return list(result.items)

    def get_node(self, name: str) -> Any:
        """Get a Node by name."""
        return self._call(("Node", name, None), self.core_v1.read_node, name)

    def delete_node(self, name: str) -> None:
        """Delete a Node by name."""
        self._call(("Node", name, None), self.core_v1.delete_node, name)

    # RBAC

    def get_role(self, name: str, namespace: str) -> Any:
        """Get a Role."""
        return self._call(
            ("Role", name, namespace), self.rbac_v1.read_namespaced_role, name, namespace
        )

    def create_role(self, body: dict[str, Any], namespace: str) -> Any:
        """Create a Role."""
        ref = ("Role", body["metadata"]["name"], namespace)
        return self._call(ref, self.rbac_v1.create_namespaced_role, namespace, body)

    def replace_role(self, name: str, body: dict[str, Any], namespace: str) -> Any:
        """Replace a Role; fails with a conflict when resourceVersion is stale."""
        return self._call(
            ("Role", name, namespace), self.rbac_v1.replace_namespaced_role, name, namespace, body
        )

    def get_role_binding(self, name: str, namespace: str) -> Any:
        """Get a RoleBinding."""
        return self._call(
            ("RoleBinding", name, namespace),
            self.rbac_v1.read_namespaced_role_binding,
            name,
            namespace,
        )

    def create_role_binding(self, body: dict[str, Any], namespace: str) -> Any:
        """Create a RoleBinding."""
        ref = ("RoleBinding", body["metadata"]["name"], namespace)
        return self._call(ref, self.rbac_v1.create_namespaced_role_binding, namespace, body)

    def replace_role_binding(self, name: str, body: dict[str, Any], namespace: str) -> Any:
        """Replace a RoleBinding; fails with a conflict when resourceVersion is stale."""
        return self._call(
            ("RoleBinding", name, namespace),
            self.rbac_v1.replace_namespaced_role_binding,
            name,
            namespace,
            body,
        )
