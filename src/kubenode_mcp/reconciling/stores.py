"""Object stores over the RBAC API of one namespace."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from kubenode_mcp.clients.base import K8sClient


class _NamespacedStore:
    """Adapts typed get/create/replace calls to the ObjectStore protocol.

    Objects are exchanged as plain manifest dicts with camelCase keys, so
    desired-state functions and structural comparison see the same shape
    the API server returns.
    """

    kind = ""

    def __init__(
        self,
        k8s: K8sClient,
        namespace: str,
        getter: Callable[[str, str], Any],
        creator: Callable[[dict[str, Any], str], Any],
        replacer: Callable[[str, dict[str, Any], str], Any],
    ) -> None:
        self._k8s = k8s
        self._namespace = namespace
        self._getter = getter
        self._creator = creator
        self._replacer = replacer

    @property
    def namespace(self) -> str:
        return self._namespace

    def get(self, name: str) -> dict[str, Any]:
        return self._k8s.to_dict(self._getter(name, self._namespace))

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        return self._k8s.to_dict(self._creator(obj, self._namespace))

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        name = obj["metadata"]["name"]
        return self._k8s.to_dict(self._replacer(name, obj, self._namespace))


class RoleStore(_NamespacedStore):
    """Roles of one namespace."""

    kind = "Role"

    def __init__(self, k8s: K8sClient, namespace: str) -> None:
        super().__init__(k8s, namespace, k8s.get_role, k8s.create_role, k8s.replace_role)


class RoleBindingStore(_NamespacedStore):
    """RoleBindings of one namespace."""

    kind = "RoleBinding"

    def __init__(self, k8s: K8sClient, namespace: str) -> None:
        super().__init__(
            k8s,
            namespace,
            k8s.get_role_binding,
            k8s.create_role_binding,
            k8s.replace_role_binding,
        )
