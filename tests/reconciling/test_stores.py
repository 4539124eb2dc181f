"""Tests for the RBAC object stores."""

from unittest.mock import MagicMock

import pytest

from kubenode_mcp.reconciling.stores import RoleBindingStore, RoleStore
from kubenode_mcp.utils.errors import NotFoundError


@pytest.fixture
def k8s() -> MagicMock:
    mock = MagicMock()
    mock.to_dict.side_effect = lambda obj: {"serialized": obj}
    return mock


def test_role_store_get(k8s: MagicMock) -> None:
    k8s.get_role.return_value = "role-object"
    store = RoleStore(k8s, "openshift-kube-scheduler")

    assert store.get("r1") == {"serialized": "role-object"}
    k8s.get_role.assert_called_once_with("r1", "openshift-kube-scheduler")


def test_role_store_get_missing(k8s: MagicMock) -> None:
    k8s.get_role.side_effect = NotFoundError("Role", "r1", "ns")

    with pytest.raises(NotFoundError):
        RoleStore(k8s, "ns").get("r1")


def test_role_store_update_replaces_by_name(k8s: MagicMock) -> None:
    store = RoleStore(k8s, "ns")
    body = {"metadata": {"name": "r1", "resourceVersion": "7"}, "rules": []}

    store.update(body)

    k8s.replace_role.assert_called_once_with("r1", body, "ns")


def test_role_binding_store_create(k8s: MagicMock) -> None:
    store = RoleBindingStore(k8s, "ns")
    body = {"metadata": {"name": "rb1"}}

    store.create(body)

    assert store.kind == "RoleBinding"
    k8s.create_role_binding.assert_called_once_with(body, "ns")
