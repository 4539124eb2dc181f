"""Tests for access grant templates."""

import copy
import json

from kubenode_mcp.domains.access_grants.templates import (
    KUBE_SCHEDULER_LEADER_ELECTION_NAME,
    KUBE_SCHEDULER_NAMESPACE,
    access_grant_creators,
    kube_scheduler_role_binding_creator,
    kube_scheduler_role_creator,
)


class TestKubeSchedulerRole:
    def test_fresh_role(self) -> None:
        name, desired = kube_scheduler_role_creator()

        role = desired(None)

        assert name == "system:openshift:sa-leader-election-configmaps"
        assert role["apiVersion"] == "rbac.authorization.k8s.io/v1"
        assert role["kind"] == "Role"
        assert role["metadata"] == {
            "name": KUBE_SCHEDULER_LEADER_ELECTION_NAME,
            "namespace": KUBE_SCHEDULER_NAMESPACE,
        }
        assert role["rules"] == [
            {"apiGroups": [""], "resources": ["configmaps"], "verbs": ["get", "create", "update"]}
        ]

    def test_byte_identical_output(self) -> None:
        _, desired = kube_scheduler_role_creator()

        assert json.dumps(desired(None)) == json.dumps(desired(None))

    def test_keeps_unmanaged_fields_and_does_not_mutate(self) -> None:
        _, desired = kube_scheduler_role_creator()
        existing = {
            "metadata": {
                "name": KUBE_SCHEDULER_LEADER_ELECTION_NAME,
                "namespace": KUBE_SCHEDULER_NAMESPACE,
                "resourceVersion": "42",
                "labels": {"owner": "ops"},
            },
            "rules": [{"apiGroups": ["*"], "resources": ["*"], "verbs": ["*"]}],
        }
        snapshot = copy.deepcopy(existing)

        role = desired(existing)

        assert existing == snapshot
        assert role["metadata"]["resourceVersion"] == "42"
        assert role["metadata"]["labels"] == {"owner": "ops"}
        assert role["rules"][0]["verbs"] == ["get", "create", "update"]

    def test_fixed_point(self) -> None:
        _, desired = kube_scheduler_role_creator()

        once = desired(None)

        assert desired(once) == once


class TestKubeSchedulerRoleBinding:
    def test_binds_role_to_scheduler_user(self) -> None:
        name, desired = kube_scheduler_role_binding_creator()

        binding = desired(None)

        assert name == KUBE_SCHEDULER_LEADER_ELECTION_NAME
        assert binding["metadata"]["name"] == name
        assert binding["roleRef"] == {
            "apiGroup": "rbac.authorization.k8s.io",
            "kind": "Role",
            "name": KUBE_SCHEDULER_LEADER_ELECTION_NAME,
        }
        assert binding["subjects"] == [
            {
                "apiGroup": "rbac.authorization.k8s.io",
                "kind": "User",
                "name": "system:kube-scheduler",
            }
        ]


def test_creators_apply_roles_first() -> None:
    groups = access_grant_creators()

    assert [kind for kind, _ in groups] == ["Role", "RoleBinding"]
    assert all(len(creators) == 1 for _, creators in groups)
