"""Projection of correlated workers into the NodeView read model."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from kubenode_mcp.domains.nodes.models import (
    CorrelatedNode,
    Machine,
    NodeObjectMeta,
    NodeSpec,
    NodeStatus,
    NodeVersionInfo,
    NodeView,
    RuntimeNode,
)

ERROR_GLUE = " & "

# Nodes younger than this report flapping conditions while the kubelet starts.
INITIAL_CONDITION_PARSING_DELAY = timedelta(minutes=5)

# Condition types that signal health when True; every other type signals a
# problem when True.
POSITIVE_CONDITION_TYPES = frozenset({"Ready", "KubeletConfigOk"})


def parse_node_conditions(node: RuntimeNode) -> tuple[list[str], list[str]]:
    """Collect reasons and messages of the conditions that indicate trouble."""
    reasons: list[str] = []
    messages: list[str] = []
    for condition in node.conditions:
        positive = condition.type in POSITIVE_CONDITION_TYPES
        if positive != condition.is_true:
            reasons.append(condition.reason)
            messages.append(condition.message)
    return reasons, messages


def conditions_visible(
    node: RuntimeNode,
    hide_initial_conditions: bool,
    now: datetime | None = None,
    grace_period: timedelta = INITIAL_CONDITION_PARSING_DELAY,
) -> bool:
    """Whether condition-derived errors should be reported for ``node``."""
    if not hide_initial_conditions or node.creation_timestamp is None:
        return True
    created = node.creation_timestamp
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return now - created > grace_period


def _node_status(
    status: NodeStatus,
    node: RuntimeNode,
    hide_initial_conditions: bool,
    now: datetime | None,
    grace_period: timedelta,
    reasons: list[str],
    messages: list[str],
) -> NodeStatus:
    if conditions_visible(node, hide_initial_conditions, now, grace_period):
        node_reasons, node_messages = parse_node_conditions(node)
        reasons.extend(node_reasons)
        messages.extend(node_messages)

    return status.model_copy(
        update={
            "addresses": list(node.addresses),
            "capacity": node.capacity,
            "allocatable": node.allocatable,
            "node_info": node.node_info,
        }
    )


def _project_node(
    node: RuntimeNode,
    hide_initial_conditions: bool,
    now: datetime | None,
    grace_period: timedelta,
) -> NodeView:
    reasons: list[str] = []
    messages: list[str] = []
    status = _node_status(
        NodeStatus(), node, hide_initial_conditions, now, grace_period, reasons, messages
    )
    status.error_reason = ERROR_GLUE.join(reasons)
    status.error_message = ERROR_GLUE.join(messages)

    return NodeView(
        metadata=NodeObjectMeta(
            name=node.name,
            display_name=node.name,
            labels=dict(node.labels),
            annotations=dict(node.annotations),
            creation_timestamp=node.creation_timestamp,
            deletion_timestamp=node.deletion_timestamp,
        ),
        spec=NodeSpec(),
        status=status,
    )


def _project_machine(
    machine: Machine,
    node: RuntimeNode | None,
    hide_initial_conditions: bool,
    cluster_version: str,
    now: datetime | None,
    grace_period: timedelta,
) -> NodeView:
    display_name = machine.spec_name or machine.name
    labels: dict[str, str] = {}
    annotations: dict[str, str] = {}
    status = NodeStatus(machine_name=machine.name)

    reasons: list[str] = []
    messages: list[str] = []
    if machine.error_reason is not None:
        reasons.append(machine.error_reason)
        messages.append(machine.error_message or "")

    if node is not None:
        if node.name != display_name:
            display_name = node.name
        labels = dict(node.labels)
        annotations = dict(node.annotations)
        status = _node_status(
            status, node, hide_initial_conditions, now, grace_period, reasons, messages
        )

    status.error_reason = ERROR_GLUE.join(reasons)
    status.error_message = ERROR_GLUE.join(messages)

    return NodeView(
        metadata=NodeObjectMeta(
            name=machine.name,
            display_name=display_name,
            labels=labels,
            annotations=annotations,
            creation_timestamp=machine.creation_timestamp,
            deletion_timestamp=machine.deletion_timestamp,
        ),
        spec=NodeSpec(
            versions=NodeVersionInfo(kubelet=machine.kubelet_version or cluster_version),
            operating_system=machine.operating_system,
            cloud=machine.cloud,
        ),
        status=status,
    )


def project(
    entity: CorrelatedNode,
    hide_initial_conditions: bool = False,
    *,
    cluster_version: str = "",
    now: datetime | None = None,
    grace_period: timedelta = INITIAL_CONDITION_PARSING_DELAY,
) -> NodeView:
    """Build the read model of one worker.

    Args:
        entity: Machine, Node, or both.
        hide_initial_conditions: Omit condition-derived errors while the Node
            is younger than ``grace_period``.
        cluster_version: Version reported when the Machine declares none.
        now: Reference time for the grace period; defaults to the current time.
        grace_period: Age below which conditions are hidden on request.
    """
    if entity.machine is None:
        assert entity.node is not None
        return _project_node(entity.node, hide_initial_conditions, now, grace_period)
    return _project_machine(
        entity.machine, entity.node, hide_initial_conditions, cluster_version, now, grace_period
    )
