"""Pairing of Machines with the Nodes they produced.

A Machine and a Node belong together when they are linked by UID (the
Node's controlling owner is the Machine, or the Machine's nodeRef points at
the Node) or, failing that, when they share a name. UID links always win
over name equality, and a Node is paired with at most one Machine.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from kubenode_mcp.domains.nodes.models import CorrelatedNode, Machine, RuntimeNode


def is_uid_linked(machine: Machine, node: RuntimeNode) -> bool:
    """Whether the Machine and Node reference each other by UID."""
    if machine.uid and node.controller_uid == machine.uid:
        return True
    return bool(machine.node_ref_uid) and machine.node_ref_uid == node.uid


def is_name_linked(machine: Machine, node: RuntimeNode) -> bool:
    return node.name == machine.name


def _claim(
    machine: Machine,
    nodes: Sequence[RuntimeNode],
    claimed: set[int],
    linked: Callable[[Machine, RuntimeNode], bool],
) -> int | None:
    for index, node in enumerate(nodes):
        if index not in claimed and linked(machine, node):
            return index
    return None


def correlate(
    machines: Iterable[Machine], nodes: Iterable[RuntimeNode]
) -> list[CorrelatedNode]:
    """Pair every Machine with its Node and report the leftovers.

    Every input appears in exactly one returned entity. Entities follow the
    Machine input order; Nodes without a Machine come last, in input order.
    """
    machine_snapshot = tuple(machines)
    node_snapshot = tuple(nodes)

    claimed: set[int] = set()
    pairs: dict[int, int] = {}

    # UID links are claimed before any name match is considered.
    for m_index, machine in enumerate(machine_snapshot):
        n_index = _claim(machine, node_snapshot, claimed, is_uid_linked)
        if n_index is not None:
            pairs[m_index] = n_index
            claimed.add(n_index)

    for m_index, machine in enumerate(machine_snapshot):
        if m_index in pairs:
            continue
        n_index = _claim(machine, node_snapshot, claimed, is_name_linked)
        if n_index is not None:
            pairs[m_index] = n_index
            claimed.add(n_index)

    result = [
        CorrelatedNode(
            machine=machine,
            node=node_snapshot[pairs[m_index]] if m_index in pairs else None,
        )
        for m_index, machine in enumerate(machine_snapshot)
    ]
    result.extend(
        CorrelatedNode(node=node)
        for n_index, node in enumerate(node_snapshot)
        if n_index not in claimed
    )
    return result


def matched_pairs(entities: Iterable[CorrelatedNode]) -> list[CorrelatedNode]:
    """Entities that have both a Machine and a Node."""
    return [entity for entity in entities if entity.is_matched]


def locate(
    name: str, machines: Iterable[Machine], nodes: Iterable[RuntimeNode]
) -> CorrelatedNode | None:
    """Find the worker called ``name``, by Machine name or Node name.

    The lookup runs over the same pairing :func:`correlate` produces, so a
    worker resolves to the Node that listing shows for it. A Machine name
    match takes precedence over a Node name match.
    """
    entities = correlate(machines, nodes)
    for entity in entities:
        if entity.machine is not None and entity.machine.name == name:
            return entity
    for entity in entities:
        if entity.node is not None and entity.node.name == name:
            return entity
    return None
