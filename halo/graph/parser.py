"""Convert an AI generation payload into canvas nodes and edges.

The payload is whatever the assistant produced, roughly::

    {"action": "build_workflow",
     "nodes": [{"id": ..., "integration": ..., "name": ..., "type": ...,
                "position": {...}, "config": {...}}],
     "connections": [{"source": ..., "target": ...}]}

Parsing is best effort: missing fields get defaults or ``None`` and nothing is
rejected. Edges are not checked against the node list.
"""

from __future__ import annotations

import random
import time
from collections.abc import Hashable, Mapping
from typing import Any, Callable, Protocol

from .model import (
    GeneratedGraph,
    IntegrationRef,
    NodeData,
    Position,
    WorkflowEdge,
    WorkflowNode,
    integration_color,
)

# Default positions land in [100, 500) x [100, 400).
DEFAULT_ORIGIN = (100.0, 100.0)
DEFAULT_SPAN = (400.0, 300.0)


class RandomSource(Protocol):
    def random(self) -> float: ...


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def new_node_id(clock: Callable[[], float], rng: RandomSource) -> str:
    return f"node-{int(clock() * 1000)}-{rng.random()}"


def default_position(rng: RandomSource) -> Position:
    return Position(
        x=rng.random() * DEFAULT_SPAN[0] + DEFAULT_ORIGIN[0],
        y=rng.random() * DEFAULT_SPAN[1] + DEFAULT_ORIGIN[1],
    )


def _build_node(
    raw: Mapping[str, Any],
    taken: set[Any],
    clock: Callable[[], float],
    rng: RandomSource,
) -> WorkflowNode:
    node_id = raw.get("id")
    if not node_id:
        base_id = node_id = new_node_id(clock, rng)
        suffix = 1
        while node_id in taken:
            node_id = f"{base_id}-{suffix}"
            suffix += 1
    if isinstance(node_id, Hashable):
        taken.add(node_id)

    raw_position = raw.get("position")
    if isinstance(raw_position, Mapping) and raw_position:
        position = Position.from_dict(dict(raw_position))
    else:
        position = default_position(rng)

    raw_config = raw.get("config")
    config = dict(raw_config) if isinstance(raw_config, Mapping) else {}

    name = raw.get("name")
    node_type = raw.get("type")
    return WorkflowNode(
        id=node_id,
        position=position,
        data=NodeData(
            integration=IntegrationRef(
                id=raw.get("integration"),
                name=name,
                type=node_type,
                color=integration_color(node_type),
            ),
            config=config,
            label=name,
            is_configured=False,
        ),
    )


def _build_edge(index: int, raw: Any) -> WorkflowEdge:
    conn = raw if isinstance(raw, Mapping) else {}
    return WorkflowEdge(
        id=f"edge-{index}",
        source=conn.get("source"),
        target=conn.get("target"),
    )


def parse_generation(
    payload: Any,
    *,
    clock: Callable[[], float] = time.time,
    rng: RandomSource | None = None,
) -> GeneratedGraph | None:
    """Materialize a generation payload.

    Returns None when the payload carries no node list, so callers can leave
    the current canvas untouched.
    """
    if not isinstance(payload, Mapping):
        return None
    raw_nodes = payload.get("nodes")
    if not _is_sequence(raw_nodes):
        return None

    source = rng if rng is not None else random
    taken: set[Any] = {
        raw.get("id")
        for raw in raw_nodes
        if isinstance(raw, Mapping) and raw.get("id") and isinstance(raw.get("id"), Hashable)
    }

    nodes = [
        _build_node(raw if isinstance(raw, Mapping) else {}, taken, clock, source)
        for raw in raw_nodes
    ]

    raw_connections = payload.get("connections")
    if not _is_sequence(raw_connections):
        raw_connections = []
    edges = [_build_edge(index, conn) for index, conn in enumerate(raw_connections)]

    return GeneratedGraph(nodes=nodes, edges=edges)
