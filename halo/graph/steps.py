"""Flatten canvas nodes into the persisted ``steps`` list and back.

Steps have no room for edges: ``to_steps`` drops them and ``from_steps``
cannot bring them back. Only node order survives a save.
"""

from __future__ import annotations

from typing import Any

from .. import catalog
from .model import IntegrationRef, NodeData, Position, WorkflowNode, integration_color


def to_steps(nodes: list[WorkflowNode]) -> list[dict[str, Any]]:
    return [
        {
            "id": node.id,
            "type": node.data.integration.type,
            "name": node.data.integration.name,
            "config": node.data.config or {},
            "position": {"x": node.position.x, "y": node.position.y},
            "order": index,
        }
        for index, node in enumerate(nodes)
    ]


def _step_sort_key(indexed: tuple[int, dict[str, Any]]) -> tuple[int, int]:
    index, step = indexed
    order = step.get("order")
    return (order if isinstance(order, int) else index, index)


def from_steps(steps: list[Any]) -> list[WorkflowNode]:
    """Rebuild canvas nodes from stored steps, in ``order`` order.

    The integration id is not stored, so it is recovered from the catalog by
    step name when one matches.
    """
    nodes: list[WorkflowNode] = []
    valid = [(i, s) for i, s in enumerate(steps or []) if isinstance(s, dict)]
    for _, step in sorted(valid, key=_step_sort_key):
        step_type = step.get("type")
        name = step.get("name")
        match = catalog.find_by_name(name)
        position = step.get("position") if isinstance(step.get("position"), dict) else {}
        nodes.append(
            WorkflowNode(
                id=step.get("id"),
                position=Position.from_dict(position),
                data=NodeData(
                    integration=IntegrationRef(
                        id=match.id if match else None,
                        name=name,
                        type=step_type,
                        color=integration_color(step_type),
                    ),
                    config=dict(step["config"]) if isinstance(step.get("config"), dict) else {},
                    label=name,
                    is_configured=False,
                ),
            )
        )
    return nodes
