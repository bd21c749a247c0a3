"""Node/edge model of a visual workflow canvas."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .. import catalog

NODE_TYPE = "integrationNode"
EDGE_TYPE = "smoothstep"

TRIGGER_COLOR = "#10B981"
ACTION_COLOR = "#3B82F6"

EDGE_STYLE: dict[str, Any] = {"stroke": "hsl(var(--primary))", "strokeWidth": 2}


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def integration_color(integration_type: Any) -> str:
    """Triggers are green, everything else is blue."""
    return TRIGGER_COLOR if integration_type == catalog.TRIGGER else ACTION_COLOR


@dataclass
class Position:
    x: Any
    y: Any

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Position":
        return cls(x=data.get("x"), y=data.get("y"))


@dataclass
class IntegrationRef:
    """Reference to a catalog entry as carried on a node.

    ``icon`` stays empty inside the graph; it is filled from the catalog when
    the node is serialized for a client.
    """

    id: Any
    name: Any
    type: Any
    color: str
    icon: str | None = None

    def to_dict(self, resolve_icon: bool = False) -> dict[str, Any]:
        icon = catalog.resolve_icon(self.id) if resolve_icon else self.icon
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "color": self.color,
            "icon": icon,
        }


@dataclass
class NodeData:
    integration: IntegrationRef
    config: dict[str, Any] = field(default_factory=dict)
    label: Any = None
    is_configured: bool = False


@dataclass
class WorkflowNode:
    id: Any
    position: Position
    data: NodeData
    type: str = NODE_TYPE

    def to_dict(self, resolve_icons: bool = False) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "position": self.position.to_dict(),
            "data": {
                "integration": self.data.integration.to_dict(resolve_icon=resolve_icons),
                "config": self.data.config,
                "label": self.data.label,
                "isConfigured": self.data.is_configured,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkflowNode":
        """Build a node from its client (camelCase) representation."""
        node_data = _mapping(data.get("data"))
        integration = _mapping(node_data.get("integration"))
        integration_type = integration.get("type")
        position = _mapping(data.get("position"))
        return cls(
            id=data.get("id"),
            type=data.get("type") or NODE_TYPE,
            position=Position.from_dict(position),
            data=NodeData(
                integration=IntegrationRef(
                    id=integration.get("id"),
                    name=integration.get("name"),
                    type=integration_type,
                    color=integration.get("color") or integration_color(integration_type),
                ),
                config=dict(_mapping(node_data.get("config"))),
                label=node_data.get("label", integration.get("name")),
                is_configured=bool(node_data.get("isConfigured", False)),
            ),
        )


@dataclass
class WorkflowEdge:
    id: str
    source: Any
    target: Any
    type: str = EDGE_TYPE
    animated: bool = True
    style: dict[str, Any] = field(default_factory=lambda: dict(EDGE_STYLE))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": self.type,
            "animated": self.animated,
            "style": dict(self.style),
        }


@dataclass
class GeneratedGraph:
    nodes: list[WorkflowNode] = field(default_factory=list)
    edges: list[WorkflowEdge] = field(default_factory=list)

    def to_dict(self, resolve_icons: bool = False) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict(resolve_icons=resolve_icons) for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }
