"""Tests for the canvas <-> steps persistence adapter."""

from __future__ import annotations

from halo.graph.model import (
    ACTION_COLOR,
    TRIGGER_COLOR,
    IntegrationRef,
    NodeData,
    Position,
    WorkflowNode,
)
from halo.graph.steps import from_steps, to_steps


def _node(node_id, name, node_type="action", integration_id=None, config=None, x=10, y=20):
    return WorkflowNode(
        id=node_id,
        position=Position(x, y),
        data=NodeData(
            integration=IntegrationRef(id=integration_id, name=name, type=node_type, color=ACTION_COLOR),
            config=config or {},
            label=name,
        ),
    )


def test_to_steps_shape_and_order():
    steps = to_steps([
        _node("n1", "Webhook Trigger", "trigger", "webhook", {"method": "POST"}),
        _node("n2", "Slack", config=None, x=300, y=100),
    ])
    assert steps == [
        {
            "id": "n1",
            "type": "trigger",
            "name": "Webhook Trigger",
            "config": {"method": "POST"},
            "position": {"x": 10, "y": 20},
            "order": 0,
        },
        {
            "id": "n2",
            "type": "action",
            "name": "Slack",
            "config": {},
            "position": {"x": 300, "y": 100},
            "order": 1,
        },
    ]


def test_to_steps_empty():
    assert to_steps([]) == []


def test_from_steps_sorts_by_order():
    nodes = from_steps([
        {"id": "b", "type": "action", "name": "Slack", "order": 1},
        {"id": "a", "type": "trigger", "name": "Webhook Trigger", "order": 0},
    ])
    assert [n.id for n in nodes] == ["a", "b"]


def test_from_steps_recovers_integration_by_name():
    [node] = from_steps([{"id": "a", "type": "action", "name": "  send   EMAIL ", "order": 0}])
    assert node.data.integration.id == "email"
    assert node.data.label == "  send   EMAIL "


def test_from_steps_unknown_name_has_no_integration():
    [node] = from_steps([{"id": "a", "type": "action", "name": "Custom Thing", "order": 0}])
    assert node.data.integration.id is None


def test_from_steps_colors_and_defaults():
    nodes = from_steps([
        {"id": "t", "type": "trigger", "name": "Schedule Trigger", "order": 0},
        {"id": "x", "name": "Thing", "order": 1},
    ])
    assert nodes[0].data.integration.color == TRIGGER_COLOR
    assert nodes[1].data.integration.color == ACTION_COLOR
    assert nodes[1].data.config == {}
    assert nodes[1].position.x is None
    assert all(n.data.is_configured is False for n in nodes)


def test_from_steps_missing_order_uses_list_position():
    nodes = from_steps([{"id": "a"}, {"id": "b"}, "junk", {"id": "c", "order": 0}])
    assert [n.id for n in nodes] == ["a", "c", "b"]


def test_round_trip_keeps_nodes_but_not_edges():
    original = [
        _node("n1", "Webhook Trigger", "trigger", "webhook"),
        _node("n2", "Send Email", "action", "email", {"to": "a@b.c"}),
    ]
    restored = from_steps(to_steps(original))
    assert [n.id for n in restored] == ["n1", "n2"]
    assert [n.data.integration.id for n in restored] == ["webhook", "email"]
    assert restored[1].data.config == {"to": "a@b.c"}
    assert restored[1].position.x == 10


def test_from_steps_non_mapping_config():
    [node] = from_steps([{"id": "s1", "name": "Slack", "config": ["channel"]}])
    assert node.data.config == {}


def test_node_from_dict_tolerates_non_mapping_parts():
    node = WorkflowNode.from_dict(
        {"id": "a", "position": "top", "data": {"integration": ["slack"], "config": ["x"]}}
    )
    assert node.data.config == {}
    assert node.data.integration.id is None
    assert node.position.x is None
    assert node.data.integration.color == ACTION_COLOR

    node = WorkflowNode.from_dict({"id": "b", "data": 7})
    assert node.data.config == {}
    assert node.data.label is None
