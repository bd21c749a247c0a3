"""In-memory canvas state and the generation merge."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable

from ..notifications import Notification, Notifier, discard
from .model import GeneratedGraph, WorkflowEdge, WorkflowNode
from .parser import RandomSource, parse_generation

logger = logging.getLogger(__name__)

BUILD_ACTION = "build_workflow"


@dataclass(frozen=True)
class MergeResult:
    node_count: int
    edge_count: int

    def to_dict(self) -> dict[str, int]:
        return {"nodeCount": self.node_count, "edgeCount": self.edge_count}


class Canvas:
    """Current node/edge set of one editing session.

    A generation always replaces the whole canvas. There is no rollback: once
    ``apply_generation`` returns, the previous nodes and edges are gone.
    """

    def __init__(
        self,
        notifier: Notifier = discard,
        clock: Callable[[], float] = time.time,
        rng: RandomSource | None = None,
    ):
        self.nodes: list[WorkflowNode] = []
        self.edges: list[WorkflowEdge] = []
        self._notify = notifier
        self._clock = clock
        self._rng = rng if rng is not None else random

    def replace(self, nodes: list[WorkflowNode], edges: list[WorkflowEdge]) -> None:
        """Manual edit: the client sends its full node/edge set."""
        self.nodes = list(nodes)
        self.edges = list(edges)

    def apply_generation(self, payload: Any) -> MergeResult | None:
        """Replace the canvas with a parsed generation payload.

        Payloads without a node list, or tagged with an action other than
        ``build_workflow``, leave the canvas untouched and return None.
        """
        if isinstance(payload, dict) and "action" in payload and payload["action"] != BUILD_ACTION:
            logger.info("Ignoring generation payload with action %r", payload["action"])
            return None

        graph = parse_generation(payload, clock=self._clock, rng=self._rng)
        if graph is None:
            return None

        self.nodes = graph.nodes
        self.edges = graph.edges
        result = MergeResult(node_count=len(graph.nodes), edge_count=len(graph.edges))
        logger.info(
            "Applied generated workflow: %d nodes, %d edges",
            result.node_count,
            result.edge_count,
        )
        self._notify(
            Notification(
                title="Workflow Generated!",
                description=(
                    f"Created {result.node_count} nodes with {result.edge_count} connections"
                ),
                data=result.to_dict(),
            )
        )
        return result

    def snapshot(self) -> GeneratedGraph:
        return GeneratedGraph(nodes=list(self.nodes), edges=list(self.edges))

    def to_dict(self, resolve_icons: bool = True) -> dict[str, Any]:
        return self.snapshot().to_dict(resolve_icons=resolve_icons)
