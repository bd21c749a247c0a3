"""Visual workflow graph: model, AI payload parser, canvas and step adapter."""

from .canvas import Canvas, MergeResult
from .model import GeneratedGraph, WorkflowEdge, WorkflowNode
from .parser import parse_generation
from .steps import from_steps, to_steps

__all__ = [
    "Canvas",
    "MergeResult",
    "GeneratedGraph",
    "WorkflowEdge",
    "WorkflowNode",
    "parse_generation",
    "from_steps",
    "to_steps",
]
