"""HALO database models."""

from .base import Base
from .tenant import Tenant
from .workflow import Workflow, WORKFLOW_STATUSES

__all__ = [
    "Base",
    "Tenant",
    "Workflow",
    "WORKFLOW_STATUSES",
]
