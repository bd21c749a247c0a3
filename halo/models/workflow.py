"""Workflow model."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin

if TYPE_CHECKING:
    from .tenant import Tenant

WORKFLOW_STATUSES = ("draft", "active", "paused")


class Workflow(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """A workflow automation definition.

    ``steps`` holds the flat step list produced by the persistence adapter.
    There is no column for edges, so canvas connections do not survive a save.
    """

    __tablename__ = "workflow"

    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, default=None)
    status: Mapped[str] = mapped_column(String(20), default="draft")  # draft/active/paused
    steps: Mapped[list] = mapped_column(JSON, default=list)
    execution_count: Mapped[int] = mapped_column(Integer, default=0)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    tenant: Mapped[Tenant] = relationship(back_populates="workflows")

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Workflow {self.name!r} ({self.status}) v{self.version}>"
