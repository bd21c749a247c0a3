"""Tenant model - the root every workflow is scoped to."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDMixin, TimestampMixin

if TYPE_CHECKING:
    from .workflow import Workflow


class Tenant(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "tenant"

    name: Mapped[str] = mapped_column(String(200))
    subdomain: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    settings: Mapped[dict | None] = mapped_column(JSON, default=None)

    workflows: Mapped[list[Workflow]] = relationship(
        back_populates="tenant", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Tenant {self.subdomain!r}>"
