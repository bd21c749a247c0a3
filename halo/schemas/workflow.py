"""Pydantic models for the workflow API."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

WorkflowStatus = Literal["draft", "active", "paused"]


class TenantCreate(BaseModel):
    name: str
    subdomain: str = Field(pattern=r"^[a-zA-Z0-9-]+$")
    settings: dict | None = None


class WorkflowCreate(BaseModel):
    name: str
    description: str | None = None
    status: WorkflowStatus = "draft"


class WorkflowUpdate(BaseModel):
    """Partial update. Omitted fields are kept; name and status cannot be nulled."""

    name: str | None = Field(None, min_length=1)
    description: str | None = None
    status: WorkflowStatus | None = None
    expected_version: int | None = None

    @field_validator("name", "status")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class StatusUpdate(BaseModel):
    status: WorkflowStatus


class CanvasSave(BaseModel):
    """Client canvas state; edges are accepted but not persisted."""

    nodes: list[dict[str, Any]] = []
    edges: list[dict[str, Any]] = []
    name: str | None = None
    expected_version: int | None = None
