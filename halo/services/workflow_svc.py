"""Workflow CRUD and canvas persistence, scoped by tenant."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import InvalidWorkflowError, StaleWorkflowError
from ..graph.model import GeneratedGraph, WorkflowNode
from ..graph.steps import from_steps, to_steps
from ..models.workflow import WORKFLOW_STATUSES, Workflow

logger = logging.getLogger(__name__)


# ── Workflow CRUD ─────────────────────────────────────────────────────────

async def list_workflows(db: AsyncSession, tenant_id: uuid.UUID) -> list[Workflow]:
    stmt = (
        select(Workflow)
        .where(Workflow.tenant_id == tenant_id)
        .order_by(Workflow.created_at.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_workflow(
    db: AsyncSession, tenant_id: uuid.UUID, workflow_id: uuid.UUID
) -> Workflow | None:
    stmt = (
        select(Workflow)
        .where(Workflow.id == workflow_id)
        .where(Workflow.tenant_id == tenant_id)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def create_workflow(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    name: str,
    description: str | None = None,
    status: str = "draft",
    steps: list | None = None,
) -> Workflow:
    if status not in WORKFLOW_STATUSES:
        raise ValueError(f"Unknown workflow status: {status}")
    workflow = Workflow(
        tenant_id=tenant_id,
        name=name,
        description=description,
        status=status,
        steps=list(steps or []),
    )
    db.add(workflow)
    await db.commit()
    await db.refresh(workflow)
    return workflow


async def update_workflow(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    workflow_id: uuid.UUID,
    expected_version: int | None = None,
    **kwargs: Any,
) -> Workflow | None:
    """Apply field updates.

    When ``expected_version`` is given and the row has moved on, the write is
    rejected with StaleWorkflowError instead of overwriting the newer data.
    """
    workflow = await get_workflow(db, tenant_id, workflow_id)
    if not workflow:
        return None
    if expected_version is not None and workflow.version != expected_version:
        raise StaleWorkflowError(
            f"Workflow {workflow_id} is at version {workflow.version}, not {expected_version}",
            current_version=workflow.version,
        )
    if "status" in kwargs and kwargs["status"] not in WORKFLOW_STATUSES:
        raise ValueError(f"Unknown workflow status: {kwargs['status']}")
    for key, value in kwargs.items():
        if key in {"id", "tenant_id", "version"}:
            continue
        if hasattr(workflow, key):
            setattr(workflow, key, value)
    try:
        await db.commit()
    except StaleDataError as exc:
        await db.rollback()
        raise StaleWorkflowError(f"Workflow {workflow_id} was modified concurrently") from exc
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("Rejected update of workflow %s: %s", workflow_id, exc.orig)
        raise InvalidWorkflowError(f"Workflow {workflow_id} could not be saved: {exc.orig}") from exc
    await db.refresh(workflow)
    return workflow


async def delete_workflow(
    db: AsyncSession, tenant_id: uuid.UUID, workflow_id: uuid.UUID
) -> bool:
    workflow = await get_workflow(db, tenant_id, workflow_id)
    if not workflow:
        return False
    await db.delete(workflow)
    await db.commit()
    return True


async def set_status(
    db: AsyncSession, tenant_id: uuid.UUID, workflow_id: uuid.UUID, status: str
) -> Workflow | None:
    return await update_workflow(db, tenant_id, workflow_id, status=status)


# ── Canvas persistence ────────────────────────────────────────────────────

async def save_canvas(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    workflow_id: uuid.UUID,
    nodes: list[WorkflowNode],
    name: str | None = None,
    expected_version: int | None = None,
) -> Workflow | None:
    """Persist canvas nodes as the workflow's steps. Edges are not stored."""
    updates: dict[str, Any] = {"steps": to_steps(nodes)}
    if name:
        updates["name"] = name
    workflow = await update_workflow(
        db, tenant_id, workflow_id, expected_version=expected_version, **updates
    )
    if workflow:
        logger.info("Saved %d steps for workflow %s", len(workflow.steps), workflow_id)
    return workflow


async def load_canvas(
    db: AsyncSession, tenant_id: uuid.UUID, workflow_id: uuid.UUID
) -> GeneratedGraph | None:
    workflow = await get_workflow(db, tenant_id, workflow_id)
    if not workflow:
        return None
    return GeneratedGraph(nodes=from_steps(workflow.steps or []), edges=[])


# ── Queries used by import and the chat assistant ─────────────────────────

async def names_with_prefix(db: AsyncSession, tenant_id: uuid.UUID, prefix: str) -> list[str]:
    stmt = (
        select(Workflow.name)
        .where(Workflow.tenant_id == tenant_id)
        .where(Workflow.name.startswith(prefix, autoescape=True))
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def search_workflows(
    db: AsyncSession, tenant_id: uuid.UUID, terms: str, limit: int = 5
) -> list[Workflow]:
    pattern = f"%{terms}%"
    stmt = (
        select(Workflow)
        .where(Workflow.tenant_id == tenant_id)
        .where(Workflow.name.ilike(pattern) | Workflow.description.ilike(pattern))
        .limit(limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def workflow_stats(db: AsyncSession, tenant_id: uuid.UUID) -> dict[str, Any]:
    total_stmt = select(
        func.count(Workflow.id), func.coalesce(func.sum(Workflow.execution_count), 0)
    ).where(Workflow.tenant_id == tenant_id)
    total, executions = (await db.execute(total_stmt)).one()

    active_stmt = (
        select(func.count(Workflow.id))
        .where(Workflow.tenant_id == tenant_id)
        .where(Workflow.status == "active")
    )
    active = (await db.execute(active_stmt)).scalar() or 0

    recent = (await list_workflows(db, tenant_id))[:3]
    return {
        "total": int(total or 0),
        "active": int(active),
        "executions": int(executions or 0),
        "recent": [{"id": str(w.id), "name": w.name, "status": w.status} for w in recent],
    }
