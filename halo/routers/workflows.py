"""Workflow JSON API: CRUD, canvas load/save and AI generation."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..errors import InvalidWorkflowError, StaleWorkflowError
from ..graph.canvas import Canvas
from ..graph.model import WorkflowNode
from ..models.tenant import Tenant
from ..models.workflow import Workflow
from ..notifications import NotificationLog
from ..schemas.workflow import CanvasSave, StatusUpdate, WorkflowCreate, WorkflowUpdate
from ..services import workflow_svc
from ..tenancy import get_current_tenant

router = APIRouter(prefix="/api/t/{subdomain}/workflows", tags=["workflows"])


def workflow_dict(workflow: Workflow) -> dict[str, Any]:
    return {
        "id": str(workflow.id),
        "tenant_id": str(workflow.tenant_id),
        "name": workflow.name,
        "description": workflow.description,
        "status": workflow.status,
        "steps": workflow.steps or [],
        "execution_count": workflow.execution_count,
        "version": workflow.version,
        "created_at": workflow.created_at.isoformat() if workflow.created_at else None,
        "updated_at": workflow.updated_at.isoformat() if workflow.updated_at else None,
    }


def _conflict(exc: StaleWorkflowError) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={"message": exc.message, "current_version": exc.current_version},
    )


async def _require_workflow(
    db: AsyncSession, tenant: Tenant, workflow_id: uuid.UUID
) -> Workflow:
    workflow = await workflow_svc.get_workflow(db, tenant.id, workflow_id)
    if not workflow:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return workflow


@router.get("")
async def list_workflows(
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    return [workflow_dict(w) for w in await workflow_svc.list_workflows(db, tenant.id)]


@router.post("", status_code=201)
async def create_workflow(
    data: WorkflowCreate,
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    workflow = await workflow_svc.create_workflow(
        db, tenant.id, name=data.name, description=data.description, status=data.status
    )
    return workflow_dict(workflow)


@router.get("/{workflow_id}")
async def get_workflow(
    workflow_id: uuid.UUID,
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    return workflow_dict(await _require_workflow(db, tenant, workflow_id))


@router.patch("/{workflow_id}")
async def update_workflow(
    workflow_id: uuid.UUID,
    data: WorkflowUpdate,
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    update_data = data.model_dump(exclude_unset=True)
    expected_version = update_data.pop("expected_version", None)
    try:
        workflow = await workflow_svc.update_workflow(
            db, tenant.id, workflow_id, expected_version=expected_version, **update_data
        )
    except StaleWorkflowError as exc:
        raise _conflict(exc) from exc
    except InvalidWorkflowError as exc:
        raise HTTPException(status_code=422, detail=exc.message) from exc
    if not workflow:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return workflow_dict(workflow)


@router.delete("/{workflow_id}")
async def delete_workflow(
    workflow_id: uuid.UUID,
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    deleted = await workflow_svc.delete_workflow(db, tenant.id, workflow_id)
    return {"deleted": deleted}


@router.post("/{workflow_id}/status")
async def set_status(
    workflow_id: uuid.UUID,
    data: StatusUpdate,
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    workflow = await workflow_svc.set_status(db, tenant.id, workflow_id, data.status)
    if not workflow:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return workflow_dict(workflow)


@router.get("/{workflow_id}/canvas")
async def load_canvas(
    workflow_id: uuid.UUID,
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    graph = await workflow_svc.load_canvas(db, tenant.id, workflow_id)
    if graph is None:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return graph.to_dict(resolve_icons=True)


@router.put("/{workflow_id}/canvas")
async def save_canvas(
    workflow_id: uuid.UUID,
    data: CanvasSave,
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    nodes = [WorkflowNode.from_dict(raw) for raw in data.nodes]
    try:
        workflow = await workflow_svc.save_canvas(
            db,
            tenant.id,
            workflow_id,
            nodes,
            name=data.name,
            expected_version=data.expected_version,
        )
    except StaleWorkflowError as exc:
        raise _conflict(exc) from exc
    except InvalidWorkflowError as exc:
        raise HTTPException(status_code=422, detail=exc.message) from exc
    if not workflow:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return {
        "saved": len(workflow.steps),
        "version": workflow.version,
        "notifications": [
            {
                "title": "Workflow Saved",
                "description": f"Saved {len(workflow.steps)} workflow steps successfully.",
                "variant": "default",
            }
        ],
    }


@router.post("/{workflow_id}/generate")
async def generate(
    workflow_id: uuid.UUID,
    payload: dict[str, Any] = Body(...),
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    """Materialize an AI generation payload into a fresh canvas."""
    await _require_workflow(db, tenant, workflow_id)
    notifications = NotificationLog()
    canvas = Canvas(notifier=notifications)
    result = canvas.apply_generation(payload)
    return {
        "applied": result is not None,
        "counts": result.to_dict() if result else None,
        "canvas": canvas.to_dict(),
        "notifications": [n.to_dict() for n in notifications.drain()],
    }
