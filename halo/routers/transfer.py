"""Export and import routes for workflow files."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..errors import ImportFormatError
from ..models.tenant import Tenant
from ..services import transfer_svc, workflow_svc
from ..tenancy import get_current_tenant
from .workflows import workflow_dict

router = APIRouter(prefix="/api/t/{subdomain}/workflows", tags=["transfer"])


@router.get("/{workflow_id}/export")
async def export_workflow(
    workflow_id: uuid.UUID,
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    workflow = await workflow_svc.get_workflow(db, tenant.id, workflow_id)
    if not workflow:
        raise HTTPException(status_code=404, detail="Workflow not found")
    filename = transfer_svc.export_filename(workflow.name)
    return JSONResponse(
        transfer_svc.export_workflow(workflow),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import", status_code=201)
async def import_workflow(
    file: UploadFile = File(...),
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    content = await file.read()
    try:
        transfer_svc.validate_import_file(file.filename, len(content))
        workflow = await transfer_svc.import_workflow(db, tenant.id, content)
    except ImportFormatError as exc:
        raise HTTPException(status_code=422, detail=exc.message) from exc
    return workflow_dict(workflow)
