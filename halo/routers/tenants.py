"""Tenant routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.tenant import Tenant
from ..schemas.workflow import TenantCreate
from ..services import tenant_svc

router = APIRouter(prefix="/api/tenants", tags=["tenants"])


def _tenant_dict(tenant: Tenant) -> dict:
    return {
        "id": str(tenant.id),
        "name": tenant.name,
        "subdomain": tenant.subdomain,
        "settings": tenant.settings or {},
    }


@router.get("")
async def list_tenants(db: AsyncSession = Depends(get_db)):
    return [_tenant_dict(t) for t in await tenant_svc.list_tenants(db)]


@router.post("", status_code=201)
async def create_tenant(data: TenantCreate, db: AsyncSession = Depends(get_db)):
    if await tenant_svc.get_tenant_by_subdomain(db, data.subdomain.lower()):
        raise HTTPException(status_code=409, detail="Subdomain already taken")
    tenant = await tenant_svc.create_tenant(
        db, name=data.name, subdomain=data.subdomain, settings=data.settings
    )
    return _tenant_dict(tenant)
