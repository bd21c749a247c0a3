"""FastAPI dependencies for tenant resolution."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Path
from sqlalchemy.ext.asyncio import AsyncSession

from .database import get_db
from .models.tenant import Tenant
from .services import tenant_svc


async def get_current_tenant(
    subdomain: str = Path(..., description="Tenant subdomain"),
    db: AsyncSession = Depends(get_db),
) -> Tenant:
    """Resolve the tenant subdomain in the URL. Raises 404 if not found."""
    tenant = await tenant_svc.get_tenant_by_subdomain(db, subdomain.strip().lower())
    if not tenant:
        raise HTTPException(status_code=404, detail=f"Tenant '{subdomain}' not found")
    return tenant
