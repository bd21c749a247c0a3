"""Tenant service."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.tenant import Tenant


async def list_tenants(db: AsyncSession) -> list[Tenant]:
    result = await db.execute(select(Tenant).order_by(Tenant.name))
    return list(result.scalars().all())


async def get_tenant_by_subdomain(db: AsyncSession, subdomain: str) -> Tenant | None:
    result = await db.execute(select(Tenant).where(Tenant.subdomain == subdomain))
    return result.scalar_one_or_none()


async def create_tenant(
    db: AsyncSession,
    name: str,
    subdomain: str,
    settings: dict | None = None,
) -> Tenant:
    tenant = Tenant(name=name, subdomain=subdomain.strip().lower(), settings=settings)
    db.add(tenant)
    await db.commit()
    await db.refresh(tenant)
    return tenant
