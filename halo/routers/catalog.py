"""Integration catalog route."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter

from .. import catalog

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


@router.get("")
async def list_integrations(type: Literal["trigger", "action"] | None = None):
    return [item.to_dict() for item in catalog.all_integrations(type)]


@router.get("/categories")
async def list_categories():
    return {
        category: [item.id for item in items]
        for category, items in catalog.by_category().items()
    }
