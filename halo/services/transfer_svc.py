"""Workflow export and import (JSON files)."""

from __future__ import annotations

import json
import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..errors import ImportFormatError
from ..models.workflow import Workflow
from . import workflow_svc

logger = logging.getLogger(__name__)

INVALID_FORMAT = "Invalid workflow file format"
UNPARSEABLE = "Failed to parse workflow file"


def export_filename(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]", "_", name, flags=re.IGNORECASE).lower()
    return f"{slug}_automation.json"


def export_workflow(workflow: Workflow, exported_by: str | None = None) -> dict[str, Any]:
    return {
        "version": settings.export_version,
        "name": workflow.name,
        "description": workflow.description,
        "steps": list(workflow.steps or []),
        "metadata": {
            "exportedAt": datetime.now(timezone.utc).isoformat(),
            "exportedBy": exported_by or settings.export_author,
            "originalId": str(workflow.id),
        },
    }


def validate_import_file(filename: str | None, size: int) -> None:
    """Reject uploads that are not .json or exceed the size limit."""
    if not filename or not filename.lower().endswith(".json"):
        raise ImportFormatError("Please select a JSON file")
    if size > settings.import_max_bytes:
        limit_mb = settings.import_max_bytes // (1024 * 1024)
        raise ImportFormatError(f"File size too large (max {limit_mb}MB)")


def parse_import(content: str | bytes) -> dict[str, Any]:
    """Decode an export document, checking only version, name and steps."""
    try:
        data = json.loads(content)
    except (ValueError, UnicodeDecodeError) as exc:
        raise ImportFormatError(UNPARSEABLE) from exc
    if not isinstance(data, dict):
        raise ImportFormatError(INVALID_FORMAT)
    if not data.get("version") or not data.get("name") or not isinstance(data.get("steps"), list):
        raise ImportFormatError(INVALID_FORMAT)
    return data


def unique_name(base_name: str, existing: list[str] | set[str]) -> str:
    """``name`` if free, else ``name (Copy)``, ``name (Copy 2)``, ..."""
    taken = set(existing)
    if base_name not in taken:
        return base_name
    counter = 1
    candidate = f"{base_name} (Copy)"
    while candidate in taken:
        counter += 1
        candidate = f"{base_name} (Copy {counter})"
    return candidate


async def generate_unique_name(db: AsyncSession, tenant_id: uuid.UUID, base_name: str) -> str:
    existing = await workflow_svc.names_with_prefix(db, tenant_id, base_name)
    return unique_name(base_name, existing)


async def import_workflow(
    db: AsyncSession, tenant_id: uuid.UUID, content: str | bytes
) -> Workflow:
    data = parse_import(content)
    name = str(data["name"])
    final_name = await generate_unique_name(db, tenant_id, name)
    workflow = await workflow_svc.create_workflow(
        db,
        tenant_id,
        name=final_name,
        description=data.get("description") or f"Imported from {name}",
        status="draft",
        steps=data["steps"],
    )
    logger.info("Imported workflow %r as %r (%s)", name, final_name, workflow.id)
    return workflow
