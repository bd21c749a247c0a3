"""FastAPI application for HALO."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import __version__
from .config import settings
from .database import create_schema, uses_sqlite

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Production databases are migrated with Alembic instead
    if uses_sqlite():
        await create_schema()
    logger.info("HALO %s started (%s)", __version__, settings.environment)
    yield


app = FastAPI(title=settings.app_title, version=__version__, lifespan=lifespan)

# Import and register routers
from .routers import (  # noqa: E402
    catalog,
    chat,
    health,
    tenants,
    transfer,
    workflows,
)

app.include_router(tenants.router)
app.include_router(transfer.router)
app.include_router(workflows.router)
app.include_router(chat.router)
app.include_router(catalog.router)
app.include_router(health.router)
