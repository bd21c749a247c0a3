"""Async engine, session factory and local schema bootstrap."""

from __future__ import annotations

import logging
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .config import settings

logger = logging.getLogger(__name__)

engine = create_async_engine(settings.database_url, echo=settings.echo_sql)
async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def uses_sqlite() -> bool:
    return settings.database_url.startswith("sqlite")


async def create_schema() -> None:
    """Create missing tables in place. Only meant for local SQLite files."""
    from .models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Schema ready on %s", engine.url.render_as_string(hide_password=True))


async def get_db() -> AsyncIterator[AsyncSession]:
    """Request-scoped session for FastAPI dependencies."""
    async with async_session_factory() as session:
        yield session
