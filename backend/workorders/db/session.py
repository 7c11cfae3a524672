"""Async engine, session factory and schema bootstrap for the work-order store."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

from alembic.config import Config
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from workorders import models as _models
from workorders.core.config import BACKEND_ROOT, settings
from workorders.core.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = get_logger(__name__)

# Registers every table on SQLModel.metadata before create_all / autogenerate.
_MODEL_REGISTRY = _models
ALEMBIC_INI = BACKEND_ROOT / "alembic.ini"
MIGRATION_VERSIONS_DIR = BACKEND_ROOT / "migrations" / "versions"
_ASYNC_DRIVERS = {
    "postgresql": "postgresql+psycopg",
    "sqlite": "sqlite+aiosqlite",
}


def _normalize_database_url(database_url: str) -> str:
    """Swap a bare dialect scheme for its async driver; explicit drivers pass through."""
    scheme, sep, rest = database_url.partition("://")
    if not sep:
        return database_url
    return f"{_ASYNC_DRIVERS.get(scheme, scheme)}://{rest}"


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Turn on FK enforcement so task references honour ON DELETE SET NULL."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, _record) -> None:  # type: ignore[no-untyped-def]
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(database_url: str) -> AsyncEngine:
    url = _normalize_database_url(database_url)
    engine = create_async_engine(url, pool_pre_ping=not url.startswith("sqlite"))
    _enable_sqlite_foreign_keys(engine)
    return engine


async_engine = build_engine(settings.database_url)
async_session_maker = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


def _alembic_config() -> Config:
    config = Config(str(ALEMBIC_INI))
    # Logging is already configured by the application.
    config.attributes["configure_logger"] = False
    return config


def run_migrations() -> None:
    """Upgrade the schema to the latest Alembic revision."""
    from alembic import command

    logger.info("db.migrations.started", extra={"alembic_ini": str(ALEMBIC_INI)})
    command.upgrade(_alembic_config(), "head")
    logger.info("db.migrations.completed")


def _has_migrations(versions_dir: Path = MIGRATION_VERSIONS_DIR) -> bool:
    return any(versions_dir.glob("*.py"))


async def init_db() -> None:
    """Prepare the schema: Alembic when auto-migrate is on, else create_all."""
    if settings.db_auto_migrate and _has_migrations():
        await asyncio.to_thread(run_migrations)
        return
    if settings.db_auto_migrate:
        logger.warning("db.migrations.missing", extra={"versions_dir": str(MIGRATION_VERSIONS_DIR)})

    async with async_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("db.schema.created", extra={"tables": len(SQLModel.metadata.tables)})


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; anything left uncommitted is rolled back."""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await _rollback_open_transaction(session)


async def _rollback_open_transaction(session: AsyncSession) -> None:
    try:
        if session.in_transaction():
            await session.rollback()
    except SQLAlchemyError:
        logger.exception("db.session.rollback_failed")
