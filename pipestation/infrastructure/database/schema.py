"""Database schema bootstrap helpers.

This project primarily relies on Alembic migrations for production databases.
For SQLite-based development and tests, we provide a best-effort helper to
ensure tables exist at startup.
"""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine

from pipestation.infrastructure.database.base import Base


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite 默认不执行外键约束（ON DELETE CASCADE 需要显式开启）"""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ARG001
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


async def ensure_sqlite_schema(engine: AsyncEngine) -> None:
    """Best-effort schema creation for SQLite.

    Notes:
    - Only runs for SQLite URLs.
    - For other databases, migrations (Alembic) should be used.
    """

    # Ensure ORM models are imported so they are registered on Base.metadata
    from pipestation.infrastructure.database import models as _models  # noqa: F401

    if engine.url.get_backend_name() == "sqlite":
        async with engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)
