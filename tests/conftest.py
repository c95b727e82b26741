"""Pytest 配置文件 - 全局 fixtures"""

from collections.abc import AsyncIterator
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from pipestation.infrastructure.auth.jwt_service import JWTService
from pipestation.infrastructure.database import models  # noqa: F401
from pipestation.infrastructure.database.base import Base
from pipestation.infrastructure.database.schema import enable_sqlite_foreign_keys


@pytest.fixture
def pipeline_payload() -> dict[str, Any]:
    """示例流水线：webhook 触发 → 手动输入 → HTTP POST"""
    return {
        "title": "订单同步",
        "summary": "把收到的订单转发到下游系统",
        "trigger": {"type": "webhook", "config": {"method": "POST"}},
        "nodes": [
            {"id": "n1", "type": "manual_input", "config": {}},
            {
                "id": "n2",
                "type": "http_post",
                "config": {"url": "https://example.com/orders"},
            },
        ],
        "pipes": [{"id": "p1", "sourceId": "n1", "targetId": "n2"}],
    }


@pytest.fixture
def auth_headers():
    """生成带 Bearer token 的请求头"""

    def _make(user_id: str = "user-1") -> dict[str, str]:
        token = JWTService.create_access_token(data={"sub": user_id})
        return {"Authorization": f"Bearer {token}"}

    return _make


# ==================== 数据库 ====================


@pytest_asyncio.fixture
async def db_engine(tmp_path) -> AsyncIterator[AsyncEngine]:
    """每个测试一个独立的 SQLite 文件数据库

    使用文件而不是 :memory:：每个会话拿到自己的连接，
    并发投递测试中的多个会话看到同一份数据
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session
