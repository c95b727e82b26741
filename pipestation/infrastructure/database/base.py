"""ORM 声明基类与会话工厂

Base.metadata 同时供 ensure_sqlite_schema 与 Alembic 使用。
仓库在各自的写操作里提交，会话本身不自动 flush。
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from pipestation.infrastructure.database.engine import engine


class Base(DeclarativeBase):
    pass


AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """每个请求一个会话，请求结束时关闭，未提交的事务随之回滚"""
    async with AsyncSessionLocal() as session:
        yield session
