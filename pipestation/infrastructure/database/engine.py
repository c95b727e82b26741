"""数据库引擎配置

设计说明：
- 使用 create_async_engine 创建异步引擎（aiosqlite / asyncpg 等异步驱动）
- 从配置文件读取 database_url
- 连接池参数只对非 SQLite 数据库生效
- 配置 echo 参数（调试模式打印 SQL）
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from pipestation.config import settings


def get_engine(database_url: str | None = None) -> AsyncEngine:
    """创建数据库引擎

    参数：
        database_url: 数据库 URL；缺省使用 settings.database_url

    返回：
        AsyncEngine: 异步数据库引擎
    """
    url = database_url or settings.database_url
    options: dict[str, Any] = {"echo": settings.debug}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=5,  # 连接池大小
            max_overflow=10,  # 最大溢出连接数
            pool_pre_ping=True,  # 连接前检查（避免使用失效连接）
        )
    return create_async_engine(url, **options)


# 全局异步引擎实例
engine = get_engine()
