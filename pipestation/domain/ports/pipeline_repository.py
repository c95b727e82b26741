"""PipelineRepository Port - 定义 Pipeline 实体的持久化接口

设计原则：
- 使用 Protocol（结构化子类型，不需要显式继承）
- 方法签名使用领域对象（Pipeline 实体）
- 所有方法都是异步的（每次读写都是一个挂起点）

命名约定：
- get_xxx: 必须存在，不存在时抛出 NotFoundError
- find_xxx: 可以不存在，返回 None
- list_xxx: 返回列表
"""

from typing import Protocol

from pipestation.domain.entities.pipeline import Pipeline


class PipelineRepository(Protocol):
    """Pipeline 仓储接口"""

    async def save(self, pipeline: Pipeline) -> None:
        """保存 Pipeline（新增或更新，定义快照整体覆盖）"""
        ...

    async def get_by_id(self, pipeline_id: str) -> Pipeline:
        """根据 ID 获取 Pipeline

        抛出：
            NotFoundError: 当 Pipeline 不存在时
        """
        ...

    async def find_by_id(self, pipeline_id: str) -> Pipeline | None: ...

    async def find_title(self, pipeline_id: str) -> str | None:
        """只读取标题列，不解析定义快照"""
        ...

    async def find_public_by_share_token(self, share_token: str) -> Pipeline | None:
        """查找 is_public 为 true 且 share_token 匹配的 Pipeline"""
        ...

    async def list_by_user(self, user_id: str) -> list[Pipeline]:
        """列出用户的所有 Pipeline（按 updated_at 倒序）"""
        ...

    async def increment_clone_count(self, pipeline_id: str) -> None:
        """clone_count + 1（单条原子 UPDATE，不做读后写）"""
        ...

    async def delete(self, pipeline_id: str) -> None: ...
