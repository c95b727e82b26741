"""PushSubscriptionRepository Port - 推送订阅的持久化接口"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Protocol

from pipestation.domain.entities.push_subscription import PushSubscription


class PushSubscriptionRepository(Protocol):
    """PushSubscription 仓储接口

    (user_id, endpoint) 唯一：
    - upsert() 对已存在的订阅刷新密钥与 last_used_at，返回持久化后的实体
    """

    async def upsert(self, subscription: PushSubscription) -> PushSubscription: ...

    async def list_by_user(self, user_id: str) -> list[PushSubscription]: ...

    async def touch(self, subscription_id: str) -> None:
        """更新 last_used_at 为当前时间"""
        ...

    async def delete(self, subscription_id: str) -> None: ...

    async def delete_by_endpoint(self, user_id: str, endpoint: str) -> int: ...


# 每次调用得到一个独立会话上的仓库（并发任务之间不能共享 AsyncSession）
PushSubscriptionRepositoryProvider = Callable[
    [], AbstractAsyncContextManager[PushSubscriptionRepository]
]
