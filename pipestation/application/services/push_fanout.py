"""PushFanoutService - 向用户的所有订阅并发投递推送

职责：
    加载用户的全部 PushSubscription，为每个订阅创建一个投递任务后再统一等待
    （settle-all：每个订阅的结果互不影响，一个失败不会取消其他订阅）。

投递结果：
    - 成功：更新 last_used_at
    - 永久拒绝（404/410）：删除该订阅（自愈），结果标记 pruned
    - 其他失败（含超时、网络错误）：只记录在结果中，订阅保留

并发说明：
    AsyncSession 不能在并发任务之间共享，因此每个任务通过 subscription_provider
    获取自己的仓库（独立会话）。
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from pipestation.domain.entities.push_subscription import PushSubscription
from pipestation.domain.ports.push_subscription_repository import (
    PushSubscriptionRepositoryProvider,
)
from pipestation.domain.ports.push_transport import PushDeliveryError, PushTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PushDeliveryResult:
    """单个订阅的投递结果"""

    subscription_id: str
    endpoint: str
    success: bool
    pruned: bool = False
    status_code: int | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "subscriptionId": self.subscription_id,
            "endpoint": self.endpoint,
            "success": self.success,
            "pruned": self.pruned,
            "statusCode": self.status_code,
            "error": self.error,
        }


class PushFanoutService:
    """推送扇出服务"""

    def __init__(
        self,
        *,
        subscription_provider: PushSubscriptionRepositoryProvider,
        transport: PushTransport,
    ) -> None:
        self.subscription_provider = subscription_provider
        self.transport = transport

    async def send_to_user(
        self, user_id: str, payload: dict[str, Any]
    ) -> list[PushDeliveryResult]:
        """向 user_id 的每个订阅投递 payload，返回逐个订阅的结果"""
        async with self.subscription_provider() as repository:
            subscriptions = await repository.list_by_user(user_id)

        if not subscriptions:
            logger.debug("No push subscriptions for user %s", user_id)
            return []

        tasks = [
            asyncio.create_task(self._deliver(subscription, payload))
            for subscription in subscriptions
        ]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results: list[PushDeliveryResult] = []
        for subscription, outcome in zip(subscriptions, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "Push delivery to subscription %s raised %s",
                    subscription.id,
                    type(outcome).__name__,
                )
                results.append(
                    PushDeliveryResult(
                        subscription_id=subscription.id,
                        endpoint=subscription.endpoint,
                        success=False,
                        error=str(outcome) or type(outcome).__name__,
                    )
                )
            else:
                results.append(outcome)

        delivered = sum(1 for result in results if result.success)
        logger.info(
            "Push fan-out for user %s: %d/%d delivered, %d pruned",
            user_id,
            delivered,
            len(results),
            sum(1 for result in results if result.pruned),
        )
        return results

    async def _deliver(
        self, subscription: PushSubscription, payload: dict[str, Any]
    ) -> PushDeliveryResult:
        try:
            await self.transport.send(subscription, payload)
        except PushDeliveryError as exc:
            pruned = False
            if exc.is_permanent:
                async with self.subscription_provider() as repository:
                    await repository.delete(subscription.id)
                pruned = True
                logger.info(
                    "Pruned push subscription %s (status %s)", subscription.id, exc.status_code
                )
            else:
                logger.warning(
                    "Push delivery to subscription %s failed: %s", subscription.id, exc.message
                )
            return PushDeliveryResult(
                subscription_id=subscription.id,
                endpoint=subscription.endpoint,
                success=False,
                pruned=pruned,
                status_code=exc.status_code,
                error=exc.message,
            )

        try:
            async with self.subscription_provider() as repository:
                await repository.touch(subscription.id)
        except Exception:
            logger.warning(
                "Failed to update last_used_at for subscription %s", subscription.id, exc_info=True
            )

        return PushDeliveryResult(
            subscription_id=subscription.id,
            endpoint=subscription.endpoint,
            success=True,
        )
