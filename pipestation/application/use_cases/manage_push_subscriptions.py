"""推送订阅用例

- SubscribePushUseCase: (user_id, endpoint) 已存在时刷新密钥，否则新建
- UnsubscribePushUseCase: 按 endpoint 删除
"""

import logging
from dataclasses import dataclass

from pipestation.domain.entities.push_subscription import PushSubscription
from pipestation.domain.ports.push_subscription_repository import PushSubscriptionRepository

logger = logging.getLogger(__name__)


@dataclass
class SubscribePushInput:
    user_id: str
    endpoint: str
    p256dh_key: str
    auth_key: str
    user_agent: str | None = None


class SubscribePushUseCase:
    def __init__(self, subscription_repository: PushSubscriptionRepository):
        self.subscription_repository = subscription_repository

    async def execute(self, input_data: SubscribePushInput) -> PushSubscription:
        """抛出：ValidationError（endpoint 或密钥缺失）"""
        subscription = PushSubscription.create(
            user_id=input_data.user_id,
            endpoint=input_data.endpoint,
            p256dh_key=input_data.p256dh_key,
            auth_key=input_data.auth_key,
            user_agent=input_data.user_agent,
        )
        stored = await self.subscription_repository.upsert(subscription)
        logger.info("Push subscription stored: id=%s user=%s", stored.id, stored.user_id)
        return stored


class UnsubscribePushUseCase:
    def __init__(self, subscription_repository: PushSubscriptionRepository):
        self.subscription_repository = subscription_repository

    async def execute(self, user_id: str, endpoint: str) -> int:
        removed = await self.subscription_repository.delete_by_endpoint(user_id, endpoint)
        logger.info("Push subscription removed: user=%s count=%d", user_id, removed)
        return removed
