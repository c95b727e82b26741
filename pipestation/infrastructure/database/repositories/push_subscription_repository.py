"""SQLAlchemy PushSubscription Repository 实现"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pipestation.domain.entities.push_subscription import PushSubscription
from pipestation.domain.ports.push_subscription_repository import (
    PushSubscriptionRepositoryProvider,
)
from pipestation.infrastructure.database.models import PushSubscriptionModel
from pipestation.infrastructure.database.repositories._timestamps import as_utc


class SQLAlchemyPushSubscriptionRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ==================== Assembler 方法 ====================

    def _to_entity(self, model: PushSubscriptionModel) -> PushSubscription:
        return PushSubscription(
            id=model.id,
            user_id=model.user_id,
            endpoint=model.endpoint,
            p256dh_key=model.p256dh_key,
            auth_key=model.auth_key,
            user_agent=model.user_agent,
            last_used_at=as_utc(model.last_used_at),
            created_at=as_utc(model.created_at),
        )

    def _to_model(self, entity: PushSubscription) -> PushSubscriptionModel:
        return PushSubscriptionModel(
            id=entity.id,
            user_id=entity.user_id,
            endpoint=entity.endpoint,
            p256dh_key=entity.p256dh_key,
            auth_key=entity.auth_key,
            user_agent=entity.user_agent,
            last_used_at=entity.last_used_at,
            created_at=entity.created_at,
        )

    # ==================== CRUD 操作 ====================

    async def upsert(self, subscription: PushSubscription) -> PushSubscription:
        """(user_id, endpoint) 已存在时刷新密钥与 last_used_at，保留原 ID"""
        result = await self.session.execute(
            select(PushSubscriptionModel).where(
                PushSubscriptionModel.user_id == subscription.user_id,
                PushSubscriptionModel.endpoint == subscription.endpoint,
            )
        )
        existing = result.scalar_one_or_none()

        if existing:
            existing.p256dh_key = subscription.p256dh_key
            existing.auth_key = subscription.auth_key
            existing.last_used_at = datetime.now(UTC)
            if subscription.user_agent:
                existing.user_agent = subscription.user_agent
            model = existing
        else:
            model = self._to_model(subscription)
            self.session.add(model)

        await self.session.commit()
        return self._to_entity(model)

    async def list_by_user(self, user_id: str) -> list[PushSubscription]:
        result = await self.session.execute(
            select(PushSubscriptionModel).where(PushSubscriptionModel.user_id == user_id)
        )
        return [self._to_entity(model) for model in result.scalars().all()]

    async def touch(self, subscription_id: str) -> None:
        await self.session.execute(
            update(PushSubscriptionModel)
            .where(PushSubscriptionModel.id == subscription_id)
            .values(last_used_at=datetime.now(UTC))
        )
        await self.session.commit()

    async def delete(self, subscription_id: str) -> None:
        await self.session.execute(
            delete(PushSubscriptionModel).where(PushSubscriptionModel.id == subscription_id)
        )
        await self.session.commit()

    async def delete_by_endpoint(self, user_id: str, endpoint: str) -> int:
        result = await self.session.execute(
            delete(PushSubscriptionModel).where(
                PushSubscriptionModel.user_id == user_id,
                PushSubscriptionModel.endpoint == endpoint,
            )
        )
        await self.session.commit()
        return result.rowcount or 0


def session_scoped_subscriptions(
    session_factory: async_sessionmaker[AsyncSession],
) -> PushSubscriptionRepositoryProvider:
    """每次进入上下文都打开一个新会话，供并发投递任务各自使用"""

    @asynccontextmanager
    async def provide() -> AsyncIterator[SQLAlchemyPushSubscriptionRepository]:
        async with session_factory() as session:
            yield SQLAlchemyPushSubscriptionRepository(session)

    return provide
