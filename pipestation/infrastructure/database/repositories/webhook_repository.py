"""SQLAlchemy Webhook Repository 实现

record_trigger 是一条 UPDATE 语句：
    UPDATE webhooks
    SET last_request = :req, last_triggered_at = :now, trigger_count = trigger_count + 1
    WHERE id = :id
并发触发时计数不会丢失，last_request 以最后提交的写入为准。
"""

from datetime import datetime
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pipestation.domain.entities.webhook import Webhook
from pipestation.domain.exceptions import NotFoundError
from pipestation.infrastructure.database.models import WebhookModel
from pipestation.infrastructure.database.repositories._timestamps import as_utc


class SQLAlchemyWebhookRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ==================== Assembler 方法 ====================

    def _to_entity(self, model: WebhookModel) -> Webhook:
        return Webhook(
            id=model.id,
            pipeline_id=model.pipeline_id,
            user_id=model.user_id,
            token=model.token,
            method=model.method,
            is_active=model.is_active,
            last_request=model.last_request,
            last_triggered_at=as_utc(model.last_triggered_at),
            trigger_count=model.trigger_count,
            created_at=as_utc(model.created_at),
        )

    def _to_model(self, entity: Webhook) -> WebhookModel:
        return WebhookModel(
            id=entity.id,
            pipeline_id=entity.pipeline_id,
            user_id=entity.user_id,
            token=entity.token,
            method=entity.method,
            is_active=entity.is_active,
            last_request=entity.last_request,
            last_triggered_at=entity.last_triggered_at,
            trigger_count=entity.trigger_count,
            created_at=entity.created_at,
        )

    # ==================== CRUD 操作 ====================

    async def save(self, webhook: Webhook) -> None:
        """保存 Webhook（触发相关字段只由 record_trigger 修改）"""
        existing = await self.session.get(WebhookModel, webhook.id)

        if existing:
            existing.method = webhook.method
            existing.is_active = webhook.is_active
        else:
            self.session.add(self._to_model(webhook))

        await self.session.commit()

    async def get_by_id(self, webhook_id: str) -> Webhook:
        """抛出：NotFoundError"""
        model = await self.session.get(WebhookModel, webhook_id, populate_existing=True)
        if not model:
            raise NotFoundError("Webhook", webhook_id)
        return self._to_entity(model)

    async def find_active_by_token(self, token: str) -> Webhook | None:
        result = await self.session.execute(
            select(WebhookModel).where(
                WebhookModel.token == token,
                WebhookModel.is_active.is_(True),
            )
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list_by_pipeline(self, pipeline_id: str) -> list[Webhook]:
        result = await self.session.execute(
            select(WebhookModel)
            .where(WebhookModel.pipeline_id == pipeline_id)
            .order_by(WebhookModel.created_at)
        )
        return [self._to_entity(model) for model in result.scalars().all()]

    async def record_trigger(
        self, webhook_id: str, last_request: dict[str, Any], triggered_at: datetime
    ) -> None:
        await self.session.execute(
            update(WebhookModel)
            .where(WebhookModel.id == webhook_id)
            .values(
                last_request=last_request,
                last_triggered_at=triggered_at,
                trigger_count=WebhookModel.trigger_count + 1,
            )
        )
        await self.session.commit()

    async def delete(self, webhook_id: str) -> None:
        await self.session.execute(delete(WebhookModel).where(WebhookModel.id == webhook_id))
        await self.session.commit()

    async def delete_by_pipeline(self, pipeline_id: str) -> int:
        result = await self.session.execute(
            delete(WebhookModel).where(WebhookModel.pipeline_id == pipeline_id)
        )
        await self.session.commit()
        return result.rowcount or 0
