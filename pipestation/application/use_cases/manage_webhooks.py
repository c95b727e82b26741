"""Webhook 管理用例

- CreateWebhookUseCase: 为自己的流水线创建 Webhook（方法统一大写，token 32 位）
- WebhookQueryUseCase: 查询、列出、删除 Webhook，读取最近一次触发的请求快照

Webhook 只对其所有者可见：属于其他用户的 Webhook 与不存在的一样报 NotFoundError
"""

import logging
from dataclasses import dataclass
from typing import Any

from pipestation.application.use_cases.pipeline_access import get_owned_pipeline
from pipestation.domain.entities.webhook import WEBHOOK_TOKEN_SIZE, Webhook
from pipestation.domain.exceptions import NotFoundError
from pipestation.domain.ports.pipeline_repository import PipelineRepository
from pipestation.domain.ports.webhook_repository import WebhookRepository
from pipestation.domain.value_objects.trigger_type import HttpMethod

logger = logging.getLogger(__name__)


@dataclass
class CreateWebhookInput:
    pipeline_id: str
    user_id: str
    method: str = HttpMethod.POST.value


class CreateWebhookUseCase:
    def __init__(
        self,
        pipeline_repository: PipelineRepository,
        webhook_repository: WebhookRepository,
        token_size: int = WEBHOOK_TOKEN_SIZE,
    ):
        self.pipeline_repository = pipeline_repository
        self.webhook_repository = webhook_repository
        self.token_size = token_size

    async def execute(self, input_data: CreateWebhookInput) -> Webhook:
        """抛出：NotFoundError / ForbiddenError / ValidationError"""
        pipeline = await get_owned_pipeline(
            self.pipeline_repository, input_data.pipeline_id, input_data.user_id
        )

        webhook = Webhook.create(
            pipeline_id=pipeline.id,
            user_id=input_data.user_id,
            method=input_data.method,
            token_size=self.token_size,
        )
        await self.webhook_repository.save(webhook)

        logger.info(
            "Webhook created: id=%s pipeline=%s method=%s",
            webhook.id,
            webhook.pipeline_id,
            webhook.method,
        )
        return webhook


class WebhookQueryUseCase:
    def __init__(
        self, pipeline_repository: PipelineRepository, webhook_repository: WebhookRepository
    ):
        self.pipeline_repository = pipeline_repository
        self.webhook_repository = webhook_repository

    async def get(self, webhook_id: str, user_id: str) -> Webhook:
        webhook = await self.webhook_repository.get_by_id(webhook_id)
        if webhook.user_id != user_id:
            raise NotFoundError("Webhook", webhook_id)
        return webhook

    async def list_for_pipeline(self, pipeline_id: str, user_id: str) -> list[Webhook]:
        pipeline = await get_owned_pipeline(self.pipeline_repository, pipeline_id, user_id)
        return await self.webhook_repository.list_by_pipeline(pipeline.id)

    async def delete(self, webhook_id: str, user_id: str) -> None:
        webhook = await self.get(webhook_id, user_id)
        await self.webhook_repository.delete(webhook.id)
        logger.info("Webhook deleted: id=%s", webhook.id)

    async def get_last_request(self, webhook_id: str, user_id: str) -> dict[str, Any] | None:
        """最近一次触发的 {data, timestamp}；从未触发过时为 None"""
        webhook = await self.get(webhook_id, user_id)
        return webhook.last_request
