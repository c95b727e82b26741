"""DeletePipelineUseCase - 删除流水线并级联删除其 Webhook"""

import logging

from pipestation.application.use_cases.pipeline_access import get_owned_pipeline
from pipestation.domain.ports.pipeline_repository import PipelineRepository
from pipestation.domain.ports.webhook_repository import WebhookRepository

logger = logging.getLogger(__name__)


class DeletePipelineUseCase:
    def __init__(
        self, pipeline_repository: PipelineRepository, webhook_repository: WebhookRepository
    ):
        self.pipeline_repository = pipeline_repository
        self.webhook_repository = webhook_repository

    async def execute(self, pipeline_id: str, user_id: str) -> None:
        """抛出：NotFoundError / ForbiddenError"""
        pipeline = await get_owned_pipeline(self.pipeline_repository, pipeline_id, user_id)

        removed = await self.webhook_repository.delete_by_pipeline(pipeline.id)
        await self.pipeline_repository.delete(pipeline.id)

        logger.info("Pipeline deleted: id=%s webhooks_removed=%d", pipeline.id, removed)
