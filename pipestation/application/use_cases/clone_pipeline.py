"""ClonePipelineUseCase - 通过分享 token 克隆公开流水线

业务规则：
- 只有 is_public 为 true 且 token 匹配的流水线可以被克隆，否则 NotFoundError
- 副本属于调用者、私有、cloned_from 指向来源
- 来源的 clone_count 原子 +1；计数失败只记录日志，副本照常返回
"""

import logging

from pipestation.domain.entities.pipeline import Pipeline
from pipestation.domain.exceptions import NotFoundError
from pipestation.domain.ports.pipeline_repository import PipelineRepository

logger = logging.getLogger(__name__)


class ClonePipelineUseCase:
    def __init__(self, pipeline_repository: PipelineRepository):
        self.pipeline_repository = pipeline_repository

    async def execute(self, share_token: str, user_id: str) -> Pipeline:
        source = await self.pipeline_repository.find_public_by_share_token(share_token)
        if source is None:
            raise NotFoundError("Pipeline", share_token)

        clone = source.clone_for(user_id)
        await self.pipeline_repository.save(clone)

        try:
            await self.pipeline_repository.increment_clone_count(source.id)
        except Exception:
            logger.warning(
                "Failed to increment clone_count for pipeline %s", source.id, exc_info=True
            )

        logger.info("Pipeline cloned: source=%s clone=%s user=%s", source.id, clone.id, user_id)
        return clone
