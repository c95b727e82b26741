"""流水线查询用例

- ListPipelinesUseCase: 用户的流水线列表（最近更新的在前）
- GetPipelineUseCase: 单个流水线详情（校验所有者）
- ValidatePipelineUseCase: 结构问题 + 触发器/节点配置问题汇总
"""

from typing import Any

from pipestation.application.use_cases.pipeline_access import get_owned_pipeline
from pipestation.domain.entities.pipeline import Pipeline
from pipestation.domain.ports.pipeline_repository import PipelineRepository


class ListPipelinesUseCase:
    def __init__(self, pipeline_repository: PipelineRepository):
        self.pipeline_repository = pipeline_repository

    async def execute(self, user_id: str) -> list[Pipeline]:
        return await self.pipeline_repository.list_by_user(user_id)


class GetPipelineUseCase:
    def __init__(self, pipeline_repository: PipelineRepository):
        self.pipeline_repository = pipeline_repository

    async def execute(self, pipeline_id: str, user_id: str) -> Pipeline:
        return await get_owned_pipeline(self.pipeline_repository, pipeline_id, user_id)


class ValidatePipelineUseCase:
    def __init__(self, pipeline_repository: PipelineRepository):
        self.pipeline_repository = pipeline_repository

    async def execute(self, pipeline_id: str, user_id: str) -> dict[str, Any]:
        pipeline = await get_owned_pipeline(self.pipeline_repository, pipeline_id, user_id)
        return pipeline.validation_report()
