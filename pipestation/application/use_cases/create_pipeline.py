"""CreatePipelineUseCase - 创建流水线用例

职责：
1. 解析定义快照（trigger / nodes / pipes）
2. 调用 Pipeline.create() 创建领域实体（分配 ID，is_public 时分配分享 token）
3. 调用 Repository.save() 持久化

所有输入问题（缺少字段、未知类型、Pipe 引用不存在的节点）合并成一个 ValidationError
"""

import logging
from dataclasses import dataclass
from typing import Any

from pipestation.domain.entities.pipeline import SHARE_TOKEN_SIZE, Pipeline, PipelineDefinition
from pipestation.domain.exceptions import ValidationError
from pipestation.domain.ports.pipeline_repository import PipelineRepository

logger = logging.getLogger(__name__)


@dataclass
class CreatePipelineInput:
    """创建流水线的输入参数

    trigger / nodes / pipes 保持调用方提交的原始结构，由领域层解析
    """

    user_id: str
    title: str | None
    trigger: Any = None
    nodes: Any = None
    pipes: Any = None
    summary: str | None = None
    is_public: bool = False


class CreatePipelineUseCase:
    def __init__(
        self, pipeline_repository: PipelineRepository, share_token_size: int = SHARE_TOKEN_SIZE
    ):
        self.pipeline_repository = pipeline_repository
        self.share_token_size = share_token_size

    async def execute(self, input_data: CreatePipelineInput) -> Pipeline:
        """抛出：ValidationError"""
        errors: list[str] = []
        if not input_data.title or not input_data.title.strip():
            errors.append("title is required")

        definition = None
        try:
            definition = PipelineDefinition.from_dict(
                {
                    "trigger": input_data.trigger,
                    "nodes": input_data.nodes,
                    "pipes": input_data.pipes,
                }
            )
        except ValidationError as exc:
            errors.extend(exc.errors)

        if definition is not None:
            errors.extend(definition.structural_errors())
        if errors:
            raise ValidationError(errors)

        pipeline = Pipeline.create(
            user_id=input_data.user_id,
            title=input_data.title,
            summary=input_data.summary,
            definition=definition,
            is_public=input_data.is_public,
            share_token_size=self.share_token_size,
        )
        await self.pipeline_repository.save(pipeline)

        logger.info(
            "Pipeline created: id=%s user=%s nodes=%d pipes=%d public=%s",
            pipeline.id,
            pipeline.user_id,
            len(definition.nodes),
            len(definition.pipes),
            pipeline.is_public,
        )
        return pipeline
