"""UpdatePipelineUseCase - 按字段合并更新流水线

合并规则：
- title / summary / is_public：只有显式提供时才覆盖
- trigger / nodes / pipes：只要提供了其中任意一个，就重建定义快照；
  提供的部分取自请求，未提供的部分取自已存储的定义（不会被清空）
- Pipe 引用检查只在本次请求提供了 pipes 时执行
"""

import logging
from dataclasses import dataclass
from typing import Any

from pipestation.application.use_cases.pipeline_access import get_owned_pipeline
from pipestation.domain.entities.pipeline import (
    SHARE_TOKEN_SIZE,
    UNSET,
    Pipeline,
    PipelineDefinition,
)
from pipestation.domain.exceptions import ValidationError
from pipestation.domain.ports.pipeline_repository import PipelineRepository

logger = logging.getLogger(__name__)

_DEFINITION_PARSERS = (
    ("trigger", PipelineDefinition.parse_trigger),
    ("nodes", PipelineDefinition.parse_nodes),
    ("pipes", PipelineDefinition.parse_pipes),
)


@dataclass
class UpdatePipelineInput:
    """更新流水线的输入参数（UNSET 表示请求中没有该字段）"""

    pipeline_id: str
    user_id: str
    title: Any = UNSET
    summary: Any = UNSET
    trigger: Any = UNSET
    nodes: Any = UNSET
    pipes: Any = UNSET
    is_public: Any = UNSET

    @property
    def touches_definition(self) -> bool:
        return any(getattr(self, key) is not UNSET for key, _ in _DEFINITION_PARSERS)


class UpdatePipelineUseCase:
    def __init__(
        self, pipeline_repository: PipelineRepository, share_token_size: int = SHARE_TOKEN_SIZE
    ):
        self.pipeline_repository = pipeline_repository
        self.share_token_size = share_token_size

    async def execute(self, input_data: UpdatePipelineInput) -> Pipeline:
        """执行更新

        抛出：
            NotFoundError: 流水线不存在
            ForbiddenError: 不是所有者
            ValidationError: 提交的内容不合法
        """
        pipeline = await get_owned_pipeline(
            self.pipeline_repository, input_data.pipeline_id, input_data.user_id
        )

        definition = None
        if input_data.touches_definition:
            definition = self._merge_definition(pipeline.definition, input_data)

        pipeline.apply_update(
            title=input_data.title,
            summary=input_data.summary,
            definition=definition,
            is_public=input_data.is_public,
            share_token_size=self.share_token_size,
        )
        await self.pipeline_repository.save(pipeline)

        logger.info(
            "Pipeline updated: id=%s definition_replaced=%s public=%s",
            pipeline.id,
            definition is not None,
            pipeline.is_public,
        )
        return pipeline

    @staticmethod
    def _merge_definition(
        stored: PipelineDefinition, input_data: UpdatePipelineInput
    ) -> PipelineDefinition:
        errors: list[str] = []
        parts: dict[str, Any] = {}
        for key, parser in _DEFINITION_PARSERS:
            value = getattr(input_data, key)
            if value is UNSET:
                continue
            try:
                parts[key] = parser(value)
            except ValidationError as exc:
                errors.extend(exc.errors)
        if errors:
            raise ValidationError(errors)

        merged = stored.merged_with(**parts)
        merged.ensure_structure(check_pipes="pipes" in parts)
        return merged
