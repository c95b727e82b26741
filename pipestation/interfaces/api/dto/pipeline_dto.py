"""Pipeline DTO（Data Transfer Objects）

定义 Pipeline 相关的请求和响应模型

注意：
- 线上字段使用 camelCase（isPublic、shareToken ...），Python 侧使用 snake_case
- trigger / nodes / pipes 以原始结构接收，由领域层解析并一次性报告所有问题
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pipestation.domain.entities.pipeline import Pipeline

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreatePipelineRequest(BaseModel):
    """创建流水线请求"""

    title: str | None = Field(default=None, max_length=255, description="标题")
    summary: str | None = Field(default=None, max_length=1000, description="说明")
    trigger: dict[str, Any] | None = Field(default=None, description="触发器 {type, config}")
    nodes: list[Any] | None = Field(default=None, description="节点列表")
    pipes: list[Any] | None = Field(default=None, description="连线列表")
    is_public: bool = Field(default=False, description="是否公开分享")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "RSS 摘要",
                "trigger": {"type": "webhook", "config": {"method": "POST"}},
                "nodes": [
                    {"id": "n1", "type": "manual_input", "config": {}},
                    {"id": "n2", "type": "http_post", "config": {"url": "https://example.com"}},
                ],
                "pipes": [{"id": "p1", "sourceId": "n1", "targetId": "n2"}],
                "isPublic": False,
            }
        },
    )


class UpdatePipelineRequest(BaseModel):
    """更新流水线请求（只有请求中出现的字段才会被合并）"""

    title: str | None = Field(default=None, max_length=255)
    summary: str | None = Field(default=None, max_length=1000)
    trigger: dict[str, Any] | None = None
    nodes: list[Any] | None = None
    pipes: list[Any] | None = None
    is_public: bool | None = None

    model_config = _CAMEL

    def provided(self) -> dict[str, Any]:
        """请求中显式出现的字段（snake_case）"""
        return {name: getattr(self, name) for name in self.model_fields_set}


class PipelineResponse(BaseModel):
    """流水线详情"""

    id: str
    user_id: str
    title: str
    summary: str | None = None
    trigger: dict[str, Any]
    nodes: list[dict[str, Any]]
    pipes: list[dict[str, Any]]
    is_public: bool
    share_token: str | None = None
    cloned_from: str | None = None
    clone_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = _CAMEL

    @classmethod
    def from_entity(cls, pipeline: Pipeline) -> "PipelineResponse":
        definition = pipeline.definition.to_dict()
        return cls(
            id=pipeline.id,
            user_id=pipeline.user_id,
            title=pipeline.title,
            summary=pipeline.summary,
            trigger=definition["trigger"],
            nodes=definition["nodes"],
            pipes=definition["pipes"],
            is_public=pipeline.is_public,
            share_token=pipeline.share_token,
            cloned_from=pipeline.cloned_from,
            clone_count=pipeline.clone_count,
            created_at=pipeline.created_at,
            updated_at=pipeline.updated_at,
        )


class PipelineSummaryResponse(BaseModel):
    """列表中的流水线（不含定义快照）"""

    id: str
    title: str
    summary: str | None = None
    is_public: bool
    share_token: str | None = None
    clone_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = _CAMEL

    @classmethod
    def from_entity(cls, pipeline: Pipeline) -> "PipelineSummaryResponse":
        return cls(
            id=pipeline.id,
            title=pipeline.title,
            summary=pipeline.summary,
            is_public=pipeline.is_public,
            share_token=pipeline.share_token,
            clone_count=pipeline.clone_count,
            created_at=pipeline.created_at,
            updated_at=pipeline.updated_at,
        )


class PipelineEnvelope(BaseModel):
    pipeline: PipelineResponse


class PipelineListResponse(BaseModel):
    pipelines: list[PipelineSummaryResponse]


class PipelineValidationResponse(BaseModel):
    """结构问题、触发器配置问题与各节点配置问题"""

    valid: bool
    structure: list[str] = Field(default_factory=list)
    trigger: list[str] = Field(default_factory=list)
    nodes: dict[str, list[str]] = Field(default_factory=dict)
    cron: str | None = None


class SuccessResponse(BaseModel):
    success: bool = True
