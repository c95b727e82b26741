"""Webhook DTO"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pipestation.domain.entities.webhook import Webhook

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateWebhookRequest(BaseModel):
    pipeline_id: str = Field(..., min_length=1, description="流水线 ID")
    method: str = Field(default="POST", description="HTTP 方法（GET/POST/PUT/DELETE/PATCH）")

    model_config = _CAMEL


class WebhookResponse(BaseModel):
    id: str
    pipeline_id: str
    token: str
    method: str
    is_active: bool
    trigger_count: int
    last_triggered_at: datetime | None = None
    created_at: datetime

    model_config = _CAMEL

    @classmethod
    def from_entity(cls, webhook: Webhook) -> "WebhookResponse":
        return cls(
            id=webhook.id,
            pipeline_id=webhook.pipeline_id,
            token=webhook.token,
            method=webhook.method,
            is_active=webhook.is_active,
            trigger_count=webhook.trigger_count,
            last_triggered_at=webhook.last_triggered_at,
            created_at=webhook.created_at,
        )


class WebhookEnvelope(BaseModel):
    webhook: WebhookResponse


class WebhookListResponse(BaseModel):
    webhooks: list[WebhookResponse]


class WebhookDataResponse(BaseModel):
    """最近一次触发的 {data: {body, query, headers}, timestamp}"""

    data: dict[str, Any] | None = None


class WebhookTriggerResponse(BaseModel):
    success: bool = True
    triggered: bool = True
