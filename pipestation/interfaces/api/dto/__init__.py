"""API DTO"""

from pipestation.interfaces.api.dto.pipeline_dto import (
    CreatePipelineRequest,
    PipelineEnvelope,
    PipelineListResponse,
    PipelineResponse,
    PipelineSummaryResponse,
    PipelineValidationResponse,
    SuccessResponse,
    UpdatePipelineRequest,
)
from pipestation.interfaces.api.dto.push_dto import (
    SubscribeRequest,
    SubscribeResponse,
    SubscriptionRef,
    UnsubscribeRequest,
    VapidKeyResponse,
)
from pipestation.interfaces.api.dto.webhook_dto import (
    CreateWebhookRequest,
    WebhookDataResponse,
    WebhookEnvelope,
    WebhookListResponse,
    WebhookResponse,
    WebhookTriggerResponse,
)

__all__ = [
    "CreatePipelineRequest",
    "CreateWebhookRequest",
    "PipelineEnvelope",
    "PipelineListResponse",
    "PipelineResponse",
    "PipelineSummaryResponse",
    "PipelineValidationResponse",
    "SubscribeRequest",
    "SubscribeResponse",
    "SubscriptionRef",
    "SuccessResponse",
    "UnsubscribeRequest",
    "UpdatePipelineRequest",
    "VapidKeyResponse",
    "WebhookDataResponse",
    "WebhookEnvelope",
    "WebhookListResponse",
    "WebhookResponse",
    "WebhookTriggerResponse",
]
