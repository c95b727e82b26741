"""Domain Ports - 领域层定义、基础设施层实现的接口"""

from pipestation.domain.ports.pipeline_repository import PipelineRepository
from pipestation.domain.ports.push_subscription_repository import (
    PushSubscriptionRepository,
    PushSubscriptionRepositoryProvider,
)
from pipestation.domain.ports.push_transport import PushDeliveryError, PushTransport
from pipestation.domain.ports.webhook_repository import WebhookRepository

__all__ = [
    "PipelineRepository",
    "PushDeliveryError",
    "PushSubscriptionRepository",
    "PushSubscriptionRepositoryProvider",
    "PushTransport",
    "WebhookRepository",
]
