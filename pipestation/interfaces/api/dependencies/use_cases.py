"""用例依赖注入

仓库由 ApiContainer 中的工厂按请求会话创建；同一请求内的依赖共享一个 AsyncSession
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pipestation.application.use_cases.clone_pipeline import ClonePipelineUseCase
from pipestation.application.use_cases.create_pipeline import CreatePipelineUseCase
from pipestation.application.use_cases.delete_pipeline import DeletePipelineUseCase
from pipestation.application.use_cases.manage_push_subscriptions import (
    SubscribePushUseCase,
    UnsubscribePushUseCase,
)
from pipestation.application.use_cases.manage_webhooks import (
    CreateWebhookUseCase,
    WebhookQueryUseCase,
)
from pipestation.application.use_cases.query_pipelines import (
    GetPipelineUseCase,
    ListPipelinesUseCase,
    ValidatePipelineUseCase,
)
from pipestation.application.use_cases.trigger_webhook import TriggerWebhookUseCase
from pipestation.application.use_cases.update_pipeline import UpdatePipelineUseCase
from pipestation.config import settings
from pipestation.domain.ports.pipeline_repository import PipelineRepository
from pipestation.domain.ports.push_subscription_repository import PushSubscriptionRepository
from pipestation.domain.ports.webhook_repository import WebhookRepository
from pipestation.infrastructure.database.base import get_session
from pipestation.interfaces.api.container import ApiContainer
from pipestation.interfaces.api.dependencies.container import get_container

# ==================== 仓库 ====================


def get_pipeline_repository(
    session: AsyncSession = Depends(get_session),
    container: ApiContainer = Depends(get_container),
) -> PipelineRepository:
    return container.pipeline_repository(session)


def get_webhook_repository(
    session: AsyncSession = Depends(get_session),
    container: ApiContainer = Depends(get_container),
) -> WebhookRepository:
    return container.webhook_repository(session)


def get_push_subscription_repository(
    session: AsyncSession = Depends(get_session),
    container: ApiContainer = Depends(get_container),
) -> PushSubscriptionRepository:
    return container.push_subscription_repository(session)


# ==================== Pipeline 用例 ====================


def get_create_pipeline_use_case(
    repository: PipelineRepository = Depends(get_pipeline_repository),
) -> CreatePipelineUseCase:
    return CreatePipelineUseCase(repository, share_token_size=settings.share_token_size)


def get_update_pipeline_use_case(
    repository: PipelineRepository = Depends(get_pipeline_repository),
) -> UpdatePipelineUseCase:
    return UpdatePipelineUseCase(repository, share_token_size=settings.share_token_size)


def get_clone_pipeline_use_case(
    repository: PipelineRepository = Depends(get_pipeline_repository),
) -> ClonePipelineUseCase:
    return ClonePipelineUseCase(repository)


def get_delete_pipeline_use_case(
    pipelines: PipelineRepository = Depends(get_pipeline_repository),
    webhooks: WebhookRepository = Depends(get_webhook_repository),
) -> DeletePipelineUseCase:
    return DeletePipelineUseCase(pipelines, webhooks)


def get_list_pipelines_use_case(
    repository: PipelineRepository = Depends(get_pipeline_repository),
) -> ListPipelinesUseCase:
    return ListPipelinesUseCase(repository)


def get_get_pipeline_use_case(
    repository: PipelineRepository = Depends(get_pipeline_repository),
) -> GetPipelineUseCase:
    return GetPipelineUseCase(repository)


def get_validate_pipeline_use_case(
    repository: PipelineRepository = Depends(get_pipeline_repository),
) -> ValidatePipelineUseCase:
    return ValidatePipelineUseCase(repository)


# ==================== Webhook 用例 ====================


def get_create_webhook_use_case(
    pipelines: PipelineRepository = Depends(get_pipeline_repository),
    webhooks: WebhookRepository = Depends(get_webhook_repository),
) -> CreateWebhookUseCase:
    return CreateWebhookUseCase(pipelines, webhooks, token_size=settings.webhook_token_size)


def get_webhook_query_use_case(
    pipelines: PipelineRepository = Depends(get_pipeline_repository),
    webhooks: WebhookRepository = Depends(get_webhook_repository),
) -> WebhookQueryUseCase:
    return WebhookQueryUseCase(pipelines, webhooks)


def get_trigger_webhook_use_case(
    pipelines: PipelineRepository = Depends(get_pipeline_repository),
    webhooks: WebhookRepository = Depends(get_webhook_repository),
    container: ApiContainer = Depends(get_container),
) -> TriggerWebhookUseCase:
    return TriggerWebhookUseCase(
        webhook_repository=webhooks,
        pipeline_repository=pipelines,
        notifier=container.push_fanout.send_to_user,
        payload_limit=settings.webhook_payload_limit,
    )


# ==================== Push 用例 ====================


def get_subscribe_push_use_case(
    repository: PushSubscriptionRepository = Depends(get_push_subscription_repository),
) -> SubscribePushUseCase:
    return SubscribePushUseCase(repository)


def get_unsubscribe_push_use_case(
    repository: PushSubscriptionRepository = Depends(get_push_subscription_repository),
) -> UnsubscribePushUseCase:
    return UnsubscribePushUseCase(repository)
