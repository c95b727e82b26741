"""请求之间共享的依赖

仓储以"会话 → 仓储"的工厂形式保存，每个请求用自己的会话构造；
PushFanoutService 全局只有一个，由 main._build_container 创建。
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from pipestation.application.services.push_fanout import PushFanoutService
from pipestation.domain.ports.pipeline_repository import PipelineRepository
from pipestation.domain.ports.push_subscription_repository import PushSubscriptionRepository
from pipestation.domain.ports.webhook_repository import WebhookRepository


@dataclass(frozen=True, slots=True)
class ApiContainer:
    pipeline_repository: Callable[[AsyncSession], PipelineRepository]
    webhook_repository: Callable[[AsyncSession], WebhookRepository]
    push_subscription_repository: Callable[[AsyncSession], PushSubscriptionRepository]

    push_fanout: PushFanoutService
