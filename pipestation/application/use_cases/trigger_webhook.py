"""TriggerWebhookUseCase - 外部 HTTP 调用 → 推送通知

状态机：RESOLVE → AUTHORIZE → RECORD → BUILD → DISPATCH

- RESOLVE: 按 token 查找激活的 Webhook，找不到（或未激活）→ NotFoundError
- AUTHORIZE: 入站方法与配置方法大小写不敏感比较，不一致 → ForbiddenError，不修改任何状态
- RECORD: 一条原子 UPDATE 写入 last_request、last_triggered_at，trigger_count + 1
- BUILD: 组装通知负载
- DISPATCH: 紧凑 JSON 的 UTF-8 字节数小于阈值时发送完整负载，否则发送指针负载

RECORD 成功后总是返回 {success: true, triggered: true}，推送结果不影响调用方
"""

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Final

from pipestation.domain.entities.webhook import Webhook
from pipestation.domain.exceptions import ForbiddenError, NotFoundError
from pipestation.domain.ports.pipeline_repository import PipelineRepository
from pipestation.domain.ports.webhook_repository import WebhookRepository

logger = logging.getLogger(__name__)

PAYLOAD_SIZE_LIMIT: Final = 3800
LARGE_PAYLOAD_MESSAGE: Final = "Webhook triggered - fetch data from server"

Notifier = Callable[[str, dict[str, Any]], Awaitable[Any]]


@dataclass
class TriggerWebhookInput:
    """入站请求（由路由原样转交）"""

    token: str
    method: str
    body: Any = None
    query: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, Any] = field(default_factory=dict)

    def request_data(self) -> dict[str, Any]:
        return {"body": self.body, "query": self.query, "headers": self.headers}


@dataclass(frozen=True)
class TriggerWebhookResult:
    success: bool = True
    triggered: bool = True

    def to_dict(self) -> dict[str, bool]:
        return {"success": self.success, "triggered": self.triggered}


def serialized_size(payload: dict[str, Any]) -> int:
    """负载序列化为紧凑 JSON 后的 UTF-8 字节数"""
    return len(json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))


def build_notification_payload(
    webhook: Webhook, pipeline_name: str | None, data: Any, timestamp: str
) -> dict[str, Any]:
    return {
        "type": "webhook",
        "webhookId": webhook.id,
        "pipelineId": webhook.pipeline_id,
        "pipelineName": pipeline_name,
        "data": data,
        "timestamp": timestamp,
    }


def choose_dispatch_payload(
    payload: dict[str, Any], limit: int = PAYLOAD_SIZE_LIMIT
) -> dict[str, Any]:
    """小于 limit 字节时原样发送，否则换成让客户端自行拉取数据的指针负载"""
    if serialized_size(payload) < limit:
        return payload
    return {
        "type": "webhook_large",
        "webhookId": payload["webhookId"],
        "message": LARGE_PAYLOAD_MESSAGE,
    }


class TriggerWebhookUseCase:
    """Webhook 触发用例

    依赖：
    - WebhookRepository / PipelineRepository: 仓储接口
    - notifier: (user_id, payload) → 推送扇出（通常是 PushFanoutService.send_to_user）
    """

    def __init__(
        self,
        webhook_repository: WebhookRepository,
        pipeline_repository: PipelineRepository,
        notifier: Notifier,
        payload_limit: int = PAYLOAD_SIZE_LIMIT,
    ):
        self.webhook_repository = webhook_repository
        self.pipeline_repository = pipeline_repository
        self.notifier = notifier
        self.payload_limit = payload_limit

    async def execute(self, input_data: TriggerWebhookInput) -> TriggerWebhookResult:
        """抛出：NotFoundError / ForbiddenError（推送失败不抛出）"""
        # 1. RESOLVE
        webhook = await self.webhook_repository.find_active_by_token(input_data.token)
        if webhook is None:
            raise NotFoundError("Webhook", input_data.token)

        # 2. AUTHORIZE
        if not webhook.accepts(input_data.method):
            logger.warning(
                "Webhook %s rejected method %s (expects %s)",
                webhook.id,
                input_data.method,
                webhook.method,
            )
            raise ForbiddenError("Method not allowed")

        # 3. RECORD
        now = datetime.now(UTC)
        timestamp = now.isoformat()
        data = input_data.request_data()
        await self.webhook_repository.record_trigger(
            webhook.id, {"data": data, "timestamp": timestamp}, now
        )
        logger.info("Webhook triggered: id=%s pipeline=%s", webhook.id, webhook.pipeline_id)

        # 4. BUILD
        pipeline_name = await self.pipeline_repository.find_title(webhook.pipeline_id)
        payload = build_notification_payload(webhook, pipeline_name, data, timestamp)

        # 5. DISPATCH
        message = choose_dispatch_payload(payload, self.payload_limit)
        if message is not payload:
            logger.info(
                "Webhook %s payload exceeds %d bytes, sending pointer",
                webhook.id,
                self.payload_limit,
            )

        try:
            await self.notifier(webhook.user_id, message)
        except Exception:
            logger.exception("Push fan-out failed for webhook %s", webhook.id)

        return TriggerWebhookResult()
