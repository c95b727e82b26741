"""Webhook 实体 - 流水线的外部调用入口

业务定义：
- token 是调用该 Webhook 的唯一公开凭证（不可猜测、全局唯一）
- 一个流水线可以有多个 Webhook（例如不同的 HTTP 方法）
- last_request 只保存最近一次触发的请求快照（覆盖写，不是日志）
- trigger_count 单调递增；计数更新由仓库以单条原子 UPDATE 完成
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Final
from uuid import uuid4

from pipestation.domain.exceptions import ValidationError
from pipestation.domain.services.token_generator import generate_token
from pipestation.domain.value_objects.trigger_type import HttpMethod

WEBHOOK_TOKEN_SIZE: Final = 32


def normalize_method(method: str | None) -> str:
    return (method or "").strip().upper()


@dataclass
class Webhook:
    """Webhook 实体"""

    id: str
    pipeline_id: str
    user_id: str
    token: str
    method: str = HttpMethod.POST.value
    is_active: bool = True
    last_request: dict[str, Any] | None = None
    last_triggered_at: datetime | None = None
    trigger_count: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        pipeline_id: str,
        user_id: str,
        method: str = HttpMethod.POST.value,
        token_size: int = WEBHOOK_TOKEN_SIZE,
    ) -> "Webhook":
        """创建 Webhook（方法统一大写）

        抛出：
            ValidationError: 方法不在 GET/POST/PUT/DELETE/PATCH 中
        """
        normalized = normalize_method(method)
        if normalized not in HttpMethod.values():
            raise ValidationError(
                [f"method must be one of: {', '.join(HttpMethod.values())}"]
            )

        return cls(
            id=str(uuid4()),
            pipeline_id=pipeline_id,
            user_id=user_id,
            token=generate_token(token_size),
            method=normalized,
        )

    def accepts(self, method: str | None) -> bool:
        """入站方法与配置方法大小写不敏感地相等"""
        return normalize_method(method) == normalize_method(self.method)
