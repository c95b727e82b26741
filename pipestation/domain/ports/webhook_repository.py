"""WebhookRepository Port - 定义 Webhook 实体的持久化接口"""

from datetime import datetime
from typing import Any, Protocol

from pipestation.domain.entities.webhook import Webhook


class WebhookRepository(Protocol):
    """Webhook 仓储接口

    职责：
    - 定义 Webhook 实体的持久化操作
    - 触发记录（last_request / last_triggered_at / trigger_count）必须是
      一条原子语句，并发触发时计数不能丢失
    """

    async def save(self, webhook: Webhook) -> None: ...

    async def get_by_id(self, webhook_id: str) -> Webhook:
        """抛出：NotFoundError"""
        ...

    async def find_active_by_token(self, token: str) -> Webhook | None:
        """按 token 查找 is_active 为 true 的 Webhook（非激活视为不存在）"""
        ...

    async def list_by_pipeline(self, pipeline_id: str) -> list[Webhook]: ...

    async def record_trigger(
        self, webhook_id: str, last_request: dict[str, Any], triggered_at: datetime
    ) -> None:
        """覆盖 last_request、更新 last_triggered_at，并将 trigger_count + 1

        实现要求：
        - 单条 UPDATE ... SET trigger_count = trigger_count + 1
        """
        ...

    async def delete(self, webhook_id: str) -> None: ...

    async def delete_by_pipeline(self, pipeline_id: str) -> int:
        """删除流水线的所有 Webhook，返回删除数量"""
        ...
