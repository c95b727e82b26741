"""PushSubscription 实体 - 浏览器推送订阅

业务定义：
- (user_id, endpoint) 唯一；重复订阅时刷新密钥
- 推送被永久拒绝（404/410）时自动删除（自愈）
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from pipestation.domain.exceptions import ValidationError


@dataclass
class PushSubscription:
    """PushSubscription 实体

    属性说明：
    - endpoint: 推送服务地址
    - p256dh_key / auth_key: 订阅方提供的加密公钥与认证密钥
    - user_agent: 订阅时的 User-Agent（可选）
    - last_used_at: 最近一次成功投递或刷新时间
    """

    id: str
    user_id: str
    endpoint: str
    p256dh_key: str
    auth_key: str
    user_agent: str | None = None
    last_used_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        user_id: str,
        endpoint: str,
        p256dh_key: str,
        auth_key: str,
        user_agent: str | None = None,
    ) -> "PushSubscription":
        errors = []
        if not endpoint or not endpoint.strip():
            errors.append("endpoint is required")
        if not p256dh_key:
            errors.append("keys.p256dh is required")
        if not auth_key:
            errors.append("keys.auth is required")
        if errors:
            raise ValidationError(errors)

        now = datetime.now(UTC)
        return cls(
            id=str(uuid4()),
            user_id=user_id,
            endpoint=endpoint.strip(),
            p256dh_key=p256dh_key,
            auth_key=auth_key,
            user_agent=user_agent,
            last_used_at=now,
            created_at=now,
        )

    def to_subscription_info(self) -> dict:
        """Web Push 库使用的订阅信息结构"""
        return {
            "endpoint": self.endpoint,
            "keys": {"p256dh": self.p256dh_key, "auth": self.auth_key},
        }
