"""PushTransport Port - 推送消息的加密与投递

职责：
- 给定订阅（endpoint + p256dh + auth）与服务凭证，加密并投递任意 JSON 负载
- 投递失败时抛出 PushDeliveryError，并区分永久拒绝（404/410）与临时失败
"""

from typing import Any, Final, Protocol

from pipestation.domain.entities.push_subscription import PushSubscription

PERMANENT_STATUS_CODES: Final = frozenset({404, 410})


class PushDeliveryError(Exception):
    """推送投递失败

    属性：
        status_code: 推送服务返回的 HTTP 状态码（网络错误、超时时为 None）
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_permanent(self) -> bool:
        """推送服务声明订阅已失效（gone / not found）"""
        return self.status_code in PERMANENT_STATUS_CODES


class PushTransport(Protocol):
    async def send(self, subscription: PushSubscription, payload: dict[str, Any]) -> None:
        """抛出：PushDeliveryError"""
        ...
