"""TriggerType / HttpMethod 枚举"""

from enum import Enum


class TriggerType(str, Enum):
    """流水线触发方式"""

    MANUAL = "manual"
    WEBHOOK = "webhook"
    SCHEDULE = "schedule"


class HttpMethod(str, Enum):
    """可路由到 Webhook 的 HTTP 方法"""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)
