"""Web Push 投递适配器

职责：
- 使用订阅的 p256dh / auth 密钥按 RFC 8291（aes128gcm）加密负载（pywebpush）
- 使用 VAPID 私钥为推送服务签名（py_vapid）
- 通过 httpx 把密文 POST 到订阅的 endpoint

异常：
    PushDeliveryError: 加密失败、网络错误、超时（status_code 为 None）
    或推送服务返回 4xx/5xx（携带 status_code，404/410 表示订阅已失效）
"""

import json
import logging
import time
from typing import Any
from urllib.parse import urlparse

import httpx
from py_vapid import Vapid02
from pywebpush import WebPusher

from pipestation.domain.entities.push_subscription import PushSubscription
from pipestation.domain.ports.push_transport import PushDeliveryError

logger = logging.getLogger(__name__)

CONTENT_ENCODING = "aes128gcm"
VAPID_CLAIM_TTL_SECONDS = 12 * 60 * 60


class WebPushTransport:
    """Web Push 实现（PushTransport 端口）"""

    def __init__(
        self,
        *,
        vapid_subject: str,
        vapid_private_key: str,
        ttl: int = 86400,
        timeout: float = 10.0,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """初始化

        Args:
            vapid_subject: VAPID sub 声明（mailto: 或 https: URL）
            vapid_private_key: VAPID 私钥（URL-safe base64 原始私钥或 DER）
            ttl: 推送服务保留消息的秒数
            timeout: 单次请求超时时间（秒）
            http_transport: 可选的 httpx 传输层（测试时注入 MockTransport）
        """
        self.vapid_subject = vapid_subject
        self.vapid_private_key = vapid_private_key
        self.ttl = ttl
        self.timeout = timeout
        self.http_transport = http_transport
        self._vapid: Vapid02 | None = None

    def _signer(self) -> Vapid02:
        if self._vapid is None:
            if not self.vapid_private_key:
                raise PushDeliveryError("VAPID private key is not configured")
            self._vapid = Vapid02.from_string(private_key=self.vapid_private_key)
        return self._vapid

    def vapid_headers(self, endpoint: str) -> dict[str, str]:
        """按 endpoint 的 origin 生成 VAPID Authorization 头"""
        parsed = urlparse(endpoint)
        claims = {
            "sub": self.vapid_subject,
            "aud": f"{parsed.scheme}://{parsed.netloc}",
            "exp": int(time.time()) + VAPID_CLAIM_TTL_SECONDS,
        }
        return self._signer().sign(claims)

    def encrypt(self, subscription: PushSubscription, payload: dict[str, Any]) -> bytes:
        data = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        try:
            encoded = WebPusher(subscription.to_subscription_info()).encode(
                data, content_encoding=CONTENT_ENCODING
            )
        except Exception as exc:
            raise PushDeliveryError(f"Failed to encrypt push payload: {exc}") from exc
        return encoded["body"]

    async def send(self, subscription: PushSubscription, payload: dict[str, Any]) -> None:
        body = self.encrypt(subscription, payload)
        headers = {
            "TTL": str(self.ttl),
            "Content-Encoding": CONTENT_ENCODING,
            "Content-Type": "application/octet-stream",
            **self.vapid_headers(subscription.endpoint),
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.http_transport
            ) as client:
                response = await client.post(subscription.endpoint, content=body, headers=headers)
                response.raise_for_status()

        except httpx.HTTPStatusError as e:
            raise PushDeliveryError(
                f"Push service responded {e.response.status_code}: {e.response.text[:200]}",
                status_code=e.response.status_code,
            ) from e

        except httpx.TimeoutException as e:
            raise PushDeliveryError(f"Push request timeout after {self.timeout}s") from e

        except httpx.HTTPError as e:
            raise PushDeliveryError(f"Push request failed: {e}") from e

        logger.debug("Push delivered to subscription %s", subscription.id)
