"""JWT Token服务

职责：
1. 创建JWT访问令牌（access token）
2. 解码和验证JWT令牌（sub 声明即调用方的 user_id）

设计原则：
- 使用HS256算法（HMAC with SHA-256）
- 密钥从配置文件读取，生产环境必须更换
- 过期或无效的 token 统一抛出 UnauthorizedError
"""

from datetime import UTC, datetime, timedelta

import jwt

from pipestation.config import settings
from pipestation.domain.exceptions import UnauthorizedError


class JWTService:
    """JWT Token服务（无状态，静态方法）"""

    @staticmethod
    def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
        """创建JWT访问令牌

        Args:
            data: 要编码到token中的数据（至少包含 sub）
            expires_delta: 可选的过期时间间隔，如果不指定则使用配置的默认值

        Returns:
            str: 编码后的JWT token字符串
        """
        to_encode = data.copy()

        now = datetime.now(UTC)
        expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
        to_encode.update({"exp": expire, "iat": now})

        return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)

    @staticmethod
    def decode_token(token: str) -> dict:
        """解码JWT令牌

        Raises:
            UnauthorizedError: 当token过期、无效或被篡改时抛出
        """
        try:
            return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise UnauthorizedError("Token已过期") from exc
        except jwt.PyJWTError as exc:
            raise UnauthorizedError("Token无效") from exc
