"""应用配置模块 - 使用 Pydantic Settings 管理环境变量"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置类"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Pipestation", description="应用名称")
    app_version: str = Field(default="0.1.0", description="应用版本")
    env: Literal["development", "production", "test"] = Field(
        default="development", description="运行环境"
    )
    debug: bool = Field(default=False, description="调试模式")
    log_level: str = Field(default="INFO", description="日志级别")
    log_format: Literal["json", "text"] = Field(default="text", description="日志格式")

    # Server
    host: str = Field(default="0.0.0.0", description="服务器地址")
    port: int = Field(default=3000, description="服务器端口")
    reload: bool = Field(default=False, description="热重载")

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./pipestation.db",
        description="数据库连接 URL",
    )

    # Security
    secret_key: str = Field(
        default="your-secret-key-change-this-in-production",
        description="JWT 密钥",
    )
    algorithm: str = Field(default="HS256", description="JWT 算法")
    access_token_expire_minutes: int = Field(default=60 * 24 * 7, description="访问令牌过期时间（分钟）")

    # CORS
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
        ],
        description="允许的跨域源",
    )

    # Web Push (VAPID)
    vapid_subject: str = Field(default="mailto:admin@example.com", description="VAPID subject")
    vapid_public_key: str = Field(default="", description="VAPID 公钥（URL-safe base64）")
    vapid_private_key: str = Field(default="", description="VAPID 私钥（URL-safe base64 或 PEM）")
    push_ttl: int = Field(default=86400, description="推送消息 TTL（秒）")
    push_timeout: float = Field(default=10.0, description="推送请求超时时间（秒）")

    # Webhook / Sharing
    webhook_payload_limit: int = Field(
        default=3800, description="推送完整 Webhook 负载的字节上限（不含）"
    )
    webhook_token_size: int = Field(default=32, description="Webhook token 长度")
    share_token_size: int = Field(default=10, description="分享 token 长度")


# 全局配置实例
settings = Settings()
