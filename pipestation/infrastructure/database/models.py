"""ORM 模型 - 数据库表映射

ORM 模型 vs 领域实体：
- ORM 模型：数据库表映射，关注持久化（Infrastructure 层）
- 领域实体：业务逻辑，关注不变式（Domain 层）
- 通过 Assembler 转换：ORM ⇄ Entity

设计原则：
- 使用 SQLAlchemy 2.0 风格（Mapped、mapped_column）
- 主键使用 UUID 字符串（与领域实体一致）
- Webhook 外键使用级联删除（CASCADE）
- 定义快照以 JSON 整体保存
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pipestation.infrastructure.database.base import Base


def utc_now() -> datetime:
    return datetime.now(UTC)


class PipelineModel(Base):
    """Pipeline ORM 模型

    表名：pipelines

    索引：
    - idx_pipelines_user_updated: 按用户列出（最近更新在前）
    - share_token: 唯一（未分享时为 NULL）
    """

    __tablename__ = "pipelines"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="Pipeline ID（UUID）")
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, comment="所有者用户 ID")
    title: Mapped[str] = mapped_column(String(255), nullable=False, comment="标题")
    summary: Mapped[str | None] = mapped_column(Text, nullable=True, comment="说明")
    definition: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, comment="定义快照 {trigger, nodes, pipes}"
    )

    # 分享
    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, comment="是否公开"
    )
    share_token: Mapped[str | None] = mapped_column(
        String(32), nullable=True, unique=True, comment="分享 token"
    )
    cloned_from: Mapped[str | None] = mapped_column(
        String(36), nullable=True, comment="克隆来源 Pipeline ID"
    )
    clone_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, comment="被克隆次数"
    )

    # 时间戳
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, comment="创建时间"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, comment="更新时间"
    )

    webhooks: Mapped[list["WebhookModel"]] = relationship(
        "WebhookModel",
        back_populates="pipeline",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (Index("idx_pipelines_user_updated", "user_id", "updated_at"),)

    def __repr__(self) -> str:
        return f"<PipelineModel(id={self.id}, title={self.title}, user_id={self.user_id})>"


class WebhookModel(Base):
    """Webhook ORM 模型

    表名：webhooks

    字段说明：
    - token: 唯一调用凭证
    - last_request: 最近一次触发的 {data, timestamp}（覆盖写）
    - trigger_count: 触发次数（原子自增）
    """

    __tablename__ = "webhooks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="Webhook ID（UUID）")
    pipeline_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("pipelines.id", ondelete="CASCADE"),
        nullable=False,
        comment="所属 Pipeline ID",
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, comment="所有者用户 ID")
    token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, comment="调用 token")
    method: Mapped[str] = mapped_column(
        String(10), nullable=False, default="POST", comment="HTTP 方法"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, comment="是否激活"
    )
    last_request: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True, comment="最近一次触发的请求快照"
    )
    last_triggered_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, comment="最近触发时间"
    )
    trigger_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, comment="触发次数"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, comment="创建时间"
    )

    pipeline: Mapped["PipelineModel"] = relationship("PipelineModel", back_populates="webhooks")

    __table_args__ = (Index("idx_webhooks_pipeline_id", "pipeline_id"),)

    def __repr__(self) -> str:
        return f"<WebhookModel(id={self.id}, pipeline_id={self.pipeline_id}, method={self.method})>"


class PushSubscriptionModel(Base):
    """PushSubscription ORM 模型

    表名：push_subscriptions

    约束：
    - uq_push_subscriptions_user_endpoint: (user_id, endpoint) 唯一
    """

    __tablename__ = "push_subscriptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="订阅 ID（UUID）")
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, comment="用户 ID")
    endpoint: Mapped[str] = mapped_column(String(1024), nullable=False, comment="推送服务地址")
    p256dh_key: Mapped[str] = mapped_column(String(255), nullable=False, comment="p256dh 公钥")
    auth_key: Mapped[str] = mapped_column(String(255), nullable=False, comment="auth 密钥")
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True, comment="User-Agent")
    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, comment="最近使用时间"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, comment="创建时间"
    )

    __table_args__ = (
        UniqueConstraint("user_id", "endpoint", name="uq_push_subscriptions_user_endpoint"),
        Index("idx_push_subscriptions_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<PushSubscriptionModel(id={self.id}, user_id={self.user_id})>"
