"""Create pipelines, webhooks and push_subscriptions tables

Revision ID: 3f6c1d2a9b10
Revises:
Create Date: 2026-10-17 10:12:40.118204

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f6c1d2a9b10"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the pipeline definition, webhook and push subscription tables."""

    op.create_table(
        "pipelines",
        sa.Column("id", sa.String(length=36), nullable=False, comment="Pipeline ID（UUID）"),
        sa.Column("user_id", sa.String(length=36), nullable=False, comment="所有者用户 ID"),
        sa.Column("title", sa.String(length=255), nullable=False, comment="标题"),
        sa.Column("summary", sa.Text(), nullable=True, comment="说明"),
        sa.Column(
            "definition", sa.JSON(), nullable=False, comment="定义快照 {trigger, nodes, pipes}"
        ),
        sa.Column(
            "is_public",
            sa.Boolean(),
            nullable=False,
            server_default=sa.sql.expression.false(),
            comment="是否公开",
        ),
        sa.Column("share_token", sa.String(length=32), nullable=True, comment="分享 token"),
        sa.Column("cloned_from", sa.String(length=36), nullable=True, comment="克隆来源 Pipeline ID"),
        sa.Column(
            "clone_count", sa.Integer(), nullable=False, server_default="0", comment="被克隆次数"
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, comment="创建时间"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, comment="更新时间"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("share_token"),
    )
    op.create_index("idx_pipelines_user_updated", "pipelines", ["user_id", "updated_at"])

    op.create_table(
        "webhooks",
        sa.Column("id", sa.String(length=36), nullable=False, comment="Webhook ID（UUID）"),
        sa.Column("pipeline_id", sa.String(length=36), nullable=False, comment="所属 Pipeline ID"),
        sa.Column("user_id", sa.String(length=36), nullable=False, comment="所有者用户 ID"),
        sa.Column("token", sa.String(length=64), nullable=False, comment="调用 token"),
        sa.Column(
            "method", sa.String(length=10), nullable=False, server_default="POST", comment="HTTP 方法"
        ),
        sa.Column(
            "is_active",
            sa.Boolean(),
            nullable=False,
            server_default=sa.sql.expression.true(),
            comment="是否激活",
        ),
        sa.Column("last_request", sa.JSON(), nullable=True, comment="最近一次触发的请求快照"),
        sa.Column(
            "last_triggered_at", sa.DateTime(timezone=True), nullable=True, comment="最近触发时间"
        ),
        sa.Column(
            "trigger_count", sa.Integer(), nullable=False, server_default="0", comment="触发次数"
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, comment="创建时间"),
        sa.ForeignKeyConstraint(["pipeline_id"], ["pipelines.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token"),
    )
    op.create_index("idx_webhooks_pipeline_id", "webhooks", ["pipeline_id"])

    op.create_table(
        "push_subscriptions",
        sa.Column("id", sa.String(length=36), nullable=False, comment="订阅 ID（UUID）"),
        sa.Column("user_id", sa.String(length=36), nullable=False, comment="用户 ID"),
        sa.Column("endpoint", sa.String(length=1024), nullable=False, comment="推送服务地址"),
        sa.Column("p256dh_key", sa.String(length=255), nullable=False, comment="p256dh 公钥"),
        sa.Column("auth_key", sa.String(length=255), nullable=False, comment="auth 密钥"),
        sa.Column("user_agent", sa.Text(), nullable=True, comment="User-Agent"),
        sa.Column(
            "last_used_at", sa.DateTime(timezone=True), nullable=True, comment="最近使用时间"
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, comment="创建时间"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "endpoint", name="uq_push_subscriptions_user_endpoint"),
    )
    op.create_index("idx_push_subscriptions_user_id", "push_subscriptions", ["user_id"])


def downgrade() -> None:
    op.drop_index("idx_push_subscriptions_user_id", table_name="push_subscriptions")
    op.drop_table("push_subscriptions")
    op.drop_index("idx_webhooks_pipeline_id", table_name="webhooks")
    op.drop_table("webhooks")
    op.drop_index("idx_pipelines_user_updated", table_name="pipelines")
    op.drop_table("pipelines")
