"""测试：SQLAlchemy Repository 实现

测试策略：
1. 每个测试使用独立的 SQLite 文件数据库（conftest.db_engine）
2. 验证实体 ⇄ ORM 模型的转换不丢字段
3. 验证计数器使用原子 UPDATE（并发会话下计数不丢失）
4. 验证外键级联与唯一约束
"""

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError

from pipestation.domain.entities import Pipeline, PipelineDefinition, PushSubscription, Webhook
from pipestation.domain.exceptions import NotFoundError
from pipestation.infrastructure.database.repositories.pipeline_repository import (
    SQLAlchemyPipelineRepository,
)
from pipestation.infrastructure.database.repositories.push_subscription_repository import (
    SQLAlchemyPushSubscriptionRepository,
)
from pipestation.infrastructure.database.repositories.webhook_repository import (
    SQLAlchemyWebhookRepository,
)


@pytest.fixture
def pipeline_repo(db_session) -> SQLAlchemyPipelineRepository:
    return SQLAlchemyPipelineRepository(db_session)


@pytest.fixture
def webhook_repo(db_session) -> SQLAlchemyWebhookRepository:
    return SQLAlchemyWebhookRepository(db_session)


@pytest.fixture
def subscription_repo(db_session) -> SQLAlchemyPushSubscriptionRepository:
    return SQLAlchemyPushSubscriptionRepository(db_session)


@pytest.fixture
def make_pipeline(pipeline_payload):
    def _make(user_id: str = "user-1", title: str = "订单同步", is_public: bool = False):
        return Pipeline.create(
            user_id=user_id,
            title=title,
            definition=PipelineDefinition.from_dict(pipeline_payload),
            is_public=is_public,
        )

    return _make


@pytest_asyncio.fixture
async def saved_pipeline(pipeline_repo, make_pipeline) -> Pipeline:
    pipeline = make_pipeline()
    await pipeline_repo.save(pipeline)
    return pipeline


# ==================== Pipeline ====================


class TestPipelineRepository:
    @pytest.mark.asyncio
    async def test_save_and_load_round_trip(self, pipeline_repo, saved_pipeline):
        loaded = await pipeline_repo.get_by_id(saved_pipeline.id)

        assert loaded.title == saved_pipeline.title
        assert loaded.summary is None
        assert loaded.definition == saved_pipeline.definition
        assert loaded.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_get_missing_raises(self, pipeline_repo):
        with pytest.raises(NotFoundError) as exc_info:
            await pipeline_repo.get_by_id("missing")

        assert exc_info.value.status_code == 404
        assert await pipeline_repo.find_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_find_title(self, pipeline_repo, saved_pipeline):
        assert await pipeline_repo.find_title(saved_pipeline.id) == saved_pipeline.title
        assert await pipeline_repo.find_title("missing") is None

    @pytest.mark.asyncio
    async def test_save_updates_existing_row(self, pipeline_repo, saved_pipeline):
        saved_pipeline.apply_update(title="新标题", is_public=True)
        await pipeline_repo.save(saved_pipeline)

        loaded = await pipeline_repo.get_by_id(saved_pipeline.id)
        assert loaded.title == "新标题"
        assert loaded.is_public is True
        assert loaded.share_token == saved_pipeline.share_token

    @pytest.mark.asyncio
    async def test_find_public_by_share_token(self, pipeline_repo, make_pipeline):
        public = make_pipeline(is_public=True)
        hidden = make_pipeline(is_public=True)
        hidden.apply_update(is_public=False)
        await pipeline_repo.save(public)
        await pipeline_repo.save(hidden)

        found = await pipeline_repo.find_public_by_share_token(public.share_token)

        assert found.id == public.id
        assert await pipeline_repo.find_public_by_share_token(hidden.share_token) is None

    @pytest.mark.asyncio
    async def test_list_by_user_most_recent_first(self, pipeline_repo, make_pipeline):
        first = make_pipeline(title="一")
        second = make_pipeline(title="二")
        foreign = make_pipeline(user_id="user-2")
        for pipeline in (first, second, foreign):
            await pipeline_repo.save(pipeline)
        first.apply_update(summary="更新过")
        await pipeline_repo.save(first)

        pipelines = await pipeline_repo.list_by_user("user-1")

        assert [p.id for p in pipelines] == [first.id, second.id]

    @pytest.mark.asyncio
    async def test_increment_clone_count(self, pipeline_repo, saved_pipeline):
        await pipeline_repo.increment_clone_count(saved_pipeline.id)
        await pipeline_repo.increment_clone_count(saved_pipeline.id)

        assert (await pipeline_repo.get_by_id(saved_pipeline.id)).clone_count == 2

    @pytest.mark.asyncio
    async def test_save_does_not_overwrite_clone_count(self, pipeline_repo, saved_pipeline):
        await pipeline_repo.increment_clone_count(saved_pipeline.id)
        saved_pipeline.apply_update(title="stale copy")
        await pipeline_repo.save(saved_pipeline)

        assert (await pipeline_repo.get_by_id(saved_pipeline.id)).clone_count == 1

    @pytest.mark.asyncio
    async def test_delete_cascades_to_webhooks(self, pipeline_repo, webhook_repo, saved_pipeline):
        webhook = Webhook.create(pipeline_id=saved_pipeline.id, user_id="user-1")
        await webhook_repo.save(webhook)

        await pipeline_repo.delete(saved_pipeline.id)

        assert await pipeline_repo.find_by_id(saved_pipeline.id) is None
        assert await webhook_repo.find_active_by_token(webhook.token) is None


# ==================== Webhook ====================


class TestWebhookRepository:
    @pytest.mark.asyncio
    async def test_save_and_find_by_token(self, webhook_repo, saved_pipeline):
        webhook = Webhook.create(pipeline_id=saved_pipeline.id, user_id="user-1", method="PUT")
        await webhook_repo.save(webhook)

        found = await webhook_repo.find_active_by_token(webhook.token)

        assert found.id == webhook.id
        assert found.method == "PUT"
        assert found.trigger_count == 0

    @pytest.mark.asyncio
    async def test_webhook_requires_existing_pipeline(self, webhook_repo):
        with pytest.raises(IntegrityError):
            await webhook_repo.save(Webhook.create(pipeline_id="missing", user_id="user-1"))

    @pytest.mark.asyncio
    async def test_concurrent_triggers_do_not_lose_counts(self, session_factory, saved_pipeline):
        """多个会话同时 record_trigger，计数等于触发次数"""
        async with session_factory() as session:
            webhook = Webhook.create(pipeline_id=saved_pipeline.id, user_id="user-1")
            await SQLAlchemyWebhookRepository(session).save(webhook)

        async def trigger(call: int) -> None:
            async with session_factory() as session:
                await SQLAlchemyWebhookRepository(session).record_trigger(
                    webhook.id,
                    {"data": {"body": {"call": call}}, "timestamp": f"t{call}"},
                    saved_pipeline.created_at,
                )

        await asyncio.gather(*(trigger(call) for call in range(5)))

        async with session_factory() as session:
            stored = await SQLAlchemyWebhookRepository(session).get_by_id(webhook.id)
        assert stored.trigger_count == 5
        assert stored.last_request["data"]["body"]["call"] in range(5)
        assert stored.last_triggered_at is not None

    @pytest.mark.asyncio
    async def test_list_and_delete_by_pipeline(self, webhook_repo, saved_pipeline):
        for method in ("GET", "POST"):
            await webhook_repo.save(
                Webhook.create(pipeline_id=saved_pipeline.id, user_id="user-1", method=method)
            )

        assert len(await webhook_repo.list_by_pipeline(saved_pipeline.id)) == 2
        assert await webhook_repo.delete_by_pipeline(saved_pipeline.id) == 2
        assert await webhook_repo.list_by_pipeline(saved_pipeline.id) == []

    @pytest.mark.asyncio
    async def test_get_missing_webhook(self, webhook_repo):
        with pytest.raises(NotFoundError):
            await webhook_repo.get_by_id("missing")


# ==================== PushSubscription ====================


def make_subscription(user_id: str = "user-1", endpoint: str = "https://push.example.com/a"):
    return PushSubscription.create(
        user_id=user_id, endpoint=endpoint, p256dh_key="pk-1", auth_key="ak-1"
    )


class TestPushSubscriptionRepository:
    @pytest.mark.asyncio
    async def test_upsert_refreshes_keys_and_keeps_id(self, subscription_repo):
        first = await subscription_repo.upsert(make_subscription())
        again = make_subscription()
        again.p256dh_key = "pk-2"
        again.auth_key = "ak-2"

        second = await subscription_repo.upsert(again)

        assert second.id == first.id
        assert second.p256dh_key == "pk-2"
        assert second.auth_key == "ak-2"
        assert len(await subscription_repo.list_by_user("user-1")) == 1

    @pytest.mark.asyncio
    async def test_same_endpoint_for_different_users(self, subscription_repo):
        await subscription_repo.upsert(make_subscription("user-1"))
        await subscription_repo.upsert(make_subscription("user-2"))

        assert len(await subscription_repo.list_by_user("user-1")) == 1
        assert len(await subscription_repo.list_by_user("user-2")) == 1

    @pytest.mark.asyncio
    async def test_delete_by_endpoint(self, subscription_repo):
        endpoint = "https://push.example.com/a"
        await subscription_repo.upsert(make_subscription(endpoint=endpoint))

        assert await subscription_repo.delete_by_endpoint("user-2", endpoint) == 0
        assert await subscription_repo.delete_by_endpoint("user-1", endpoint) == 1
        assert await subscription_repo.list_by_user("user-1") == []

    @pytest.mark.asyncio
    async def test_touch_and_delete(self, subscription_repo):
        stored = await subscription_repo.upsert(make_subscription())

        await subscription_repo.touch(stored.id)
        await subscription_repo.delete(stored.id)

        assert await subscription_repo.list_by_user("user-1") == []
