"""Webhook 管理与推送订阅用例单元测试"""

from unittest.mock import AsyncMock

import pytest

from pipestation.application.use_cases.manage_push_subscriptions import (
    SubscribePushInput,
    SubscribePushUseCase,
    UnsubscribePushUseCase,
)
from pipestation.application.use_cases.manage_webhooks import (
    CreateWebhookInput,
    CreateWebhookUseCase,
    WebhookQueryUseCase,
)
from pipestation.domain.entities import Pipeline, PipelineDefinition, Webhook
from pipestation.domain.exceptions import ForbiddenError, NotFoundError, ValidationError


@pytest.fixture
def pipeline(pipeline_payload) -> Pipeline:
    return Pipeline.create(
        user_id="user-1",
        title="订单同步",
        definition=PipelineDefinition.from_dict(pipeline_payload),
    )


@pytest.fixture
def pipelines(pipeline) -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_id.return_value = pipeline
    return repo


@pytest.fixture
def webhook(pipeline) -> Webhook:
    return Webhook.create(pipeline_id=pipeline.id, user_id="user-1", method="GET")


@pytest.fixture
def webhooks(webhook) -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_id.return_value = webhook
    repo.list_by_pipeline.return_value = [webhook]
    return repo


class TestCreateWebhook:
    @pytest.mark.asyncio
    async def test_create_for_own_pipeline(self, pipelines, pipeline):
        webhooks = AsyncMock()

        webhook = await CreateWebhookUseCase(pipelines, webhooks).execute(
            CreateWebhookInput(pipeline_id=pipeline.id, user_id="user-1", method="patch")
        )

        assert webhook.pipeline_id == pipeline.id
        assert webhook.method == "PATCH"
        assert len(webhook.token) == 32
        webhooks.save.assert_awaited_once_with(webhook)

    @pytest.mark.asyncio
    async def test_custom_token_size(self, pipelines, pipeline):
        webhook = await CreateWebhookUseCase(pipelines, AsyncMock(), token_size=48).execute(
            CreateWebhookInput(pipeline_id=pipeline.id, user_id="user-1")
        )

        assert len(webhook.token) == 48

    @pytest.mark.asyncio
    async def test_other_users_pipeline_is_forbidden(self, pipelines, pipeline):
        webhooks = AsyncMock()

        with pytest.raises(ForbiddenError):
            await CreateWebhookUseCase(pipelines, webhooks).execute(
                CreateWebhookInput(pipeline_id=pipeline.id, user_id="user-2")
            )

        webhooks.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_method(self, pipelines, pipeline):
        with pytest.raises(ValidationError):
            await CreateWebhookUseCase(pipelines, AsyncMock()).execute(
                CreateWebhookInput(pipeline_id=pipeline.id, user_id="user-1", method="OPTIONS")
            )


class TestWebhookQuery:
    @pytest.mark.asyncio
    async def test_get_own_webhook(self, pipelines, webhooks, webhook):
        use_case = WebhookQueryUseCase(pipelines, webhooks)

        assert await use_case.get(webhook.id, "user-1") is webhook

    @pytest.mark.asyncio
    async def test_other_users_webhook_looks_missing(self, pipelines, webhooks, webhook):
        use_case = WebhookQueryUseCase(pipelines, webhooks)

        with pytest.raises(NotFoundError):
            await use_case.get(webhook.id, "user-2")

    @pytest.mark.asyncio
    async def test_list_for_pipeline_checks_owner(self, pipelines, webhooks, pipeline, webhook):
        use_case = WebhookQueryUseCase(pipelines, webhooks)

        assert await use_case.list_for_pipeline(pipeline.id, "user-1") == [webhook]
        with pytest.raises(ForbiddenError):
            await use_case.list_for_pipeline(pipeline.id, "user-2")

    @pytest.mark.asyncio
    async def test_delete(self, pipelines, webhooks, webhook):
        await WebhookQueryUseCase(pipelines, webhooks).delete(webhook.id, "user-1")

        webhooks.delete.assert_awaited_once_with(webhook.id)

    @pytest.mark.asyncio
    async def test_delete_other_users_webhook(self, pipelines, webhooks, webhook):
        with pytest.raises(NotFoundError):
            await WebhookQueryUseCase(pipelines, webhooks).delete(webhook.id, "user-2")

        webhooks.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_last_request(self, pipelines, webhooks, webhook):
        use_case = WebhookQueryUseCase(pipelines, webhooks)
        assert await use_case.get_last_request(webhook.id, "user-1") is None

        webhook.last_request = {"data": {"body": "hi"}, "timestamp": "2024-05-01T00:00:00+00:00"}

        assert (await use_case.get_last_request(webhook.id, "user-1"))["data"] == {"body": "hi"}


class TestPushSubscriptions:
    @pytest.mark.asyncio
    async def test_subscribe_upserts(self):
        repo = AsyncMock()
        repo.upsert.side_effect = lambda subscription: subscription

        stored = await SubscribePushUseCase(repo).execute(
            SubscribePushInput(
                user_id="user-1",
                endpoint="https://push.example.com/1",
                p256dh_key="pk",
                auth_key="ak",
                user_agent="Chrome",
            )
        )

        assert stored.user_id == "user-1"
        assert stored.user_agent == "Chrome"
        repo.upsert.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_subscribe_rejects_missing_keys(self):
        repo = AsyncMock()

        with pytest.raises(ValidationError):
            await SubscribePushUseCase(repo).execute(
                SubscribePushInput(
                    user_id="user-1",
                    endpoint="https://push.example.com/1",
                    p256dh_key="",
                    auth_key="",
                )
            )

        repo.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        repo = AsyncMock()
        repo.delete_by_endpoint.return_value = 1

        removed = await UnsubscribePushUseCase(repo).execute("user-1", "https://push.example.com/1")

        assert removed == 1
        repo.delete_by_endpoint.assert_awaited_once_with("user-1", "https://push.example.com/1")
