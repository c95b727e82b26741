"""TriggerWebhookUseCase 单元测试

业务场景：外部系统调用 /wh/{token}，记录请求并向流水线所有者推送通知

测试覆盖：
- 计数：同一 token 触发两次，trigger_count 恰好 +2，last_request 为第二次的请求
- 方法不匹配：ForbiddenError，状态不变，不推送
- token 不存在 / Webhook 未激活：NotFoundError
- 负载大小分支：3799 字节发送完整负载，3800 字节及以上发送指针负载
- 推送失败不影响触发结果
"""

import logging
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy import update

from pipestation.application.use_cases.trigger_webhook import (
    LARGE_PAYLOAD_MESSAGE,
    PAYLOAD_SIZE_LIMIT,
    TriggerWebhookInput,
    TriggerWebhookUseCase,
    build_notification_payload,
    choose_dispatch_payload,
    serialized_size,
)
from pipestation.domain.entities import Pipeline, PipelineDefinition, Webhook
from pipestation.domain.exceptions import ForbiddenError, NotFoundError
from pipestation.infrastructure.database.models import PipelineModel
from pipestation.infrastructure.database.repositories.pipeline_repository import (
    SQLAlchemyPipelineRepository,
)
from pipestation.infrastructure.database.repositories.webhook_repository import (
    SQLAlchemyWebhookRepository,
)

TIMESTAMP = "2024-05-01T12:00:00+00:00"


@pytest.fixture
def pipeline_repository(db_session) -> SQLAlchemyPipelineRepository:
    return SQLAlchemyPipelineRepository(db_session)


@pytest.fixture
def webhook_repository(db_session) -> SQLAlchemyWebhookRepository:
    return SQLAlchemyWebhookRepository(db_session)


@pytest_asyncio.fixture
async def pipeline(pipeline_repository, pipeline_payload) -> Pipeline:
    pipeline = Pipeline.create(
        user_id="owner-1",
        title="订单同步",
        definition=PipelineDefinition.from_dict(pipeline_payload),
    )
    await pipeline_repository.save(pipeline)
    return pipeline


@pytest_asyncio.fixture
async def webhook(webhook_repository, pipeline) -> Webhook:
    webhook = Webhook.create(pipeline_id=pipeline.id, user_id=pipeline.user_id, method="POST")
    await webhook_repository.save(webhook)
    return webhook


@pytest.fixture
def notifier() -> AsyncMock:
    return AsyncMock(return_value=[])


@pytest.fixture
def use_case(webhook_repository, pipeline_repository, notifier) -> TriggerWebhookUseCase:
    return TriggerWebhookUseCase(webhook_repository, pipeline_repository, notifier)


def make_input(token: str, method: str = "POST", body=None) -> TriggerWebhookInput:
    return TriggerWebhookInput(
        token=token,
        method=method,
        body=body,
        query={"source": "crm"},
        headers={"content-type": "application/json"},
    )


class TestTriggerWebhook:
    @pytest.mark.asyncio
    async def test_trigger_records_and_notifies(self, use_case, webhook, pipeline, notifier):
        result = await use_case.execute(make_input(webhook.token, body={"order": 1}))

        assert result.to_dict() == {"success": True, "triggered": True}
        notifier.assert_awaited_once()
        user_id, payload = notifier.await_args.args
        assert user_id == "owner-1"
        assert payload["type"] == "webhook"
        assert payload["webhookId"] == webhook.id
        assert payload["pipelineId"] == pipeline.id
        assert payload["pipelineName"] == "订单同步"
        assert payload["data"] == {
            "body": {"order": 1},
            "query": {"source": "crm"},
            "headers": {"content-type": "application/json"},
        }

    @pytest.mark.asyncio
    async def test_two_triggers_count_two_and_keep_latest_request(
        self, use_case, webhook, webhook_repository
    ):
        await use_case.execute(make_input(webhook.token, body={"call": 1}))
        await use_case.execute(make_input(webhook.token, method="post", body={"call": 2}))

        stored = await webhook_repository.get_by_id(webhook.id)
        assert stored.trigger_count == 2
        assert stored.last_request["data"]["body"] == {"call": 2}
        assert stored.last_triggered_at is not None

    @pytest.mark.asyncio
    async def test_method_mismatch_is_forbidden_and_changes_nothing(
        self, use_case, webhook, webhook_repository, notifier
    ):
        with pytest.raises(ForbiddenError):
            await use_case.execute(make_input(webhook.token, method="GET"))

        stored = await webhook_repository.get_by_id(webhook.id)
        assert stored.trigger_count == 0
        assert stored.last_request is None
        assert stored.last_triggered_at is None
        notifier.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_token(self, use_case, notifier):
        with pytest.raises(NotFoundError):
            await use_case.execute(make_input("no-such-token"))

        notifier.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_inactive_webhook_is_not_found(
        self, use_case, webhook_repository, pipeline, notifier
    ):
        webhook = Webhook.create(pipeline_id=pipeline.id, user_id=pipeline.user_id)
        webhook.is_active = False
        await webhook_repository.save(webhook)

        with pytest.raises(NotFoundError):
            await use_case.execute(make_input(webhook.token))

        notifier.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_push_failure_does_not_fail_trigger(
        self, use_case, webhook, webhook_repository, notifier, caplog
    ):
        notifier.side_effect = RuntimeError("push service down")

        with caplog.at_level(logging.ERROR):
            result = await use_case.execute(make_input(webhook.token, body="ping"))

        assert result.success is True
        assert (await webhook_repository.get_by_id(webhook.id)).trigger_count == 1
        assert "Push fan-out failed" in caplog.text

    @pytest.mark.asyncio
    async def test_large_body_sends_pointer_but_records_full_request(
        self, use_case, webhook, webhook_repository, notifier
    ):
        body = {"blob": "x" * 5000}

        await use_case.execute(make_input(webhook.token, body=body))

        _, payload = notifier.await_args.args
        assert payload == {
            "type": "webhook_large",
            "webhookId": webhook.id,
            "message": LARGE_PAYLOAD_MESSAGE,
        }
        stored = await webhook_repository.get_by_id(webhook.id)
        assert stored.last_request["data"]["body"] == body

    @pytest.mark.asyncio
    async def test_missing_pipeline_gives_null_name(self, notifier):
        webhook = Webhook.create(pipeline_id="gone", user_id="owner-1")
        webhooks = AsyncMock()
        webhooks.find_active_by_token.return_value = webhook
        pipelines = AsyncMock()
        pipelines.find_title.return_value = None

        await TriggerWebhookUseCase(webhooks, pipelines, notifier).execute(
            make_input(webhook.token)
        )

        webhooks.record_trigger.assert_awaited_once()
        _, payload = notifier.await_args.args
        assert payload["pipelineName"] is None

    @pytest.mark.asyncio
    async def test_unparseable_stored_definition_still_notifies(
        self, use_case, webhook, pipeline, db_session, webhook_repository, notifier
    ):
        """存储的定义无法解析时，触发仍然成功并带上流水线标题"""
        await db_session.execute(
            update(PipelineModel)
            .where(PipelineModel.id == pipeline.id)
            .values(definition={"trigger": {"type": "quantum"}, "nodes": [], "pipes": []})
        )
        await db_session.commit()

        result = await use_case.execute(make_input(webhook.token, body={"order": 1}))

        assert result.to_dict() == {"success": True, "triggered": True}
        assert (await webhook_repository.get_by_id(webhook.id)).trigger_count == 1
        _, payload = notifier.await_args.args
        assert payload["pipelineName"] == "订单同步"


class TestPayloadSizeBranching:
    """紧凑 JSON 的 UTF-8 字节数与 3800 比较"""

    @pytest.fixture
    def webhook(self) -> Webhook:
        return Webhook.create(pipeline_id="p1", user_id="owner-1")

    def padded_payload(self, webhook: Webhook, size: int, filler: str = "x") -> dict:
        payload = build_notification_payload(webhook, "订单同步", "", TIMESTAMP)
        missing = size - serialized_size(payload)
        filler_bytes = len(filler.encode("utf-8"))
        payload["data"] = filler * (missing // filler_bytes)
        assert serialized_size(payload) == size
        return payload

    def test_limit_constant(self):
        assert PAYLOAD_SIZE_LIMIT == 3800

    def test_3799_bytes_sends_full_payload(self, webhook):
        payload = self.padded_payload(webhook, 3799)

        assert choose_dispatch_payload(payload) is payload

    @pytest.mark.parametrize("size", [3800, 3801, 10000])
    def test_3800_bytes_or_more_sends_pointer(self, webhook, size):
        payload = self.padded_payload(webhook, size)

        assert choose_dispatch_payload(payload) == {
            "type": "webhook_large",
            "webhookId": webhook.id,
            "message": LARGE_PAYLOAD_MESSAGE,
        }

    def test_size_counts_bytes_not_characters(self, webhook):
        """中文字符按 3 个 UTF-8 字节计"""
        payload = build_notification_payload(webhook, None, "中" * 1300, TIMESTAMP)

        assert len(str(payload)) < PAYLOAD_SIZE_LIMIT
        assert serialized_size(payload) >= PAYLOAD_SIZE_LIMIT
        assert choose_dispatch_payload(payload)["type"] == "webhook_large"

    def test_custom_limit(self, webhook):
        payload = build_notification_payload(webhook, None, "hello", TIMESTAMP)

        assert choose_dispatch_payload(payload, limit=10)["type"] == "webhook_large"
