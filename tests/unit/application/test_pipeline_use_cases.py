"""流水线用例单元测试

测试策略：
- 大部分用例使用 AsyncMock 仓库，只验证编排与业务规则
- 克隆计数使用真实的 SQLite 仓库，验证 clone_count 的原子自增
"""

import logging
from unittest.mock import AsyncMock

import pytest

from pipestation.application.use_cases.clone_pipeline import ClonePipelineUseCase
from pipestation.application.use_cases.create_pipeline import (
    CreatePipelineInput,
    CreatePipelineUseCase,
)
from pipestation.application.use_cases.delete_pipeline import DeletePipelineUseCase
from pipestation.application.use_cases.query_pipelines import (
    GetPipelineUseCase,
    ListPipelinesUseCase,
    ValidatePipelineUseCase,
)
from pipestation.application.use_cases.update_pipeline import (
    UpdatePipelineInput,
    UpdatePipelineUseCase,
)
from pipestation.domain.entities import Pipeline, PipelineDefinition
from pipestation.domain.exceptions import ForbiddenError, NotFoundError, ValidationError
from pipestation.infrastructure.database.repositories.pipeline_repository import (
    SQLAlchemyPipelineRepository,
)


@pytest.fixture
def stored_pipeline(pipeline_payload) -> Pipeline:
    """已存储的流水线：nodes = [n1, n2]，pipes = [p1]"""
    return Pipeline.create(
        user_id="user-1",
        title=pipeline_payload["title"],
        definition=PipelineDefinition.from_dict(pipeline_payload),
    )


@pytest.fixture
def repository(stored_pipeline) -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_id.return_value = stored_pipeline
    return repo


# ==================== 创建 ====================


class TestCreatePipeline:
    @pytest.mark.asyncio
    async def test_create_saves_pipeline(self, pipeline_payload):
        repo = AsyncMock()
        use_case = CreatePipelineUseCase(repo)

        pipeline = await use_case.execute(
            CreatePipelineInput(
                user_id="user-1",
                title=pipeline_payload["title"],
                summary=pipeline_payload["summary"],
                trigger=pipeline_payload["trigger"],
                nodes=pipeline_payload["nodes"],
                pipes=pipeline_payload["pipes"],
            )
        )

        repo.save.assert_awaited_once_with(pipeline)
        assert pipeline.user_id == "user-1"
        assert len(pipeline.definition.nodes) == 2
        assert pipeline.share_token is None

    @pytest.mark.asyncio
    async def test_public_pipeline_uses_configured_token_size(self, pipeline_payload):
        use_case = CreatePipelineUseCase(AsyncMock(), share_token_size=16)

        pipeline = await use_case.execute(
            CreatePipelineInput(
                user_id="user-1",
                title="公开流水线",
                trigger=pipeline_payload["trigger"],
                nodes=pipeline_payload["nodes"],
                pipes=pipeline_payload["pipes"],
                is_public=True,
            )
        )

        assert len(pipeline.share_token) == 16

    @pytest.mark.asyncio
    async def test_all_input_problems_reported_together(self):
        repo = AsyncMock()
        use_case = CreatePipelineUseCase(repo)

        with pytest.raises(ValidationError) as exc_info:
            await use_case.execute(
                CreatePipelineInput(user_id="user-1", title="", nodes=[], pipes=None)
            )

        assert exc_info.value.errors == [
            "title is required",
            "trigger is required",
            "pipes must be an array",
        ]
        repo.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dangling_pipe_is_rejected(self, pipeline_payload):
        repo = AsyncMock()
        pipeline_payload["pipes"].append({"id": "p9", "sourceId": "ghost", "targetId": "n2"})

        with pytest.raises(ValidationError) as exc_info:
            await CreatePipelineUseCase(repo).execute(
                CreatePipelineInput(
                    user_id="user-1",
                    title="t",
                    trigger=pipeline_payload["trigger"],
                    nodes=pipeline_payload["nodes"],
                    pipes=pipeline_payload["pipes"],
                )
            )

        assert exc_info.value.errors == ["Pipe p9 references unknown source node: ghost"]
        repo.save.assert_not_awaited()


# ==================== 更新 ====================


class TestUpdatePipeline:
    @pytest.mark.asyncio
    async def test_title_only_update_keeps_nodes(self, repository, stored_pipeline):
        nodes_before = stored_pipeline.definition.nodes

        updated = await UpdatePipelineUseCase(repository).execute(
            UpdatePipelineInput(pipeline_id=stored_pipeline.id, user_id="user-1", title="X")
        )

        assert updated.title == "X"
        assert updated.definition.nodes == nodes_before
        assert [node.id for node in updated.definition.nodes] == ["n1", "n2"]
        repository.save.assert_awaited_once_with(updated)

    @pytest.mark.asyncio
    async def test_nodes_update_keeps_trigger_and_pipes(self, repository, stored_pipeline):
        trigger_before = stored_pipeline.definition.trigger
        pipes_before = stored_pipeline.definition.pipes

        updated = await UpdatePipelineUseCase(repository).execute(
            UpdatePipelineInput(
                pipeline_id=stored_pipeline.id,
                user_id="user-1",
                nodes=[{"id": "c", "type": "sort"}],
            )
        )

        assert [node.id for node in updated.definition.nodes] == ["c"]
        assert updated.definition.trigger == trigger_before
        assert updated.definition.pipes == pipes_before

    @pytest.mark.asyncio
    async def test_supplied_pipes_are_checked_against_nodes(self, repository, stored_pipeline):
        with pytest.raises(ValidationError) as exc_info:
            await UpdatePipelineUseCase(repository).execute(
                UpdatePipelineInput(
                    pipeline_id=stored_pipeline.id,
                    user_id="user-1",
                    pipes=[{"id": "p1", "sourceId": "n1", "targetId": "missing"}],
                )
            )

        assert exc_info.value.errors == ["Pipe p1 references unknown target node: missing"]
        repository.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_parts_are_reported_together(self, repository, stored_pipeline):
        with pytest.raises(ValidationError) as exc_info:
            await UpdatePipelineUseCase(repository).execute(
                UpdatePipelineInput(
                    pipeline_id=stored_pipeline.id,
                    user_id="user-1",
                    trigger={"type": "carrier-pigeon"},
                    nodes="n1",
                )
            )

        assert exc_info.value.errors == [
            "Unknown trigger type: carrier-pigeon",
            "nodes must be an array",
        ]

    @pytest.mark.asyncio
    async def test_publish_assigns_share_token(self, repository, stored_pipeline):
        updated = await UpdatePipelineUseCase(repository).execute(
            UpdatePipelineInput(pipeline_id=stored_pipeline.id, user_id="user-1", is_public=True)
        )

        assert updated.is_public is True
        assert updated.share_token

    @pytest.mark.asyncio
    async def test_other_user_is_forbidden(self, repository, stored_pipeline):
        with pytest.raises(ForbiddenError):
            await UpdatePipelineUseCase(repository).execute(
                UpdatePipelineInput(pipeline_id=stored_pipeline.id, user_id="intruder", title="X")
            )

        repository.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_pipeline(self):
        repo = AsyncMock()
        repo.get_by_id.side_effect = NotFoundError("Pipeline", "nope")

        with pytest.raises(NotFoundError):
            await UpdatePipelineUseCase(repo).execute(
                UpdatePipelineInput(pipeline_id="nope", user_id="user-1", title="X")
            )

    def test_touches_definition(self):
        assert not UpdatePipelineInput(pipeline_id="p", user_id="u", title="x").touches_definition
        assert UpdatePipelineInput(pipeline_id="p", user_id="u", pipes=[]).touches_definition


# ==================== 克隆 ====================


class TestClonePipeline:
    @pytest.mark.asyncio
    async def test_clone_increments_source_count(self, db_session, pipeline_payload):
        """cloneCount=4 的公开流水线被克隆后变为 5"""
        repo = SQLAlchemyPipelineRepository(db_session)
        source = Pipeline.create(
            user_id="owner",
            title="模板",
            definition=PipelineDefinition.from_dict(pipeline_payload),
            is_public=True,
        )
        source.clone_count = 4
        await repo.save(source)

        clone = await ClonePipelineUseCase(repo).execute(source.share_token, "user-2")

        assert clone.cloned_from == source.id
        assert clone.is_public is False
        assert clone.user_id == "user-2"
        assert (await repo.get_by_id(source.id)).clone_count == 5
        assert (await repo.get_by_id(clone.id)).cloned_from == source.id

    @pytest.mark.asyncio
    async def test_non_public_pipeline_cannot_be_cloned(self, db_session, pipeline_payload):
        repo = SQLAlchemyPipelineRepository(db_session)
        source = Pipeline.create(
            user_id="owner",
            title="曾经公开",
            definition=PipelineDefinition.from_dict(pipeline_payload),
            is_public=True,
        )
        source.apply_update(is_public=False)
        await repo.save(source)

        with pytest.raises(NotFoundError):
            await ClonePipelineUseCase(repo).execute(source.share_token, "user-2")

    @pytest.mark.asyncio
    async def test_unknown_token(self):
        repo = AsyncMock()
        repo.find_public_by_share_token.return_value = None

        with pytest.raises(NotFoundError):
            await ClonePipelineUseCase(repo).execute("missing", "user-2")

        repo.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_counter_failure_does_not_fail_clone(self, stored_pipeline, caplog):
        repo = AsyncMock()
        stored_pipeline.apply_update(is_public=True)
        repo.find_public_by_share_token.return_value = stored_pipeline
        repo.increment_clone_count.side_effect = RuntimeError("database is locked")

        with caplog.at_level(logging.WARNING):
            clone = await ClonePipelineUseCase(repo).execute(stored_pipeline.share_token, "u2")

        assert clone.cloned_from == stored_pipeline.id
        repo.save.assert_awaited_once_with(clone)
        assert "Failed to increment clone_count" in caplog.text


# ==================== 删除与查询 ====================


class TestDeletePipeline:
    @pytest.mark.asyncio
    async def test_delete_removes_webhooks_then_pipeline(self, repository, stored_pipeline):
        webhooks = AsyncMock()
        webhooks.delete_by_pipeline.return_value = 2

        await DeletePipelineUseCase(repository, webhooks).execute(stored_pipeline.id, "user-1")

        webhooks.delete_by_pipeline.assert_awaited_once_with(stored_pipeline.id)
        repository.delete.assert_awaited_once_with(stored_pipeline.id)

    @pytest.mark.asyncio
    async def test_delete_by_other_user_is_forbidden(self, repository, stored_pipeline):
        webhooks = AsyncMock()

        with pytest.raises(ForbiddenError):
            await DeletePipelineUseCase(repository, webhooks).execute(stored_pipeline.id, "x")

        repository.delete.assert_not_awaited()
        webhooks.delete_by_pipeline.assert_not_awaited()


class TestQueries:
    @pytest.mark.asyncio
    async def test_list(self, stored_pipeline):
        repo = AsyncMock()
        repo.list_by_user.return_value = [stored_pipeline]

        assert await ListPipelinesUseCase(repo).execute("user-1") == [stored_pipeline]
        repo.list_by_user.assert_awaited_once_with("user-1")

    @pytest.mark.asyncio
    async def test_get_checks_owner(self, repository, stored_pipeline):
        use_case = GetPipelineUseCase(repository)

        assert await use_case.execute(stored_pipeline.id, "user-1") is stored_pipeline
        with pytest.raises(ForbiddenError):
            await use_case.execute(stored_pipeline.id, "user-2")

    @pytest.mark.asyncio
    async def test_validate_returns_report(self, repository, stored_pipeline):
        report = await ValidatePipelineUseCase(repository).execute(stored_pipeline.id, "user-1")

        assert report == {"valid": True, "structure": [], "trigger": [], "nodes": {}}
