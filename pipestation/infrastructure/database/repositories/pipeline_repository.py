"""SQLAlchemy Pipeline Repository 实现

Repository 职责：
1. 转换（Translation）：领域实体 ⇄ ORM 模型
2. 持久化（Persistence）：保存、查询、删除
3. 计数：clone_count 使用单条 UPDATE 原子自增
"""

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pipestation.domain.entities.pipeline import Pipeline, PipelineDefinition
from pipestation.domain.exceptions import NotFoundError
from pipestation.infrastructure.database.models import PipelineModel
from pipestation.infrastructure.database.repositories._timestamps import as_utc


class SQLAlchemyPipelineRepository:
    """SQLAlchemy Pipeline Repository 实现

    依赖：
    - AsyncSession: SQLAlchemy 异步会话（依赖注入）
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # ==================== Assembler 方法 ====================
    # 职责：ORM 模型 ⇄ 领域实体转换

    def _to_entity(self, model: PipelineModel) -> Pipeline:
        return Pipeline(
            id=model.id,
            user_id=model.user_id,
            title=model.title,
            summary=model.summary,
            definition=PipelineDefinition.from_dict(model.definition),
            is_public=model.is_public,
            share_token=model.share_token,
            cloned_from=model.cloned_from,
            clone_count=model.clone_count,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )

    def _to_model(self, entity: Pipeline) -> PipelineModel:
        return PipelineModel(
            id=entity.id,
            user_id=entity.user_id,
            title=entity.title,
            summary=entity.summary,
            definition=entity.definition.to_dict(),
            is_public=entity.is_public,
            share_token=entity.share_token,
            cloned_from=entity.cloned_from,
            clone_count=entity.clone_count,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    # ==================== CRUD 操作 ====================

    async def save(self, pipeline: Pipeline) -> None:
        """保存 Pipeline（clone_count 只由 increment_clone_count 修改）"""
        existing = await self.session.get(PipelineModel, pipeline.id)

        if existing:
            existing.title = pipeline.title
            existing.summary = pipeline.summary
            existing.definition = pipeline.definition.to_dict()
            existing.is_public = pipeline.is_public
            existing.share_token = pipeline.share_token
            existing.updated_at = pipeline.updated_at
        else:
            self.session.add(self._to_model(pipeline))

        await self.session.commit()

    async def get_by_id(self, pipeline_id: str) -> Pipeline:
        """抛出：NotFoundError"""
        pipeline = await self.find_by_id(pipeline_id)
        if pipeline is None:
            raise NotFoundError("Pipeline", pipeline_id)
        return pipeline

    async def find_by_id(self, pipeline_id: str) -> Pipeline | None:
        model = await self.session.get(PipelineModel, pipeline_id, populate_existing=True)
        return self._to_entity(model) if model else None

    async def find_title(self, pipeline_id: str) -> str | None:
        result = await self.session.execute(
            select(PipelineModel.title).where(PipelineModel.id == pipeline_id)
        )
        return result.scalar_one_or_none()

    async def find_public_by_share_token(self, share_token: str) -> Pipeline | None:
        result = await self.session.execute(
            select(PipelineModel).where(
                PipelineModel.share_token == share_token,
                PipelineModel.is_public.is_(True),
            )
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list_by_user(self, user_id: str) -> list[Pipeline]:
        result = await self.session.execute(
            select(PipelineModel)
            .where(PipelineModel.user_id == user_id)
            .order_by(PipelineModel.updated_at.desc())
        )
        return [self._to_entity(model) for model in result.scalars().all()]

    async def increment_clone_count(self, pipeline_id: str) -> None:
        await self.session.execute(
            update(PipelineModel)
            .where(PipelineModel.id == pipeline_id)
            .values(clone_count=PipelineModel.clone_count + 1)
        )
        await self.session.commit()

    async def delete(self, pipeline_id: str) -> None:
        await self.session.execute(delete(PipelineModel).where(PipelineModel.id == pipeline_id))
        await self.session.commit()
