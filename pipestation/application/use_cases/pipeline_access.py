"""流水线访问控制 - 所有需要所有权的用例共用"""

from pipestation.domain.entities.pipeline import Pipeline
from pipestation.domain.exceptions import ForbiddenError
from pipestation.domain.ports.pipeline_repository import PipelineRepository


async def get_owned_pipeline(
    repository: PipelineRepository, pipeline_id: str, user_id: str
) -> Pipeline:
    """加载流水线并校验所有者

    抛出：
        NotFoundError: 流水线不存在
        ForbiddenError: 流水线属于其他用户
    """
    pipeline = await repository.get_by_id(pipeline_id)
    if not pipeline.is_owned_by(user_id):
        raise ForbiddenError("Access denied")
    return pipeline
