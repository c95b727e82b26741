"""Pipelines 路由

定义 Pipeline 相关的 API 端点：
- GET /api/pipelines - 列出当前用户的流水线（最近更新在前）
- POST /api/pipelines - 创建流水线
- GET /api/pipelines/{pipeline_id} - 获取流水线详情
- PUT /api/pipelines/{pipeline_id} - 按字段合并更新
- DELETE /api/pipelines/{pipeline_id} - 删除流水线（级联删除 Webhook）
- POST /api/pipelines/clone/{share_token} - 克隆公开流水线
- GET /api/pipelines/{pipeline_id}/validation - 结构与节点配置校验报告
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

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
from pipestation.domain.exceptions import DomainError
from pipestation.interfaces.api.dependencies.current_user import get_current_user_id
from pipestation.interfaces.api.dependencies.use_cases import (
    get_clone_pipeline_use_case,
    get_create_pipeline_use_case,
    get_delete_pipeline_use_case,
    get_get_pipeline_use_case,
    get_list_pipelines_use_case,
    get_update_pipeline_use_case,
    get_validate_pipeline_use_case,
)
from pipestation.interfaces.api.dto import (
    CreatePipelineRequest,
    PipelineEnvelope,
    PipelineListResponse,
    PipelineResponse,
    PipelineSummaryResponse,
    PipelineValidationResponse,
    SuccessResponse,
    UpdatePipelineRequest,
)
from pipestation.interfaces.api.errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pipelines", tags=["Pipelines"])


def _internal_error(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Internal server error: {str(e)}",
    )


@router.get("", response_model=PipelineListResponse)
async def list_pipelines(
    user_id: str = Depends(get_current_user_id),
    use_case: ListPipelinesUseCase = Depends(get_list_pipelines_use_case),
) -> PipelineListResponse:
    """列出当前用户的流水线（不含定义快照）"""
    try:
        pipelines = await use_case.execute(user_id)
        return PipelineListResponse(
            pipelines=[PipelineSummaryResponse.from_entity(p) for p in pipelines]
        )
    except Exception as e:
        logger.exception("Failed to list pipelines")
        raise _internal_error(e) from e


@router.post("", response_model=PipelineEnvelope, status_code=status.HTTP_201_CREATED)
async def create_pipeline(
    request: CreatePipelineRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: CreatePipelineUseCase = Depends(get_create_pipeline_use_case),
) -> PipelineEnvelope:
    """创建流水线

    异常处理：
    - 400: 缺少字段、未知节点类型、Pipe 引用不存在的节点（一次返回全部问题）
    - 500: 数据库错误
    """
    try:
        pipeline = await use_case.execute(
            CreatePipelineInput(
                user_id=user_id,
                title=request.title,
                summary=request.summary,
                trigger=request.trigger,
                nodes=request.nodes,
                pipes=request.pipes,
                is_public=request.is_public,
            )
        )
        return PipelineEnvelope(pipeline=PipelineResponse.from_entity(pipeline))
    except DomainError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception("Failed to create pipeline")
        raise _internal_error(e) from e


@router.post(
    "/clone/{share_token}", response_model=PipelineEnvelope, status_code=status.HTTP_201_CREATED
)
async def clone_pipeline(
    share_token: str,
    user_id: str = Depends(get_current_user_id),
    use_case: ClonePipelineUseCase = Depends(get_clone_pipeline_use_case),
) -> PipelineEnvelope:
    """克隆公开流水线（token 不存在或流水线未公开时 404）"""
    try:
        pipeline = await use_case.execute(share_token, user_id)
        return PipelineEnvelope(pipeline=PipelineResponse.from_entity(pipeline))
    except DomainError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception("Failed to clone pipeline")
        raise _internal_error(e) from e


@router.get("/{pipeline_id}", response_model=PipelineEnvelope)
async def get_pipeline(
    pipeline_id: str,
    user_id: str = Depends(get_current_user_id),
    use_case: GetPipelineUseCase = Depends(get_get_pipeline_use_case),
) -> PipelineEnvelope:
    try:
        pipeline = await use_case.execute(pipeline_id, user_id)
        return PipelineEnvelope(pipeline=PipelineResponse.from_entity(pipeline))
    except DomainError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception("Failed to get pipeline %s", pipeline_id)
        raise _internal_error(e) from e


@router.put("/{pipeline_id}", response_model=PipelineEnvelope)
async def update_pipeline(
    pipeline_id: str,
    request: UpdatePipelineRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: UpdatePipelineUseCase = Depends(get_update_pipeline_use_case),
) -> PipelineEnvelope:
    """更新流水线

    只合并请求中出现的字段；trigger / nodes / pipes 中未出现的部分沿用已存储的定义
    """
    try:
        pipeline = await use_case.execute(
            UpdatePipelineInput(pipeline_id=pipeline_id, user_id=user_id, **request.provided())
        )
        return PipelineEnvelope(pipeline=PipelineResponse.from_entity(pipeline))
    except DomainError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception("Failed to update pipeline %s", pipeline_id)
        raise _internal_error(e) from e


@router.delete("/{pipeline_id}", response_model=SuccessResponse)
async def delete_pipeline(
    pipeline_id: str,
    user_id: str = Depends(get_current_user_id),
    use_case: DeletePipelineUseCase = Depends(get_delete_pipeline_use_case),
) -> SuccessResponse:
    try:
        await use_case.execute(pipeline_id, user_id)
        return SuccessResponse()
    except DomainError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception("Failed to delete pipeline %s", pipeline_id)
        raise _internal_error(e) from e


@router.get("/{pipeline_id}/validation", response_model=PipelineValidationResponse)
async def validate_pipeline(
    pipeline_id: str,
    user_id: str = Depends(get_current_user_id),
    use_case: ValidatePipelineUseCase = Depends(get_validate_pipeline_use_case),
) -> PipelineValidationResponse:
    """结构问题（重复 ID、悬空 Pipe）与触发器、各节点的配置错误"""
    try:
        report = await use_case.execute(pipeline_id, user_id)
        return PipelineValidationResponse(**report)
    except DomainError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception("Failed to validate pipeline %s", pipeline_id)
        raise _internal_error(e) from e
