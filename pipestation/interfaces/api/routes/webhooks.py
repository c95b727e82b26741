"""Webhooks 路由

管理端点（需要登录）：
- POST /api/webhooks - 为流水线创建 Webhook
- GET /api/webhooks/{webhook_id} - 获取 Webhook
- GET /api/webhooks/pipeline/{pipeline_id} - 列出流水线的 Webhook
- DELETE /api/webhooks/{webhook_id} - 删除 Webhook
- GET /api/webhooks/{webhook_id}/data - 最近一次触发的请求快照

公开触发端点：
- GET|POST|PUT|DELETE|PATCH /wh/{token} - 方法匹配在用例内部校验
"""

import json
import logging
from typing import Any
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, HTTPException, Request, status

from pipestation.application.use_cases.manage_webhooks import (
    CreateWebhookInput,
    CreateWebhookUseCase,
    WebhookQueryUseCase,
)
from pipestation.application.use_cases.trigger_webhook import (
    TriggerWebhookInput,
    TriggerWebhookUseCase,
)
from pipestation.domain.exceptions import DomainError
from pipestation.domain.value_objects.trigger_type import HttpMethod
from pipestation.interfaces.api.dependencies.current_user import get_current_user_id
from pipestation.interfaces.api.dependencies.use_cases import (
    get_create_webhook_use_case,
    get_trigger_webhook_use_case,
    get_webhook_query_use_case,
)
from pipestation.interfaces.api.dto import (
    CreateWebhookRequest,
    SuccessResponse,
    WebhookDataResponse,
    WebhookEnvelope,
    WebhookListResponse,
    WebhookResponse,
    WebhookTriggerResponse,
)
from pipestation.interfaces.api.errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])
trigger_router = APIRouter(prefix="/wh", tags=["Webhook Trigger"])


def _internal_error(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Internal server error: {str(e)}",
    )


@router.post("", response_model=WebhookEnvelope, status_code=status.HTTP_201_CREATED)
async def create_webhook(
    request: CreateWebhookRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: CreateWebhookUseCase = Depends(get_create_webhook_use_case),
) -> WebhookEnvelope:
    try:
        webhook = await use_case.execute(
            CreateWebhookInput(
                pipeline_id=request.pipeline_id, user_id=user_id, method=request.method
            )
        )
        return WebhookEnvelope(webhook=WebhookResponse.from_entity(webhook))
    except DomainError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception("Failed to create webhook")
        raise _internal_error(e) from e


@router.get("/pipeline/{pipeline_id}", response_model=WebhookListResponse)
async def list_pipeline_webhooks(
    pipeline_id: str,
    user_id: str = Depends(get_current_user_id),
    use_case: WebhookQueryUseCase = Depends(get_webhook_query_use_case),
) -> WebhookListResponse:
    try:
        webhooks = await use_case.list_for_pipeline(pipeline_id, user_id)
        return WebhookListResponse(webhooks=[WebhookResponse.from_entity(w) for w in webhooks])
    except DomainError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception("Failed to list webhooks for pipeline %s", pipeline_id)
        raise _internal_error(e) from e


@router.get("/{webhook_id}", response_model=WebhookEnvelope)
async def get_webhook(
    webhook_id: str,
    user_id: str = Depends(get_current_user_id),
    use_case: WebhookQueryUseCase = Depends(get_webhook_query_use_case),
) -> WebhookEnvelope:
    try:
        webhook = await use_case.get(webhook_id, user_id)
        return WebhookEnvelope(webhook=WebhookResponse.from_entity(webhook))
    except DomainError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception("Failed to get webhook %s", webhook_id)
        raise _internal_error(e) from e


@router.delete("/{webhook_id}", response_model=SuccessResponse)
async def delete_webhook(
    webhook_id: str,
    user_id: str = Depends(get_current_user_id),
    use_case: WebhookQueryUseCase = Depends(get_webhook_query_use_case),
) -> SuccessResponse:
    try:
        await use_case.delete(webhook_id, user_id)
        return SuccessResponse()
    except DomainError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception("Failed to delete webhook %s", webhook_id)
        raise _internal_error(e) from e


@router.get("/{webhook_id}/data", response_model=WebhookDataResponse)
async def get_webhook_data(
    webhook_id: str,
    user_id: str = Depends(get_current_user_id),
    use_case: WebhookQueryUseCase = Depends(get_webhook_query_use_case),
) -> WebhookDataResponse:
    """最近一次触发的 {data, timestamp}（收到 webhook_large 指针通知的客户端从这里取数据）"""
    try:
        return WebhookDataResponse(data=await use_case.get_last_request(webhook_id, user_id))
    except DomainError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception("Failed to load data for webhook %s", webhook_id)
        raise _internal_error(e) from e


async def _read_body(request: Request) -> Any:
    """按 Content-Type 解析请求体：JSON、表单，其余按文本保存"""
    raw = await request.body()
    if not raw:
        return None

    content_type = request.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON body"
            ) from exc
    if "application/x-www-form-urlencoded" in content_type:
        return dict(parse_qsl(raw.decode("utf-8", errors="replace"), keep_blank_values=True))
    return raw.decode("utf-8", errors="replace")


@trigger_router.api_route(
    "/{token}", methods=list(HttpMethod.values()), response_model=WebhookTriggerResponse
)
async def trigger_webhook(
    token: str,
    request: Request,
    use_case: TriggerWebhookUseCase = Depends(get_trigger_webhook_use_case),
) -> WebhookTriggerResponse:
    """公开触发端点

    异常处理：
    - 404: token 不存在或 Webhook 未激活
    - 403: HTTP 方法与 Webhook 配置不一致
    推送失败不影响响应
    """
    body = await _read_body(request)
    try:
        result = await use_case.execute(
            TriggerWebhookInput(
                token=token,
                method=request.method,
                body=body,
                query=dict(request.query_params),
                headers=dict(request.headers),
            )
        )
        return WebhookTriggerResponse(**result.to_dict())
    except DomainError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception("Failed to trigger webhook")
        raise _internal_error(e) from e
