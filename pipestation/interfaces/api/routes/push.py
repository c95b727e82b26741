"""Push 路由

- POST /api/push/subscribe - 保存浏览器推送订阅（同一 endpoint 刷新密钥）
- POST /api/push/unsubscribe - 删除订阅
- GET /api/push/vapid - VAPID 公钥（无需登录）
"""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, status

from pipestation.application.use_cases.manage_push_subscriptions import (
    SubscribePushInput,
    SubscribePushUseCase,
    UnsubscribePushUseCase,
)
from pipestation.config import settings
from pipestation.domain.exceptions import DomainError
from pipestation.interfaces.api.dependencies.current_user import get_current_user_id
from pipestation.interfaces.api.dependencies.use_cases import (
    get_subscribe_push_use_case,
    get_unsubscribe_push_use_case,
)
from pipestation.interfaces.api.dto import (
    SubscribeRequest,
    SubscribeResponse,
    SubscriptionRef,
    SuccessResponse,
    UnsubscribeRequest,
    VapidKeyResponse,
)
from pipestation.interfaces.api.errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/push", tags=["Push"])


@router.post("/subscribe", response_model=SubscribeResponse)
async def subscribe(
    request: SubscribeRequest,
    user_id: str = Depends(get_current_user_id),
    user_agent: str | None = Header(None),
    use_case: SubscribePushUseCase = Depends(get_subscribe_push_use_case),
) -> SubscribeResponse:
    try:
        subscription = await use_case.execute(
            SubscribePushInput(
                user_id=user_id,
                endpoint=request.endpoint,
                p256dh_key=request.keys.p256dh,
                auth_key=request.keys.auth,
                user_agent=user_agent,
            )
        )
        return SubscribeResponse(subscription=SubscriptionRef(id=subscription.id))
    except DomainError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception("Failed to store push subscription")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal server error: {str(e)}",
        ) from e


@router.post("/unsubscribe", response_model=SuccessResponse)
async def unsubscribe(
    request: UnsubscribeRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: UnsubscribePushUseCase = Depends(get_unsubscribe_push_use_case),
) -> SuccessResponse:
    try:
        await use_case.execute(user_id, request.endpoint)
        return SuccessResponse()
    except Exception as e:
        logger.exception("Failed to remove push subscription")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal server error: {str(e)}",
        ) from e


@router.get("/vapid", response_model=VapidKeyResponse)
async def get_vapid_key() -> VapidKeyResponse:
    """浏览器调用 pushManager.subscribe() 时使用的 applicationServerKey"""
    return VapidKeyResponse(public_key=settings.vapid_public_key)
