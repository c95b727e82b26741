"""获取当前登录用户的依赖注入

职责：
1. 从 Authorization 头中提取 Bearer token
2. 验证token并返回 sub 声明（user_id）

身份由令牌签发方负责，这里对 sub 不做进一步查询
"""

from fastapi import Header, HTTPException, status

from pipestation.domain.exceptions import UnauthorizedError
from pipestation.infrastructure.auth.jwt_service import JWTService


def get_current_user_id(
    authorization: str | None = Header(None, description="Bearer token"),
) -> str:
    """获取当前登录用户 ID（必需）

    Raises:
        HTTPException 401: 未认证或token无效
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing authorization header"
        )

    try:
        scheme, token = authorization.split()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authorization header"
        ) from exc
    if scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authentication scheme"
        )

    try:
        payload = JWTService.decode_token(token)
    except UnauthorizedError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload"
        )
    return str(user_id)
