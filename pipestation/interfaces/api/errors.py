"""领域异常 → HTTPException 映射"""

from fastapi import HTTPException

from pipestation.domain.exceptions import DomainError, ValidationError


def to_http_exception(exc: DomainError) -> HTTPException:
    """按异常自带的 status_code 转换；ValidationError 附带完整错误列表"""
    if isinstance(exc, ValidationError):
        return HTTPException(
            status_code=exc.status_code,
            detail={"code": exc.code, "message": str(exc), "errors": exc.errors},
        )
    return HTTPException(status_code=exc.status_code, detail=str(exc))
