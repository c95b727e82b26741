"""领域层异常定义

异常分类（面向调用方，均为客户端错误，不做自动重试）：
- ValidationError: 输入不满足 schema / 结构约束（400）
- UnauthorizedError: 缺少或无效的调用方身份（401）
- ForbiddenError: 身份已知但无权操作目标实体（403）
- NotFoundError: 实体不存在或对调用方不可见（404，包含已停用的资源）

设计原则：
- 每个异常携带固定的 status_code 与 code，API 层据此统一映射
- 推送投递失败不属于领域异常，不会传递给 Webhook 调用方
"""


class DomainError(Exception):
    """领域层异常基类

    用途：
    - 表示业务规则违反
    - API 层统一捕获 DomainError 并转换为 4xx 错误

    示例：
        if not title:
            raise DomainError("title 不能为空")
    """

    status_code: int = 400
    code: str = "DOMAIN_ERROR"


class ValidationError(DomainError):
    """输入校验失败

    参数：
        errors: 错误信息列表（一次性返回所有问题）
        message: 可选的整体描述；缺省时由 errors 拼接
    """

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, errors: list[str] | str, message: str | None = None):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__(message or "; ".join(self.errors) or "Validation failed")


class UnauthorizedError(DomainError):
    """缺少或无效的身份凭证"""

    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ForbiddenError(DomainError):
    """无权操作目标实体（非所有者、Webhook 方法不匹配等）"""

    status_code = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class NotFoundError(DomainError):
    """实体不存在异常

    用途：
    - Repository / Use Case 查询不到实体
    - 已停用的 Webhook、非公开的分享 token 也按不存在处理

    参数：
        entity_type: 实体类型（如："Pipeline"、"Webhook"）
        entity_id: 实体 ID 或查询键
    """

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} 不存在: {entity_id}")
