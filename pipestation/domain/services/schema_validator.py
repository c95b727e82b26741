"""声明式 Schema 校验器

业务定义：
- 根据字段约束表（字段名 → FieldRule）校验一条记录
- 返回按字段声明顺序排列的错误列表，空列表表示通过
- 所有字段、所有适用约束都会执行，一次返回全部问题（字段之间不短路）

单字段执行顺序：
1. 必填且为空 → "<field> is required"，该字段其余约束跳过
2. 可选且为空 → 只执行自定义谓词（用于"source == api 时 requestUrl 必填"这类跨字段规则）
3. 非空 → 类型 → 长度 → 数值范围 → 枚举 → 正则 → 格式 → 自定义谓词
   类型不匹配时跳过依赖类型的约束，只保留类型错误

自定义谓词：
- 通过 register_predicate("name") 注册，FieldRule.validator 只保存名称
- 签名 (value, record) -> bool，record 为整条记录，便于表达跨字段规则
"""

import logging
import re
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import urlparse

from pipestation.domain.value_objects.field_rule import FieldRule

logger = logging.getLogger(__name__)

Predicate = Callable[[Any, Mapping[str, Any]], bool]

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_TYPE_NAMES = {
    "string": "a string",
    "number": "a number",
    "boolean": "a boolean",
    "array": "an array",
    "object": "an object",
}


# ==================== 谓词注册表 ====================


class PredicateRegistry:
    """自定义谓词注册表

    谓词按名称注册，配置变体的 schema 中只引用名称，
    因此从持久化的 JSON 重建配置时不需要执行任何任意代码。
    """

    def __init__(self) -> None:
        self._predicates: dict[str, Predicate] = {}

    def register(self, name: str, predicate: Predicate) -> None:
        if name in self._predicates:
            logger.warning("校验谓词被覆盖: %s", name)
        self._predicates[name] = predicate

    def get(self, name: str) -> Predicate:
        """按名称获取谓词

        抛出：
            KeyError: 名称未注册（属于编程错误，而不是数据错误）
        """
        try:
            return self._predicates[name]
        except KeyError:
            raise KeyError(f"未注册的校验谓词: {name}") from None

    def has(self, name: str) -> bool:
        return name in self._predicates

    def names(self) -> list[str]:
        return sorted(self._predicates)


predicate_registry = PredicateRegistry()


def register_predicate(name: str) -> Callable[[Predicate], Predicate]:
    """装饰器：把函数注册为命名谓词

    示例：
        @register_predicate("lookup_request_url")
        def _request_url_for_api(value, record):
            return record.get("source") != "api" or bool(value)
    """

    def decorator(func: Predicate) -> Predicate:
        predicate_registry.register(name, func)
        return func

    return decorator


# ==================== 工具函数 ====================


def is_empty(value: Any) -> bool:
    """None、空白字符串、空列表、空字典视为空；0 与 False 不为空"""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def check_type(value: Any, expected_type: str | None) -> bool:
    """检查值类型（bool 不算 number）"""
    if expected_type is None:
        return True

    if expected_type == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)

    type_mapping = {
        "string": str,
        "boolean": bool,
        "array": (list, tuple),
        "object": dict,
    }
    expected = type_mapping.get(expected_type)
    if expected is None:
        return True
    return isinstance(value, expected)


def is_valid_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value))


def _fmt(number: float) -> str:
    if isinstance(number, float) and number.is_integer():
        return str(int(number))
    return str(number)


# ==================== 校验器 ====================


class SchemaValidator:
    """Schema 校验器

    依赖：
    - registry: 谓词注册表（默认使用全局注册表）
    """

    def __init__(self, registry: PredicateRegistry | None = None):
        self.registry = registry or predicate_registry

    def validate(self, record: Mapping[str, Any], schema: Mapping[str, FieldRule]) -> list[str]:
        """校验一条记录

        参数：
            record: 字段名 → 值
            schema: 字段名 → FieldRule

        返回：
            错误信息列表（空列表表示通过）
        """
        errors: list[str] = []
        for field_name, rule in schema.items():
            errors.extend(self.validate_field(field_name, record.get(field_name), rule, record))
        return errors

    def validate_field(
        self,
        field_name: str,
        value: Any,
        rule: FieldRule,
        record: Mapping[str, Any],
    ) -> list[str]:
        if is_empty(value):
            if rule.required:
                return [f"{field_name} is required"]
            return self._run_predicate(field_name, value, rule, record)

        if not check_type(value, rule.type):
            return [f"{field_name} must be {_TYPE_NAMES.get(rule.type, rule.type)}"]

        errors: list[str] = []
        errors.extend(self._check_length(field_name, value, rule))
        errors.extend(self._check_range(field_name, value, rule))

        if rule.enum is not None and value not in rule.enum:
            allowed = ", ".join(str(item) for item in rule.enum)
            errors.append(f"{field_name} must be one of: {allowed}")

        if rule.pattern and isinstance(value, str) and not re.search(rule.pattern, value):
            errors.append(f"{field_name} does not match required pattern")

        if isinstance(value, str):
            if rule.format == "url" and not is_valid_url(value):
                errors.append(f"{field_name} must be a valid URL")
            elif rule.format == "email" and not is_valid_email(value):
                errors.append(f"{field_name} must be a valid email address")

        errors.extend(self._run_predicate(field_name, value, rule, record))
        return errors

    def _check_length(self, field_name: str, value: Any, rule: FieldRule) -> list[str]:
        if isinstance(value, str):
            unit, verb = "character(s)", "be"
        elif isinstance(value, (list, tuple)):
            unit, verb = "item(s)", "have"
        else:
            return []

        errors = []
        if rule.min_length is not None and len(value) < rule.min_length:
            errors.append(f"{field_name} must {verb} at least {rule.min_length} {unit}")
        if rule.max_length is not None and len(value) > rule.max_length:
            errors.append(f"{field_name} must {verb} at most {rule.max_length} {unit}")
        return errors

    def _check_range(self, field_name: str, value: Any, rule: FieldRule) -> list[str]:
        if not check_type(value, "number"):
            return []

        errors = []
        if rule.minimum is not None and value < rule.minimum:
            errors.append(f"{field_name} must be at least {_fmt(rule.minimum)}")
        if rule.maximum is not None and value > rule.maximum:
            errors.append(f"{field_name} must be at most {_fmt(rule.maximum)}")
        return errors

    def _run_predicate(
        self,
        field_name: str,
        value: Any,
        rule: FieldRule,
        record: Mapping[str, Any],
    ) -> list[str]:
        if not rule.validator:
            return []

        predicate = self.registry.get(rule.validator)
        try:
            passed = predicate(value, record)
        except Exception as exc:
            return [f"{field_name} validation error: {exc}"]

        if passed:
            return []
        return [rule.message or f"{field_name} failed custom validation"]


_default_validator = SchemaValidator()


def validate_record(record: Mapping[str, Any], schema: Mapping[str, FieldRule]) -> list[str]:
    """使用全局谓词注册表校验记录"""
    return _default_validator.validate(record, schema)
