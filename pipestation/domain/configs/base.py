"""节点配置基类

业务定义：
- 每种节点类型对应一个配置变体（NodeConfig 子类），是一个带默认值的不可变记录
- 变体提供 get_schema()（字段约束表）、validate()（错误列表）和 get_summary()（一行摘要）

设计原则：
- frozen dataclass：更新配置通过 with_changes() 生成新实例，不原地修改
- 构造永不因数据非法而失败：超出枚举范围的值可以存在（例如编辑中的状态），
  只有 validate() 会报告问题
- 序列化使用 camelCase 的线上字段名（wire name），属性使用 snake_case；
  非常规映射通过 field(metadata={"wire": ...}) 声明
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, ClassVar, TypeVar

from pipestation.domain.services.schema_validator import validate_record
from pipestation.domain.value_objects.field_rule import Schema
from pipestation.domain.value_objects.node_type import NodeType

RecordT = TypeVar("RecordT", bound="ConfigRecord")


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def wire_name(f: Any) -> str:
    return f.metadata.get("wire") or to_camel(f.name)


def enum_values(enum_cls: type[Enum]) -> tuple[str, ...]:
    return tuple(member.value for member in enum_cls)


def nested(item_cls: type["ConfigRecord"], **kwargs: Any) -> Any:
    """声明嵌套记录字段（列表元素或单个对象）"""
    metadata = dict(kwargs.pop("metadata", {}))
    metadata["item"] = item_cls
    return field(metadata=metadata, **kwargs)


def _dump(value: Any) -> Any:
    if isinstance(value, ConfigRecord):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_dump(item) for item in value]
    if isinstance(value, Mapping):
        return {key: _dump(item) for key, item in value.items()}
    if isinstance(value, Enum):
        return value.value
    return value


def _load(value: Any, item_cls: type["ConfigRecord"] | None) -> Any:
    if item_cls is not None:
        if isinstance(value, Mapping):
            return item_cls.from_dict(value)
        if isinstance(value, (list, tuple)):
            return tuple(
                item_cls.from_dict(item) if isinstance(item, Mapping) else item for item in value
            )
        return value
    if isinstance(value, list):
        return tuple(value)
    if isinstance(value, Mapping):
        return dict(value)
    return value


@dataclass(frozen=True)
class ConfigRecord:
    """可与 camelCase 字典互转的不可变记录"""

    @classmethod
    def from_dict(cls: type[RecordT], data: Mapping[str, Any] | None = None) -> RecordT:
        """从部分初始化字典构造；缺失或为 None 的字段使用默认值"""
        data = data or {}
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            if not f.init:
                continue
            value = data.get(wire_name(f))
            if value is None:
                continue
            kwargs[f.name] = _load(value, f.metadata.get("item"))
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {wire_name(f): _dump(getattr(self, f.name)) for f in fields(self)}

    def with_changes(self: RecordT, **changes: Any) -> RecordT:
        """返回修改了指定属性的新实例"""
        return replace(self, **changes)


@dataclass(frozen=True)
class KeyValue(ConfigRecord):
    """键值对（HTTP 头、查询参数、表单字段）"""

    key: str = ""
    value: str = ""


@dataclass(frozen=True)
class SchemaConfig(ConfigRecord):
    """带 schema 校验与摘要的配置记录"""

    def get_schema(self) -> Schema:
        return {}

    def validate(self) -> list[str]:
        """按 schema 校验，子类在此基础上追加跨字段约束"""
        return validate_record(self.to_dict(), self.get_schema())

    def is_valid(self) -> bool:
        return not self.validate()

    def get_summary(self) -> str:
        return "Configuration"


@dataclass(frozen=True)
class NodeConfig(SchemaConfig):
    """节点配置变体基类"""

    node_type: ClassVar[NodeType]


def clip(text: str, limit: int = 120) -> str:
    return text[:limit]


def plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def count_of(value: Any) -> int:
    """列表长度；非列表（编辑中的非法数据）按 0 计"""
    if isinstance(value, (list, tuple)):
        return len(value)
    return 0
