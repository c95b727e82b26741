"""FieldRule 值对象 - 单个字段的声明式约束

业务定义：
- FieldRule 描述一个配置字段的类型、必填、长度、数值范围、枚举、格式和正则约束
- 自定义校验以"谓词名"引用（validator），由 schema_validator 的注册表解析

设计原则：
- 可序列化：除谓词名外全部为纯数据，持久化后可以重建
- 不可变：frozen dataclass
"""

from dataclasses import asdict, dataclass
from typing import Any, Literal

FieldType = Literal["string", "number", "boolean", "array", "object"]
FieldFormat = Literal["url", "email"]


@dataclass(frozen=True)
class FieldRule:
    """字段约束

    属性说明：
    - type: 期望类型（string/number/boolean/array/object）
    - required: 是否必填（None、空白字符串、空列表、空字典都视为缺失）
    - min_length / max_length: 字符串或数组长度
    - minimum / maximum: 数值上下界
    - enum: 允许值的封闭集合
    - format: 结构化格式（url/email）
    - pattern: 正则表达式（re.search 语义）
    - validator: 已注册的自定义谓词名称，签名 (value, record) -> bool
    - message: 谓词失败时的错误信息；缺省为 "<field> failed custom validation"
    """

    type: FieldType | None = None
    required: bool = False
    min_length: int | None = None
    max_length: int | None = None
    minimum: float | None = None
    maximum: float | None = None
    enum: tuple[Any, ...] | None = None
    format: FieldFormat | None = None
    pattern: str | None = None
    validator: str | None = None
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """导出为纯数据（跳过未设置的约束）"""
        data = {key: value for key, value in asdict(self).items() if value not in (None, False)}
        if self.enum is not None:
            data["enum"] = list(self.enum)
        return data


Schema = dict[str, FieldRule]
