"""处理类节点配置（数据集操作与控制流）

包含：Filter、Condition、Switch、Loop、UntilLoop、Join、Union、Intersect、
Deduplicate、Distinct、Split、Sort、Aggregate、Validate、Lookup
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pipestation.domain.configs.base import (
    ConfigRecord,
    NodeConfig,
    clip,
    count_of,
    enum_values,
    nested,
    plural,
)
from pipestation.domain.services.schema_validator import is_empty, register_predicate
from pipestation.domain.value_objects.field_rule import FieldRule, Schema
from pipestation.domain.value_objects.node_type import NodeType

# ==================== 枚举 ====================


class FilterMode(str, Enum):
    PERMIT = "permit"
    BLOCK = "block"


class MatchType(str, Enum):
    ALL = "all"
    ANY = "any"


class ComparisonOperator(str, Enum):
    EQUALS = "=="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    LESS_THAN = "<"
    GREATER_EQUAL = ">="
    LESS_EQUAL = "<="
    CONTAINS = "contains"
    MATCHES = "matches"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"


class LogicOperator(str, Enum):
    AND = "AND"
    OR = "OR"


class LoopOutputMode(str, Enum):
    EMIT = "emit"
    COLLECT = "collect"


class TimeoutAction(str, Enum):
    FAIL = "fail"
    CONTINUE = "continue"
    SKIP = "skip"


class JoinType(str, Enum):
    INNER = "inner"
    LEFT = "left"
    RIGHT = "right"
    OUTER = "outer"


class UnionStrategy(str, Enum):
    APPEND = "append"
    UNIQUE = "unique"
    INTERSECT = "intersect"


class IntersectCompareBy(str, Enum):
    FIELD = "field"
    FULL = "full"


class DeduplicateScope(str, Enum):
    FIELD = "field"
    FULL = "full"


class DeduplicateKeep(str, Enum):
    FIRST = "first"
    LAST = "last"


class DistinctOutputFormat(str, Enum):
    ARRAY = "array"
    OBJECT = "object"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SplitMethod(str, Enum):
    FIELD = "field"
    CONDITION = "condition"
    BATCH = "batch"
    PERCENTAGE = "percentage"


class SplitStrategy(str, Enum):
    SEPARATE = "separate"
    ARRAY = "array"
    OBJECT = "object"


class AggregateOperation(str, Enum):
    SUM = "sum"
    AVG = "avg"
    COUNT = "count"
    MIN = "min"
    MAX = "max"
    FIRST = "first"
    LAST = "last"


class ValidationFailureAction(str, Enum):
    SKIP = "skip"
    FAIL = "fail"
    MARK = "mark"
    SEPARATE = "separate"


class LookupSource(str, Enum):
    API = "api"
    CACHE = "cache"
    STORAGE = "storage"


# ==================== 跨字段谓词 ====================


@register_predicate("lookup_request_url")
def _request_url_for_api_source(value: Any, record: Mapping[str, Any]) -> bool:
    return record.get("source") != LookupSource.API.value or not is_empty(value)


@register_predicate("intersect_field")
def _field_for_field_comparison(value: Any, record: Mapping[str, Any]) -> bool:
    return record.get("compareBy") != IntersectCompareBy.FIELD.value or not is_empty(value)


# ==================== 嵌套记录 ====================


@dataclass(frozen=True)
class FilterRule(ConfigRecord):
    field: str = ""
    operator: str = ComparisonOperator.EQUALS.value
    value: Any = ""
    enabled: bool = True


@dataclass(frozen=True)
class SortCriteria(ConfigRecord):
    field: str = ""
    order: str = SortOrder.ASC.value
    enabled: bool = True


@dataclass(frozen=True)
class Aggregation(ConfigRecord):
    field: str = ""
    operation: str = AggregateOperation.COUNT.value
    alias: str = ""


@dataclass(frozen=True)
class ValidationRule(ConfigRecord):
    field: str = ""
    required: bool = False
    type: str = ""
    pattern: str = ""
    min: float | None = None
    max: float | None = None
    enabled: bool = True


# ==================== 条件与分支 ====================


@dataclass(frozen=True)
class FilterConfig(NodeConfig):
    node_type = NodeType.FILTER

    mode: str = FilterMode.PERMIT.value
    match_type: str = MatchType.ALL.value
    rules: tuple[FilterRule, ...] = nested(FilterRule, default=())

    def get_schema(self) -> Schema:
        return {
            "mode": FieldRule(type="string", required=True, enum=enum_values(FilterMode)),
            "matchType": FieldRule(type="string", required=True, enum=enum_values(MatchType)),
            "rules": FieldRule(type="array", required=True, min_length=1),
        }

    def get_summary(self) -> str:
        rules = self.rules if isinstance(self.rules, tuple) else ()
        count = sum(1 for r in rules if isinstance(r, FilterRule) and r.field and r.value)
        if count == 0:
            return "No rules"
        logic = "AND" if self.match_type == MatchType.ALL.value else "OR"
        return f"{str(self.mode).upper()} where ({count} rules via {logic})"


@dataclass(frozen=True)
class ConditionConfig(NodeConfig):
    node_type = NodeType.CONDITION

    logic: str = LogicOperator.AND.value
    rules: tuple[FilterRule, ...] = nested(FilterRule, default=())

    def get_schema(self) -> Schema:
        return {
            "logic": FieldRule(type="string", required=True, enum=enum_values(LogicOperator)),
            "rules": FieldRule(type="array", required=True, min_length=1),
        }

    def get_summary(self) -> str:
        rules = self.rules if isinstance(self.rules, tuple) else ()
        count = sum(1 for r in rules if isinstance(r, FilterRule) and r.field)
        return f"If {plural(count, 'rule')} match ({self.logic})"


@dataclass(frozen=True)
class SwitchConfig(NodeConfig):
    node_type = NodeType.SWITCH

    switch_field: str = ""
    cases: dict[str, Any] = field(default_factory=dict)
    default_case: str | None = None

    def get_schema(self) -> Schema:
        return {
            "switchField": FieldRule(type="string", required=True, min_length=1),
            "cases": FieldRule(type="object"),
            "defaultCase": FieldRule(type="string"),
        }

    def get_summary(self) -> str:
        return f"Switch on {self.switch_field}" if self.switch_field else "No switch field"


# ==================== 循环 ====================


@dataclass(frozen=True)
class LoopConfig(NodeConfig):
    node_type = NodeType.LOOP

    loop_over: str = ""
    flatten: bool = False
    output_mode: str = LoopOutputMode.EMIT.value
    assign_to: str = ""
    max_iterations: int = 1000

    def get_schema(self) -> Schema:
        return {
            "loopOver": FieldRule(type="string", required=True),
            "flatten": FieldRule(type="boolean"),
            "outputMode": FieldRule(
                type="string", required=True, enum=enum_values(LoopOutputMode)
            ),
            "assignTo": FieldRule(type="string"),
            "maxIterations": FieldRule(type="number", minimum=1),
        }

    def get_summary(self) -> str:
        if not self.loop_over:
            return "Loop not configured"
        mode = "emit each" if self.output_mode == LoopOutputMode.EMIT.value else "collect all"
        limit = f" (max {self.max_iterations})" if self.max_iterations != 1000 else ""
        return clip(f"Loop {self.loop_over} ({mode}{limit})")


@dataclass(frozen=True)
class UntilLoopConfig(NodeConfig):
    node_type = NodeType.UNTIL_LOOP

    condition: str = ""
    max_iterations: int = 100
    timeout: int = 300
    on_timeout: str = TimeoutAction.FAIL.value

    def get_schema(self) -> Schema:
        return {
            "condition": FieldRule(type="string", required=True),
            "maxIterations": FieldRule(type="number", minimum=1),
            "timeout": FieldRule(type="number", minimum=1),
            "onTimeout": FieldRule(type="string", enum=enum_values(TimeoutAction)),
        }

    def get_summary(self) -> str:
        cond = str(self.condition)[:40] if self.condition else "no condition"
        timeout = f" {self.timeout}s" if self.timeout != 300 else ""
        return clip(f"Until {cond} (max {self.max_iterations}{timeout})")


# ==================== 多输入合并 ====================


@dataclass(frozen=True)
class JoinConfig(NodeConfig):
    node_type = NodeType.JOIN

    join_type: str = field(default=JoinType.INNER.value, metadata={"wire": "type"})
    left_key: str = ""
    right_key: str = ""
    duplicate_handling: str = "all"

    def get_schema(self) -> Schema:
        return {
            "type": FieldRule(type="string", required=True, enum=enum_values(JoinType)),
            "leftKey": FieldRule(type="string", required=True, min_length=1),
            "rightKey": FieldRule(type="string", required=True, min_length=1),
            "duplicateHandling": FieldRule(type="string", enum=("all", "first", "last")),
        }

    def get_summary(self) -> str:
        if self.left_key and self.right_key:
            return f"{str(self.join_type).upper()} on {self.left_key} = {self.right_key}"
        return "Join keys not set"


@dataclass(frozen=True)
class UnionConfig(NodeConfig):
    node_type = NodeType.UNION

    strategy: str = UnionStrategy.APPEND.value
    deduplicate_field: str = ""
    preserve_order: bool = True

    def get_schema(self) -> Schema:
        return {
            "strategy": FieldRule(type="string", required=True, enum=enum_values(UnionStrategy)),
            "deduplicateField": FieldRule(type="string"),
            "preserveOrder": FieldRule(type="boolean"),
        }

    def get_summary(self) -> str:
        return f"Union ({self.strategy})"


@dataclass(frozen=True)
class IntersectConfig(NodeConfig):
    node_type = NodeType.INTERSECT

    compare_by: str = IntersectCompareBy.FIELD.value
    output_from: str = "first"
    field: str = ""
    ignore_case: bool = True

    def get_schema(self) -> Schema:
        return {
            "compareBy": FieldRule(
                type="string", required=True, enum=enum_values(IntersectCompareBy)
            ),
            "outputFrom": FieldRule(type="string", enum=("first", "second")),
            "field": FieldRule(
                type="string",
                validator="intersect_field",
                message="field is required when compareBy is field",
            ),
            "ignoreCase": FieldRule(type="boolean"),
        }

    def get_summary(self) -> str:
        if self.compare_by == IntersectCompareBy.FIELD.value and self.field:
            return f"Intersect on {self.field}"
        return "Intersect Data"


# ==================== 去重与拆分 ====================


@dataclass(frozen=True)
class DeduplicateConfig(NodeConfig):
    node_type = NodeType.DEDUPLICATE

    scope: str = DeduplicateScope.FIELD.value
    fields: tuple[str, ...] = ()
    keep: str = DeduplicateKeep.FIRST.value
    ignore_case: bool = True

    def get_schema(self) -> Schema:
        return {
            "scope": FieldRule(type="string", required=True, enum=enum_values(DeduplicateScope)),
            "fields": FieldRule(type="array"),
            "keep": FieldRule(type="string", required=True, enum=enum_values(DeduplicateKeep)),
            "ignoreCase": FieldRule(type="boolean"),
        }

    def validate(self) -> list[str]:
        errors = super().validate()
        if self.scope == DeduplicateScope.FIELD.value and count_of(self.fields) == 0:
            errors.append("At least one field is required for field scope")
        return errors

    def get_summary(self) -> str:
        if self.scope == DeduplicateScope.FIELD.value and count_of(self.fields) > 0:
            return f"Unique by [{', '.join(str(f) for f in self.fields)}]"
        return f"Unique by {self.scope}"


@dataclass(frozen=True)
class DistinctConfig(NodeConfig):
    node_type = NodeType.DISTINCT

    scope: str = DeduplicateScope.FIELD.value
    fields: tuple[str, ...] = ()
    output_format: str = DistinctOutputFormat.ARRAY.value
    sort: str = "none"

    def get_schema(self) -> Schema:
        return {
            "scope": FieldRule(type="string", required=True, enum=enum_values(DeduplicateScope)),
            "fields": FieldRule(type="array"),
            "outputFormat": FieldRule(type="string", enum=enum_values(DistinctOutputFormat)),
            "sort": FieldRule(type="string", enum=("none", "asc", "desc")),
        }

    def validate(self) -> list[str]:
        errors = super().validate()
        if self.scope == DeduplicateScope.FIELD.value and count_of(self.fields) == 0:
            errors.append("At least one field is required for field scope")
        return errors

    def get_summary(self) -> str:
        if self.scope == DeduplicateScope.FIELD.value and count_of(self.fields) > 0:
            shown = ", ".join(str(f) for f in self.fields[:2])
            more = "..." if len(self.fields) > 2 else ""
            sorted_by = f" sorted {self.sort}" if self.sort != "none" else ""
            return clip(f"Distinct {shown}{more}{sorted_by}")
        return "Distinct values (full match)"


@dataclass(frozen=True)
class SplitConfig(NodeConfig):
    node_type = NodeType.SPLIT

    method: str = SplitMethod.FIELD.value
    split_field: str = ""
    strategy: str = SplitStrategy.SEPARATE.value
    include_group_name: bool = False
    chunk_size: int = 10

    def get_schema(self) -> Schema:
        return {
            "method": FieldRule(type="string", required=True, enum=enum_values(SplitMethod)),
            "splitField": FieldRule(type="string"),
            "strategy": FieldRule(type="string", required=True, enum=enum_values(SplitStrategy)),
            "includeGroupName": FieldRule(type="boolean"),
            "chunkSize": FieldRule(type="number", minimum=1),
        }

    def validate(self) -> list[str]:
        errors = super().validate()
        if self.method == SplitMethod.FIELD.value and is_empty(self.split_field):
            errors.append("Split field is required for field method")
        return errors

    def get_summary(self) -> str:
        if self.method == SplitMethod.FIELD.value and self.split_field:
            return clip(f"Split by {self.split_field} ({self.strategy})")
        if self.method == SplitMethod.BATCH.value:
            return f"Split into batches of {self.chunk_size}"
        return f"Split ({self.method}, {self.strategy})"


# ==================== 排序、聚合、校验 ====================


@dataclass(frozen=True)
class SortConfig(NodeConfig):
    node_type = NodeType.SORT

    criteria: tuple[SortCriteria, ...] = nested(SortCriteria, default=())

    def get_schema(self) -> Schema:
        return {"criteria": FieldRule(type="array", required=True, min_length=1)}

    def get_summary(self) -> str:
        if count_of(self.criteria) == 0 or not isinstance(self.criteria[0], SortCriteria):
            return "No sort criteria"
        first = self.criteria[0]
        return f"Sort by {first.field} ({first.order})"


@dataclass(frozen=True)
class AggregateConfig(NodeConfig):
    node_type = NodeType.AGGREGATE

    group_by_key: bool = True
    group_by_fields: tuple[str, ...] = ()
    aggregations: tuple[Aggregation, ...] = nested(Aggregation, default=())

    def get_schema(self) -> Schema:
        return {
            "groupByKey": FieldRule(type="boolean"),
            "groupByFields": FieldRule(type="array"),
            "aggregations": FieldRule(type="array", required=True, min_length=1),
        }

    def get_summary(self) -> str:
        items = self.aggregations if isinstance(self.aggregations, tuple) else ()
        count = sum(1 for a in items if isinstance(a, Aggregation) and a.field)
        return plural(count, "aggregation")


@dataclass(frozen=True)
class ValidateConfig(NodeConfig):
    node_type = NodeType.VALIDATE

    on_failure: str = ValidationFailureAction.SKIP.value
    rules: tuple[ValidationRule, ...] = nested(ValidationRule, default=())

    def get_schema(self) -> Schema:
        return {
            "onFailure": FieldRule(
                type="string", required=True, enum=enum_values(ValidationFailureAction)
            ),
            "rules": FieldRule(type="array", required=True, min_length=1),
        }

    def get_summary(self) -> str:
        items = self.rules if isinstance(self.rules, tuple) else ()
        count = sum(1 for r in items if isinstance(r, ValidationRule) and r.field)
        return f"{plural(count, 'validation')} ({self.on_failure} invalid)"


@dataclass(frozen=True)
class LookupConfig(NodeConfig):
    node_type = NodeType.LOOKUP

    source: str = LookupSource.API.value
    request_url: str = ""
    request_method: str = "GET"
    extract_path: str = ""
    cache_results: bool = True
    cache_ttl: int = field(default=300000, metadata={"wire": "cacheTTL"})

    def get_schema(self) -> Schema:
        return {
            "source": FieldRule(type="string", required=True, enum=enum_values(LookupSource)),
            "requestUrl": FieldRule(
                type="string",
                validator="lookup_request_url",
                message="requestUrl is required when source is api",
            ),
            "requestMethod": FieldRule(type="string"),
            "extractPath": FieldRule(type="string"),
            "cacheResults": FieldRule(type="boolean"),
            "cacheTTL": FieldRule(type="number", minimum=0),
        }

    def get_summary(self) -> str:
        if self.source == LookupSource.API.value and self.request_url:
            return f"Lookup: {self.request_method} {self.request_url}"
        return f"Lookup from {self.source}"
