"""处理类节点配置（记录内容转换）

包含：AiProcessor、StringBuilder、UrlBuilder、Format、Parse、RegexPattern、
Transform、CustomCode
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlparse

from pipestation.domain.configs.base import (
    ConfigRecord,
    KeyValue,
    NodeConfig,
    clip,
    count_of,
    enum_values,
    nested,
)
from pipestation.domain.value_objects.field_rule import FieldRule, Schema
from pipestation.domain.value_objects.node_type import NodeType


class FormatOutput(str, Enum):
    JSON = "application/json"
    CSV = "text/csv"
    XML = "application/xml"
    TEXT = "text/plain"
    HTML = "text/html"
    MARKDOWN = "text/markdown"
    XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    PDF = "application/pdf"
    CUSTOM = "custom"

    @classmethod
    def label_of(cls, value: Any, default: str = "UNKNOWN") -> str:
        """MIME 值 → 枚举名（CSV、JSON ...）"""
        for member in cls:
            if member.value == value:
                return member.name
        return default


class ParseFormat(str, Enum):
    JSON = "json"
    CSV = "csv"
    HTML = "html"
    XML = "xml"
    YAML = "yaml"


class ParseErrorAction(str, Enum):
    SKIP = "skip"
    FAIL = "fail"
    TAG = "tag"


class TransformOperation(str, Enum):
    COPY = "copy"
    TEMPLATE = "template"
    CALCULATE = "calculate"
    CONCAT = "concat"
    SPLIT = "split"
    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    TRIM = "trim"


class CustomCodeMode(str, Enum):
    MAP = "map"
    FILTER = "filter"
    REDUCE = "reduce"
    TRANSFORM = "transform"


# ==================== 嵌套记录 ====================


@dataclass(frozen=True)
class StringPart(ConfigRecord):
    type: str = "text"
    value: str = ""


@dataclass(frozen=True)
class RegexFlags(ConfigRecord):
    """正则标志；g/u/y 仅供编辑器展示，编译时只有 i/m/s 生效"""

    g: bool = True
    m: bool = False
    s: bool = False
    i: bool = False
    u: bool = False
    y: bool = False

    def to_re_flags(self) -> int:
        flags = 0
        if self.i:
            flags |= re.IGNORECASE
        if self.m:
            flags |= re.MULTILINE
        if self.s:
            flags |= re.DOTALL
        return flags


@dataclass(frozen=True)
class RegexPattern(ConfigRecord):
    field: str = ""
    pattern: str = ""
    replacement: str = ""
    extract: bool = False
    enabled: bool = True
    flags: RegexFlags = nested(RegexFlags, default_factory=RegexFlags)

    def compile(self) -> re.Pattern[str]:
        flags = self.flags.to_re_flags() if isinstance(self.flags, RegexFlags) else 0
        return re.compile(self.pattern, flags)


@dataclass(frozen=True)
class Transformation(ConfigRecord):
    target_field: str = ""
    source_field: str = ""
    operation: str = TransformOperation.COPY.value
    options: dict[str, Any] = field(default_factory=dict)


# ==================== 变体 ====================


@dataclass(frozen=True)
class AiProcessorConfig(NodeConfig):
    node_type = NodeType.AI_PROCESSOR

    prompt: str = ""
    input_format: str = "json"
    output_format: str = "json"
    model: str = "gemini-pro"
    temperature: float = 0.7
    max_tokens: int = 1000

    def get_schema(self) -> Schema:
        return {
            "prompt": FieldRule(type="string", required=True, min_length=1),
            "inputFormat": FieldRule(type="string"),
            "outputFormat": FieldRule(type="string"),
            "model": FieldRule(type="string"),
            "temperature": FieldRule(type="number", minimum=0, maximum=1),
            "maxTokens": FieldRule(type="number", minimum=1),
        }

    def get_summary(self) -> str:
        if self.prompt:
            return f"AI: {str(self.prompt)[:30]}..."
        return "AI Processor"


@dataclass(frozen=True)
class StringBuilderConfig(NodeConfig):
    node_type = NodeType.STRING_BUILDER

    parts: tuple[StringPart, ...] = nested(StringPart, default=())

    def get_schema(self) -> Schema:
        return {"parts": FieldRule(type="array", required=True, min_length=1)}

    def get_summary(self) -> str:
        return f"Build string ({count_of(self.parts)} parts)"


@dataclass(frozen=True)
class UrlBuilderConfig(NodeConfig):
    node_type = NodeType.URL_BUILDER

    base_url: str = ""
    path_segments: tuple[str, ...] = ()
    query_params: tuple[KeyValue, ...] = nested(KeyValue, default=())

    def get_schema(self) -> Schema:
        return {
            "baseUrl": FieldRule(type="string", required=True, format="url"),
            "pathSegments": FieldRule(type="array"),
            "queryParams": FieldRule(type="array"),
        }

    def get_summary(self) -> str:
        if not self.base_url:
            return "No base URL"
        try:
            host = urlparse(str(self.base_url)).hostname
        except ValueError:
            host = None
        if not host:
            return "Invalid base URL"

        segments = count_of(self.path_segments)
        params = count_of(self.query_params)
        paths = f"/{segments} path{'' if segments == 1 else 's'}" if segments else ""
        query = f" +{params} param{'' if params == 1 else 's'}" if params else ""
        return clip(f"{host}{paths}{query}")


@dataclass(frozen=True)
class FormatConfig(NodeConfig):
    node_type = NodeType.FORMAT

    format: str = FormatOutput.CSV.value
    csv_include_headers: bool = True
    csv_delimiter: str = ","
    csv_quote: str = '"'
    json_pretty: bool = True
    template: str = ""
    field_order: str = ""

    def get_schema(self) -> Schema:
        return {
            "format": FieldRule(type="string", required=True, enum=enum_values(FormatOutput)),
            "csvIncludeHeaders": FieldRule(type="boolean"),
            "csvDelimiter": FieldRule(type="string"),
            "csvQuote": FieldRule(type="string"),
            "jsonPretty": FieldRule(type="boolean"),
            "template": FieldRule(type="string"),
            "fieldOrder": FieldRule(type="string"),
        }

    def get_summary(self) -> str:
        return f"Format as {FormatOutput.label_of(self.format, str(self.format).upper())}"


@dataclass(frozen=True)
class ParseConfig(NodeConfig):
    node_type = NodeType.PARSE

    input_field: str = "raw_data"
    format: str = ParseFormat.JSON.value
    on_error: str = ParseErrorAction.SKIP.value
    json_path: str = ""
    csv_delimiter: str = ","
    csv_has_headers: bool = True
    html_selectors: dict[str, Any] = field(default_factory=dict)
    flatten: bool = True

    def get_schema(self) -> Schema:
        return {
            "inputField": FieldRule(type="string", required=True),
            "format": FieldRule(type="string", required=True, enum=enum_values(ParseFormat)),
            "onError": FieldRule(type="string", enum=enum_values(ParseErrorAction)),
            "jsonPath": FieldRule(type="string"),
            "csvDelimiter": FieldRule(type="string"),
            "csvHasHeaders": FieldRule(type="boolean"),
            "htmlSelectors": FieldRule(type="object"),
            "flatten": FieldRule(type="boolean"),
        }

    def validate(self) -> list[str]:
        errors = super().validate()
        if self.format == ParseFormat.CSV.value and (
            not isinstance(self.csv_delimiter, str) or len(self.csv_delimiter) != 1
        ):
            errors.append("CSV delimiter must be a single character")
        if self.format == ParseFormat.HTML.value and not self.html_selectors:
            errors.append("At least one HTML selector is required")
        return errors

    def get_summary(self) -> str:
        source = f" from {self.input_field}" if self.input_field != "raw_data" else ""
        path = f" → {self.json_path}" if self.json_path else ""
        return clip(f"Parse {str(self.format).upper()}{source}{path}")


@dataclass(frozen=True)
class RegexPatternConfig(NodeConfig):
    node_type = NodeType.REGEX_PATTERN

    patterns: tuple[RegexPattern, ...] = nested(RegexPattern, default=())

    def get_schema(self) -> Schema:
        return {"patterns": FieldRule(type="array", required=True, min_length=1)}

    def validate(self) -> list[str]:
        errors = super().validate()
        if not isinstance(self.patterns, tuple):
            return errors

        for index, item in enumerate(self.patterns, start=1):
            if not isinstance(item, RegexPattern):
                errors.append(f"Pattern {index}: must be an object")
                continue
            if not item.field:
                errors.append(f"Pattern {index}: field is required")
            if not item.pattern:
                errors.append(f"Pattern {index}: pattern is required")
                continue
            try:
                item.compile()
            except (re.error, TypeError) as exc:
                errors.append(f"Pattern {index}: invalid regex - {exc}")
        return errors

    def get_summary(self) -> str:
        items = self.patterns if isinstance(self.patterns, tuple) else ()
        complete = [p for p in items if isinstance(p, RegexPattern) and p.field and p.pattern]
        if not complete:
            return "No patterns configured"
        first = complete[0]
        action = "Extract" if first.extract else "Replace"
        more = f" +{len(complete) - 1}" if len(complete) > 1 else ""
        return clip(f"{action} in {first.field}{more}")


@dataclass(frozen=True)
class TransformConfig(NodeConfig):
    node_type = NodeType.TRANSFORM

    transformations: tuple[Transformation, ...] = nested(Transformation, default=())
    preserve_original: bool = False
    skip_on_error: bool = False
    error_field: str = "_transformError"

    def get_schema(self) -> Schema:
        return {
            "transformations": FieldRule(type="array", required=True, min_length=1),
            "preserveOriginal": FieldRule(type="boolean"),
            "skipOnError": FieldRule(type="boolean"),
            "errorField": FieldRule(type="string"),
        }

    def validate(self) -> list[str]:
        """每个转换都必须同时指定 sourceField 与 targetField"""
        errors = super().validate()
        if not isinstance(self.transformations, tuple):
            return errors

        for index, item in enumerate(self.transformations, start=1):
            if not isinstance(item, Transformation):
                errors.append(f"Transformation {index}: must be an object")
                continue
            if not item.target_field:
                errors.append(f"Transformation {index}: targetField is required")
            if not item.source_field:
                errors.append(f"Transformation {index}: sourceField is required")
        return errors

    def get_summary(self) -> str:
        items = self.transformations if isinstance(self.transformations, tuple) else ()
        complete = [
            t for t in items if isinstance(t, Transformation) and t.target_field and t.source_field
        ]
        if not complete:
            return "No transformations"
        first = complete[0]
        more = f" +{len(complete) - 1}" if len(complete) > 1 else ""
        return clip(f"{first.source_field} → {first.target_field}{more}")


@dataclass(frozen=True)
class CustomCodeConfig(NodeConfig):
    node_type = NodeType.CUSTOM_CODE

    code: str = ""
    mode: str = CustomCodeMode.MAP.value
    sandbox: bool = True
    timeout: int = 5000

    def get_schema(self) -> Schema:
        return {
            "code": FieldRule(type="string", required=True, min_length=1),
            "mode": FieldRule(type="string", required=True, enum=enum_values(CustomCodeMode)),
            "sandbox": FieldRule(type="boolean"),
            "timeout": FieldRule(type="number", minimum=0),
        }

    def get_summary(self) -> str:
        return f"JS Code ({self.mode})"
