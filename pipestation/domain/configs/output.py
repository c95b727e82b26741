"""输出类节点配置：HTTP POST、发送邮件、下载、追加写文件"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pipestation.domain.configs.base import (
    KeyValue,
    NodeConfig,
    clip,
    count_of,
    enum_values,
    nested,
)
from pipestation.domain.configs.transform import FormatOutput
from pipestation.domain.services.schema_validator import register_predicate
from pipestation.domain.value_objects.field_rule import FieldRule, Schema
from pipestation.domain.value_objects.node_type import NodeType
from pipestation.domain.value_objects.trigger_type import HttpMethod


class HttpContentType(str, Enum):
    JSON = "application/json"
    FORM_URLENCODED = "application/x-www-form-urlencoded"
    FORM_DATA = "multipart/form-data"
    TEXT = "text/plain"
    XML = "application/xml"
    CSV = "text/csv"
    HTML = "text/html"
    MARKDOWN = "text/markdown"


class TimestampFormat(str, Enum):
    ISO = "iso"
    UNIX = "unix"
    YYYYMMDD = "yyyymmdd"


_EXTENSIONS = {
    FormatOutput.JSON.value: ".json",
    FormatOutput.CSV.value: ".csv",
    FormatOutput.XML.value: ".xml",
    FormatOutput.TEXT.value: ".txt",
    FormatOutput.HTML.value: ".html",
    FormatOutput.MARKDOWN.value: ".md",
    FormatOutput.XLSX.value: ".xlsx",
    FormatOutput.PDF.value: ".pdf",
}

# 摘要中使用的时间戳占位符（摘要必须是纯函数，不读取当前时间）
_TIMESTAMP_PLACEHOLDERS = {
    TimestampFormat.ISO.value: "YYYY-MM-DDTHH-mm-ss",
    TimestampFormat.UNIX.value: "<unix>",
    TimestampFormat.YYYYMMDD.value: "YYYYMMDD",
}


@register_predicate("valid_regex")
def _compiles(value: Any, record: Mapping[str, Any]) -> bool:
    if not value:
        return True
    try:
        re.compile(value)
    except (re.error, TypeError):
        return False
    return True


@dataclass(frozen=True)
class HttpPostConfig(NodeConfig):
    node_type = NodeType.HTTP_POST

    method: str = HttpMethod.POST.value
    url: str = ""
    headers: tuple[KeyValue, ...] = nested(KeyValue, default=())
    content_type: str = HttpContentType.JSON.value
    body_fields: tuple[KeyValue, ...] = nested(KeyValue, default=())
    raw_body: str = ""

    def get_schema(self) -> Schema:
        return {
            "method": FieldRule(type="string", enum=HttpMethod.values()),
            "url": FieldRule(type="string", required=True, format="url"),
            "headers": FieldRule(type="array"),
            "contentType": FieldRule(type="string", enum=enum_values(HttpContentType)),
            "bodyFields": FieldRule(type="array"),
            "rawBody": FieldRule(type="string"),
        }

    def validate(self) -> list[str]:
        errors = super().validate()
        if (
            self.content_type == HttpContentType.FORM_URLENCODED.value
            and count_of(self.body_fields) == 0
        ):
            errors.append("At least one body field is required for form content type")
        return errors

    def get_summary(self) -> str:
        if not self.url:
            return "No URL configured"
        url = str(self.url)
        if len(url) > 50:
            url = url[:47] + "..."
        content_type = "JSON"
        for member in HttpContentType:
            if member.value == self.content_type:
                content_type = member.name
        return clip(f"{self.method} {url} ({content_type})")


@dataclass(frozen=True)
class SendEmailConfig(NodeConfig):
    node_type = NodeType.SEND_EMAIL

    recipients: tuple[str, ...] = ()
    subject: str = "Pipeline Results"
    body: str = ""
    body_template: str = ""

    def get_schema(self) -> Schema:
        return {
            "recipients": FieldRule(type="array", required=True, min_length=1),
            "subject": FieldRule(type="string"),
            "body": FieldRule(type="string"),
            "bodyTemplate": FieldRule(type="string"),
        }

    def get_summary(self) -> str:
        count = count_of(self.recipients)
        if count == 1:
            return f"Email to {self.recipients[0]}"
        return f"Email to {count} recipients"


@dataclass(frozen=True)
class DownloadConfig(NodeConfig):
    node_type = NodeType.DOWNLOAD

    folder: str = ""
    filename: str = "data"
    prefix: str = ""
    suffix: str = ""
    include_timestamp: bool = False
    timestamp_format: str = TimestampFormat.ISO.value
    replace_pattern: str = ""
    replace_with: str = "_"
    format: str = FormatOutput.JSON.value

    def get_schema(self) -> Schema:
        return {
            "folder": FieldRule(type="string"),
            "filename": FieldRule(type="string", required=True),
            "prefix": FieldRule(type="string"),
            "suffix": FieldRule(type="string"),
            "includeTimestamp": FieldRule(type="boolean"),
            "timestampFormat": FieldRule(type="string", enum=enum_values(TimestampFormat)),
            "replacePattern": FieldRule(
                type="string",
                validator="valid_regex",
                message="replacePattern must be a valid regular expression",
            ),
            "replaceWith": FieldRule(type="string"),
            "format": FieldRule(type="string", enum=enum_values(FormatOutput)),
        }

    def get_extension(self) -> str:
        if not isinstance(self.format, str):
            return ""
        return _EXTENSIONS.get(self.format, "")

    def build_filename(self, now: datetime | None = None) -> str:
        """生成文件名

        参数：
            now: 时间戳来源；为 None 时使用占位符（用于预览）
        """
        name = str(self.filename)
        if self.replace_pattern and _compiles(self.replace_pattern, {}):
            name = re.sub(self.replace_pattern, str(self.replace_with), name)
        name = f"{self.prefix}{name}{self.suffix}"

        if self.include_timestamp:
            name = f"{name}_{self._timestamp(now)}"
        return f"{name}{self.get_extension()}"

    def _timestamp(self, now: datetime | None) -> str:
        if now is None:
            return _TIMESTAMP_PLACEHOLDERS.get(str(self.timestamp_format), "<timestamp>")
        if self.timestamp_format == TimestampFormat.UNIX.value:
            return str(int(now.timestamp() * 1000))
        if self.timestamp_format == TimestampFormat.YYYYMMDD.value:
            return now.strftime("%Y%m%d")
        return now.strftime("%Y-%m-%dT%H-%M-%S")

    def get_summary(self) -> str:
        return clip(f"Download as {self.build_filename()}")


@dataclass(frozen=True)
class FileAppendConfig(NodeConfig):
    node_type = NodeType.FILE_APPEND

    path: str = ""
    file_handle_id: str | None = None
    format: str = FormatOutput.CSV.value
    create_if_missing: bool = True
    add_header: bool = True
    encoding: str = "utf8"

    def get_schema(self) -> Schema:
        return {
            "path": FieldRule(type="string", required=True, min_length=1),
            "format": FieldRule(type="string", enum=enum_values(FormatOutput)),
            "createIfMissing": FieldRule(type="boolean"),
            "addHeader": FieldRule(type="boolean"),
            "encoding": FieldRule(type="string"),
        }

    def get_summary(self) -> str:
        if not self.path:
            return "No file path configured"
        create = " (create)" if self.create_if_missing else ""
        return clip(f"Append {FormatOutput.label_of(self.format)} to {self.path}{create}")
