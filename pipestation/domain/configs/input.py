"""输入类节点配置：文件监听、手动输入、Webhook、HTTP 请求"""

from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4

from pipestation.domain.configs.base import KeyValue, NodeConfig, count_of, enum_values, nested
from pipestation.domain.value_objects.field_rule import FieldRule, Schema
from pipestation.domain.value_objects.node_type import NodeType
from pipestation.domain.value_objects.trigger_type import HttpMethod


class WatchType(str, Enum):
    MODIFIED = "modified"
    CREATED = "created"
    DELETED = "deleted"


class MimeType(str, Enum):
    TEXT_PLAIN = "text/plain"
    TEXT_CSV = "text/csv"
    APPLICATION_JSON = "application/json"
    TEXT_HTML = "text/html"
    APPLICATION_XML = "application/xml"


@dataclass(frozen=True)
class FileWatchConfig(NodeConfig):
    """监听目录变化并触发流水线"""

    node_type = NodeType.FILE_WATCH

    directory_name: str = ""
    watch_mime_types: tuple[str, ...] = (
        MimeType.TEXT_CSV.value,
        MimeType.TEXT_PLAIN.value,
        MimeType.APPLICATION_JSON.value,
    )
    watch_type: str = WatchType.MODIFIED.value

    def get_schema(self) -> Schema:
        return {
            "directoryName": FieldRule(type="string", required=True, min_length=1),
            "watchMimeTypes": FieldRule(type="array", required=True, min_length=1),
            "watchType": FieldRule(type="string", required=True, enum=enum_values(WatchType)),
        }

    def get_summary(self) -> str:
        if self.directory_name:
            return f"Watching: {self.directory_name}"
        return "No directory selected"


@dataclass(frozen=True)
class ManualInputConfig(NodeConfig):
    node_type = NodeType.MANUAL_INPUT

    allowed_mime_types: tuple[str, ...] = (
        MimeType.TEXT_PLAIN.value,
        MimeType.TEXT_CSV.value,
        MimeType.APPLICATION_JSON.value,
    )
    data: str = ""

    def get_schema(self) -> Schema:
        return {
            "allowedMimeTypes": FieldRule(type="array", required=True, min_length=1),
            "data": FieldRule(type="string"),
        }

    def get_summary(self) -> str:
        return f"Manual input ({count_of(self.allowed_mime_types)} types)"


@dataclass(frozen=True)
class WebhookConfig(NodeConfig):
    """Webhook 输入节点（编辑器侧的端点描述，真正的 token 由 Webhook 实体管理）"""

    node_type = NodeType.WEBHOOK

    webhook_id: str = field(default_factory=lambda: str(uuid4()))
    method: str = HttpMethod.POST.value
    secret: str = ""

    def get_schema(self) -> Schema:
        return {
            "webhookId": FieldRule(type="string", required=True, min_length=1),
            "method": FieldRule(type="string", required=True, enum=HttpMethod.values()),
            "secret": FieldRule(type="string"),
        }

    def get_summary(self) -> str:
        return f"Webhook ID: ...{str(self.webhook_id)[-6:]}"


@dataclass(frozen=True)
class HttpRequestConfig(NodeConfig):
    """从外部 HTTP 端点拉取数据"""

    node_type = NodeType.HTTP_REQUEST

    method: str = HttpMethod.GET.value
    url: str = ""
    headers: tuple[KeyValue, ...] = nested(KeyValue, default=())
    query_params: tuple[KeyValue, ...] = nested(KeyValue, default=())
    body: str = ""
    timeout: int = 10000

    def get_schema(self) -> Schema:
        return {
            "method": FieldRule(type="string", required=True, enum=HttpMethod.values()),
            "url": FieldRule(type="string", required=True, format="url"),
            "headers": FieldRule(type="array"),
            "queryParams": FieldRule(type="array"),
            "body": FieldRule(type="string"),
            "timeout": FieldRule(type="number", minimum=1000, maximum=300000),
        }

    def get_summary(self) -> str:
        return f"{self.method} {self.url}" if self.url else "No URL configured"
