"""节点 / 触发器配置目录

按类型标签分派到具体配置类（封闭的联合类型）：

>>> config = create_config("deduplicate", {"scope": "field", "fields": ["email"]})
>>> config.validate()
[]
"""

from collections.abc import Mapping
from typing import Any

from pipestation.domain.configs.base import ConfigRecord, KeyValue, NodeConfig, SchemaConfig
from pipestation.domain.configs.input import (
    FileWatchConfig,
    HttpRequestConfig,
    ManualInputConfig,
    WebhookConfig,
)
from pipestation.domain.configs.output import (
    DownloadConfig,
    FileAppendConfig,
    HttpPostConfig,
    SendEmailConfig,
)
from pipestation.domain.configs.processing import (
    AggregateConfig,
    ConditionConfig,
    DeduplicateConfig,
    DistinctConfig,
    FilterConfig,
    IntersectConfig,
    JoinConfig,
    LookupConfig,
    LoopConfig,
    SortConfig,
    SplitConfig,
    SwitchConfig,
    UnionConfig,
    UntilLoopConfig,
    ValidateConfig,
)
from pipestation.domain.configs.transform import (
    AiProcessorConfig,
    CustomCodeConfig,
    FormatConfig,
    ParseConfig,
    RegexPatternConfig,
    StringBuilderConfig,
    TransformConfig,
    UrlBuilderConfig,
)
from pipestation.domain.configs.trigger import (
    ManualTriggerConfig,
    ScheduleTriggerConfig,
    TriggerConfig,
    WebhookTriggerConfig,
)
from pipestation.domain.exceptions import ValidationError
from pipestation.domain.value_objects.node_type import NodeType
from pipestation.domain.value_objects.trigger_type import TriggerType

_NODE_CONFIG_CLASSES: tuple[type[NodeConfig], ...] = (
    FileWatchConfig,
    ManualInputConfig,
    WebhookConfig,
    HttpRequestConfig,
    AiProcessorConfig,
    StringBuilderConfig,
    DeduplicateConfig,
    FilterConfig,
    SwitchConfig,
    UrlBuilderConfig,
    UntilLoopConfig,
    ConditionConfig,
    JoinConfig,
    FormatConfig,
    LookupConfig,
    IntersectConfig,
    LoopConfig,
    ParseConfig,
    RegexPatternConfig,
    TransformConfig,
    AggregateConfig,
    DistinctConfig,
    ValidateConfig,
    SplitConfig,
    SortConfig,
    CustomCodeConfig,
    UnionConfig,
    HttpPostConfig,
    SendEmailConfig,
    DownloadConfig,
    FileAppendConfig,
)

NODE_CONFIGS: dict[NodeType, type[NodeConfig]] = {
    cls.node_type: cls for cls in _NODE_CONFIG_CLASSES
}

TRIGGER_CONFIGS: dict[TriggerType, type[TriggerConfig]] = {
    TriggerType.MANUAL: ManualTriggerConfig,
    TriggerType.WEBHOOK: WebhookTriggerConfig,
    TriggerType.SCHEDULE: ScheduleTriggerConfig,
}


def create_config(node_type: str | NodeType, init: Mapping[str, Any] | None = None) -> NodeConfig:
    """根据节点类型创建配置实例

    抛出：
        ValidationError: 未知的节点类型
    """
    parsed = NodeType.parse(node_type) if isinstance(node_type, str) else None
    if parsed is None:
        raise ValidationError([f"Unknown node type: {node_type}"])
    return NODE_CONFIGS[parsed].from_dict(init)


def create_trigger_config(
    trigger_type: str | TriggerType, init: Mapping[str, Any] | None = None
) -> TriggerConfig:
    """根据触发器类型创建配置实例

    抛出：
        ValidationError: 未知的触发器类型
    """
    try:
        parsed = TriggerType(trigger_type)
    except ValueError:
        raise ValidationError([f"Unknown trigger type: {trigger_type}"]) from None
    return TRIGGER_CONFIGS[parsed].from_dict(init)


__all__ = [
    "ConfigRecord",
    "KeyValue",
    "NodeConfig",
    "SchemaConfig",
    "TriggerConfig",
    "NODE_CONFIGS",
    "TRIGGER_CONFIGS",
    "create_config",
    "create_trigger_config",
    *(cls.__name__ for cls in _NODE_CONFIG_CLASSES),
    "ManualTriggerConfig",
    "WebhookTriggerConfig",
    "ScheduleTriggerConfig",
]
