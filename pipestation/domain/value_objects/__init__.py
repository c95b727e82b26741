"""Domain 值对象

导出所有领域值对象，方便其他模块导入
"""

from pipestation.domain.value_objects.field_rule import FieldRule, Schema
from pipestation.domain.value_objects.node_type import NodeCategory, NodeType
from pipestation.domain.value_objects.position import Position
from pipestation.domain.value_objects.trigger_type import HttpMethod, TriggerType

__all__ = [
    "FieldRule",
    "HttpMethod",
    "NodeCategory",
    "NodeType",
    "Position",
    "Schema",
    "TriggerType",
]
