"""PipelineNode 实体 - 流水线中的一个步骤

业务定义：
- type 选择配置变体（NodeType → NodeConfig 子类）
- title 缺省为节点类型的显示标题
- summary 缺省为 config.get_summary()
- inputs / outputs 为有序的端口描述列表
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from pipestation.domain.configs import NodeConfig, create_config
from pipestation.domain.exceptions import ValidationError
from pipestation.domain.value_objects.node_type import NodeType
from pipestation.domain.value_objects.position import Position


@dataclass(frozen=True)
class PipelineNode:
    """PipelineNode 实体

    属性说明：
    - id: 流水线内唯一
    - type: 节点类型
    - title: 显示名称
    - summary: 用户填写的说明，缺省为配置摘要
    - position: 画布坐标
    - inputs / outputs: 端口列表
    - config: 配置变体实例
    """

    id: str
    type: NodeType
    title: str
    config: NodeConfig
    summary: str | None = None
    position: Position = field(default_factory=Position)
    inputs: tuple[Any, ...] = ()
    outputs: tuple[Any, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PipelineNode":
        """从请求 / 存储的字典构造节点

        抛出：
            ValidationError: 未知的节点类型
        """
        node_type = NodeType.parse(data.get("type")) if isinstance(data.get("type"), str) else None
        if node_type is None:
            raise ValidationError([f"Unknown node type: {data.get('type')}"])

        config_init = data.get("config")
        config = create_config(node_type, config_init if isinstance(config_init, Mapping) else None)

        position = data.get("position")
        return cls(
            id=str(data.get("id") or uuid4().hex[:21]),
            type=node_type,
            title=str(data.get("title") or node_type.display_title),
            summary=data.get("summary") or config.get_summary(),
            position=Position.from_dict(position if isinstance(position, Mapping) else None),
            inputs=tuple(data.get("inputs") or ()),
            outputs=tuple(data.get("outputs") or ()),
            config=config,
        )

    @property
    def config_summary(self) -> str:
        return self.config.get_summary()

    def validate_config(self) -> list[str]:
        return self.config.validate()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "summary": self.summary,
            "position": self.position.to_dict(),
            "inputs": list(self.inputs),
            "outputs": list(self.outputs),
            "config": self.config.to_dict(),
        }
