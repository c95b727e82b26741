"""Pipe 实体 - 节点端口之间的有向连接

业务定义：
- source_id / target_id 必须引用同一流水线中的节点
- source_side / target_side 标识连接的端口
- 允许自环与环路（Loop / UntilLoop 是一等节点类型），模型不检查无环性
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from uuid import uuid4


@dataclass(frozen=True)
class Pipe:
    """Pipe 实体

    属性说明：
    - id: 唯一标识符
    - source_id / source_side: 起点节点与端口
    - target_id / target_side: 终点节点与端口
    """

    id: str
    source_id: str
    target_id: str
    source_side: str = "output"
    target_side: str = "input"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Pipe":
        return cls(
            id=str(data.get("id") or f"pipe_{uuid4().hex[:8]}"),
            source_id=str(data.get("sourceId") or ""),
            target_id=str(data.get("targetId") or ""),
            source_side=str(data.get("sourceSide") or "output"),
            target_side=str(data.get("targetSide") or "input"),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "sourceId": self.source_id,
            "sourceSide": self.source_side,
            "targetId": self.target_id,
            "targetSide": self.target_side,
        }
