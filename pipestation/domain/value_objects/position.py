"""Position 值对象 - 节点在画布上的位置

设计原则：
- 值对象：不可变，通过值比较相等性
- 允许负坐标（画布可以向任意方向延伸）
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Position:
    """Position 值对象

    示例：
    >>> Position(x=100, y=200) == Position.from_dict({"x": 100, "y": 200})
    True
    """

    x: float = 0
    y: float = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Position":
        if not data:
            return cls()
        return cls(x=data.get("x", 0) or 0, y=data.get("y", 0) or 0)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}
