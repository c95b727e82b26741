"""Trigger 值对象 - 流水线的事件来源"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pipestation.domain.configs import TriggerConfig, create_trigger_config
from pipestation.domain.exceptions import ValidationError
from pipestation.domain.value_objects.trigger_type import TriggerType


@dataclass(frozen=True)
class Trigger:
    type: TriggerType
    config: TriggerConfig

    @classmethod
    def from_dict(cls, data: Any) -> "Trigger":
        """抛出：ValidationError（结构错误或未知类型）"""
        if not isinstance(data, Mapping):
            raise ValidationError(["trigger must be an object"])

        config_init = data.get("config")
        config = create_trigger_config(
            data.get("type"), config_init if isinstance(config_init, Mapping) else None
        )
        return cls(type=config.trigger_type, config=config)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "config": self.config.to_dict()}
