"""触发器配置：手动、Webhook、定时

业务定义：
- Trigger.config 的形状由 Trigger.type 决定
- 定时触发只做定义、校验与摘要（cron 表达式转换），不在本服务内执行调度
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, ClassVar

from pipestation.domain.configs.base import SchemaConfig, enum_values
from pipestation.domain.services.schema_validator import is_empty, register_predicate
from pipestation.domain.value_objects.field_rule import FieldRule, Schema
from pipestation.domain.value_objects.trigger_type import HttpMethod, TriggerType


class ScheduleFrequency(str, Enum):
    ONCE = "once"
    MINUTELY = "minutely"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class DayOfWeek(IntEnum):
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


TIME_OF_DAY_PATTERN = r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$"


# ==================== 跨字段谓词 ====================


@register_predicate("schedule_days_of_week")
def _weekly_days(value: Any, record: Mapping[str, Any]) -> bool:
    if record.get("frequency") == ScheduleFrequency.WEEKLY.value and is_empty(value):
        return False
    if is_empty(value):
        return True
    return all(
        isinstance(day, int) and not isinstance(day, bool) and 0 <= day <= 6 for day in value
    )


@register_predicate("schedule_cron_expression")
def _custom_cron(value: Any, record: Mapping[str, Any]) -> bool:
    if record.get("frequency") != ScheduleFrequency.CUSTOM.value:
        return True
    return isinstance(value, str) and len(value.split()) == 5


@register_predicate("schedule_start_date")
def _start_date(value: Any, record: Mapping[str, Any]) -> bool:
    if is_empty(value):
        return record.get("frequency") != ScheduleFrequency.ONCE.value
    try:
        datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


# ==================== 配置 ====================


@dataclass(frozen=True)
class TriggerConfig(SchemaConfig):
    """触发器配置基类"""

    trigger_type: ClassVar[TriggerType]

    def to_cron_expression(self) -> str:
        return ""


@dataclass(frozen=True)
class ManualTriggerConfig(TriggerConfig):
    trigger_type = TriggerType.MANUAL

    def get_summary(self) -> str:
        return "Run manually"


@dataclass(frozen=True)
class WebhookTriggerConfig(TriggerConfig):
    trigger_type = TriggerType.WEBHOOK

    method: str = HttpMethod.POST.value
    secret: str = ""

    def get_schema(self) -> Schema:
        return {
            "method": FieldRule(type="string", required=True, enum=HttpMethod.values()),
            "secret": FieldRule(type="string"),
        }

    def get_summary(self) -> str:
        return f"On {self.method} webhook"


@dataclass(frozen=True)
class ScheduleTriggerConfig(TriggerConfig):
    """定时触发配置

    属性说明：
    - frequency: 频率（once/minutely/hourly/daily/weekly/monthly/custom）
    - interval: minutely/hourly 的间隔
    - time: 每天的执行时间（HH:MM，24 小时制）
    - days_of_week: weekly 的星期列表（0=周日）
    - day_of_month: monthly 的日期（1-31）
    - cron_expression: custom 的 cron 表达式（5 段）
    - start_date / end_date: ISO 8601 时间字符串；once 需要 start_date
    """

    trigger_type = TriggerType.SCHEDULE

    frequency: str = ScheduleFrequency.DAILY.value
    interval: int = 1
    time: str = "09:00"
    days_of_week: tuple[int, ...] = (DayOfWeek.MONDAY.value,)
    day_of_month: int = 1
    cron_expression: str = ""
    start_date: str | None = None
    end_date: str | None = None
    timezone: str = "UTC"
    enabled: bool = True

    def get_schema(self) -> Schema:
        return {
            "frequency": FieldRule(
                type="string", required=True, enum=enum_values(ScheduleFrequency)
            ),
            "interval": FieldRule(type="number", minimum=1),
            "time": FieldRule(type="string", pattern=TIME_OF_DAY_PATTERN),
            "daysOfWeek": FieldRule(
                type="array",
                validator="schedule_days_of_week",
                message="daysOfWeek must list days between 0 and 6 for weekly frequency",
            ),
            "dayOfMonth": FieldRule(type="number", minimum=1, maximum=31),
            "cronExpression": FieldRule(
                type="string",
                validator="schedule_cron_expression",
                message="cronExpression with 5 fields is required for custom frequency",
            ),
            "startDate": FieldRule(
                type="string",
                validator="schedule_start_date",
                message="startDate must be an ISO 8601 datetime (required for once frequency)",
            ),
            "endDate": FieldRule(type="string"),
            "timezone": FieldRule(type="string"),
            "enabled": FieldRule(type="boolean"),
        }

    def get_summary(self) -> str:
        if not self.enabled:
            return "Schedule disabled"

        frequency = self.frequency
        if frequency == ScheduleFrequency.ONCE.value:
            return f"Run once at {self.start_date or 'unspecified time'}"
        if frequency == ScheduleFrequency.MINUTELY.value:
            return "Every minute" if self.interval == 1 else f"Every {self.interval} minutes"
        if frequency == ScheduleFrequency.HOURLY.value:
            return "Every hour" if self.interval == 1 else f"Every {self.interval} hours"
        if frequency == ScheduleFrequency.DAILY.value:
            return f"Daily at {self.time}"
        if frequency == ScheduleFrequency.WEEKLY.value:
            return f"Weekly on {self._day_names()} at {self.time}"
        if frequency == ScheduleFrequency.MONTHLY.value:
            return f"Monthly on day {self.day_of_month} at {self.time}"
        if frequency == ScheduleFrequency.CUSTOM.value:
            return f"Cron: {self.cron_expression}"
        return "Schedule configured"

    def _day_names(self) -> str:
        names = []
        days = self.days_of_week if isinstance(self.days_of_week, tuple) else ()
        for day in days:
            try:
                names.append(DayOfWeek(day).name[:3].capitalize())
            except ValueError:
                names.append(str(day))
        return ", ".join(names)

    def to_cron_expression(self) -> str:
        """转换为 5 段 cron 表达式

        once 返回空字符串；需要执行时间的频率在 time 不是 HH:MM 时也返回空字符串
        """
        frequency = self.frequency
        if frequency == ScheduleFrequency.CUSTOM.value:
            return self.cron_expression if isinstance(self.cron_expression, str) else ""
        if frequency == ScheduleFrequency.MINUTELY.value:
            return f"*/{self.interval} * * * *"

        clock = self._clock()
        if clock is None:
            return ""
        hour, minute = clock
        if frequency == ScheduleFrequency.HOURLY.value:
            return f"{minute} */{self.interval} * * *"
        if frequency == ScheduleFrequency.DAILY.value:
            return f"{minute} {hour} * * *"
        if frequency == ScheduleFrequency.WEEKLY.value:
            days = self.days_of_week if isinstance(self.days_of_week, tuple) else ()
            if not days:
                return ""
            return f"{minute} {hour} * * {','.join(str(day) for day in days)}"
        if frequency == ScheduleFrequency.MONTHLY.value:
            return f"{minute} {hour} {self.day_of_month} * *"
        return ""

    def _clock(self) -> tuple[int, int] | None:
        if not isinstance(self.time, str) or not re.match(TIME_OF_DAY_PATTERN, self.time):
            return None
        hour, minute = self.time.split(":")
        return int(hour), int(minute)
