"""SQLite 读回的 DateTime 不带时区，统一按 UTC 处理"""

from datetime import UTC, datetime


def as_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)
