"""统一的时间/日期处理：UTC 存储，按本地日历日比较。"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable

from dateutil.relativedelta import relativedelta

Clock = Callable[[], datetime]


def now() -> datetime:
    """当前时间（UTC，带时区）。"""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """无时区的时间视为 UTC。"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def local_date(value: datetime) -> date:
    """取本地日历日。"""
    return ensure_aware(value).astimezone().date()


def start_of_day(value: datetime) -> datetime:
    """本地日历日的零点（带时区）。"""
    local = ensure_aware(value).astimezone()
    return datetime.combine(local.date(), time.min, tzinfo=local.tzinfo)


def days_between(start: datetime, end: datetime) -> int:
    """两个时间之间相差的整天数（按日历日截断，不做浮点除法）。"""
    return (local_date(end) - local_date(start)).days


def add_days(value: datetime, days: int) -> datetime:
    return value + timedelta(days=days)


def add_hours(value: datetime, hours: int) -> datetime:
    return value + timedelta(hours=hours)


def add_months(value: datetime, months: int) -> datetime:
    """按自然月加减（月末自动截断）。"""
    return value + relativedelta(months=months)
