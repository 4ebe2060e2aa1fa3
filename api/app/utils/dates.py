"""
Date helpers shared by models and storage
"""
from datetime import datetime, timezone, date
from typing import Optional, Tuple


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every timestamp column stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetimes converted to naive UTC; naive ones are taken to be UTC already"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def month_bounds(moment: datetime) -> Tuple[datetime, datetime]:
    """Start of the month containing `moment` and start of the previous month"""
    this_month = datetime(moment.year, moment.month, 1)
    if moment.month == 1:
        last_month = datetime(moment.year - 1, 12, 1)
    else:
        last_month = datetime(moment.year, moment.month - 1, 1)
    return this_month, last_month


def growth_percent(current: float, previous: float) -> int:
    """Whole-number growth of `current` over `previous`; 0 when there is no baseline"""
    if not previous:
        return 0
    return round((current - previous) / previous * 100)


def as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return date.fromisoformat(value)
    return value
