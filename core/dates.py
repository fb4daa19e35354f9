"""
Date and display helpers.

"Today" is process-wide state. It is resolved here, once per request, and
the resulting calendar date is handed to the engine so the engine itself
never looks at the clock.
"""
import math
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union


def _utc_now(now: Optional[datetime] = None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def get_x_days_ago_date_utc(days: int, now: Optional[datetime] = None) -> date:
    """Calendar date `days` days before today in UTC."""
    return _utc_now(now).date() - timedelta(days=days)


def get_yesterday_date_utc(now: Optional[datetime] = None) -> date:
    """Default target date for live revenue-share queries."""
    return get_x_days_ago_date_utc(1, now)


def get_today_date_utc(now: Optional[datetime] = None) -> date:
    return get_x_days_ago_date_utc(0, now)


def get_month_day_year_date_string(value: Union[date, datetime, None]) -> Optional[str]:
    """ISO YYYY-MM-DD string for a date, or None."""
    if not value:
        return None
    if isinstance(value, datetime):
        value = _utc_now(value).date()
    return value.isoformat()


def round_to_decimal_places(value: float, decimal_places: int) -> float:
    """Round half up: 0.8125 -> 0.813 (round() gives 0.812)."""
    factor = 10 ** decimal_places
    return math.floor(value * factor + 0.5) / factor
