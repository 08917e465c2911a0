"""Date manipulation utilities"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta


def add_months(start: date, months: int) -> date:
    """Advance by calendar months, clamping to month end (Jan 31 + 1 -> Feb 28/29)"""
    return start + relativedelta(months=months)


def days_between(start: date, end: date) -> int:
    """Signed number of days from start to end"""
    return (end - start).days


def local_today(tz_name: str) -> date:
    """Current date in the business timezone"""
    return datetime.now(ZoneInfo(tz_name)).date()
