"""Unit tests for calendar helpers"""

from datetime import date
from loan_servicing.utils.date_utils import add_months, days_between, local_today


def test_add_months_keeps_day_of_month():
    assert add_months(date(2025, 1, 15), 1) == date(2025, 2, 15)
    assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)


def test_add_months_clamps_to_month_end():
    assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2025, 3, 31), 1) == date(2025, 4, 30)


def test_days_between_is_signed():
    assert days_between(date(2025, 3, 20), date(2025, 3, 25)) == 5
    assert days_between(date(2025, 3, 25), date(2025, 3, 20)) == -5
    assert days_between(date(2025, 3, 20), date(2025, 3, 20)) == 0


def test_local_today_returns_a_date():
    assert isinstance(local_today("America/Argentina/Buenos_Aires"), date)
