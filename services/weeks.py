"""
Week Arithmetic

Date helpers for the meal-plan calendar. Weeks start on Monday.
"""

from datetime import date, datetime, timedelta

DAYS_PER_WEEK = 7


def parse_date(value):
    """Parse a ``YYYY-MM-DD`` string (or pass through a date)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        raise ValueError('Date is required')
    try:
        return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except ValueError:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD")


def week_start(day):
    """Monday of the week containing ``day``."""
    day = parse_date(day)
    return day - timedelta(days=day.weekday())


def week_range(start):
    """Inclusive (first, last) dates of the week beginning at ``start``."""
    start = parse_date(start)
    return start, start + timedelta(days=DAYS_PER_WEEK - 1)


def week_days(start):
    start = parse_date(start)
    return [start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def shift_week(start, weeks=1):
    """Move a week-start forward (positive) or back (negative)."""
    return parse_date(start) + timedelta(days=DAYS_PER_WEEK * weeks)


def current_week_start(today=None):
    return week_start(today or date.today())


def step_day(day, delta=1):
    """
    Move the single-day view by ``delta`` days.

    Returns the new day and the start of the week that owns it, which
    changes whenever the step crosses a Monday boundary.
    """
    new_day = parse_date(day) + timedelta(days=delta)
    return new_day, week_start(new_day)
