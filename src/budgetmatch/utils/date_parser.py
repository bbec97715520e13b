"""Date parsing utilities for command-line input."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and relative
    ones:
    - "today", "yesterday", "tomorrow"
    - "last/this/next month", "last/this/next year", "last/this/next week"
    - "last <weekday>", "next <weekday>"

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    direction, _, period = date_str.partition(" ")
    if direction in ("last", "this", "next") and period:
        step = {"last": -1, "this": 0, "next": 1}[direction]
        if period == "month":
            return (today + relativedelta(months=step)).replace(day=1)
        if period == "year":
            return today.replace(month=1, day=1) + relativedelta(years=step)
        if period == "week":
            # Weeks start on Monday
            return today - timedelta(days=today.weekday()) + timedelta(weeks=step)
        if period in WEEKDAYS and step != 0:
            target = WEEKDAYS.index(period)
            if step < 0:
                days_ago = (today.weekday() - target) % 7 or 7
                return today - timedelta(days=days_ago)
            days_ahead = (target - today.weekday()) % 7 or 7
            return today + timedelta(days=days_ahead)

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_month(month_str: str) -> str:
    """Normalize a month expression to ``YYYY-MM``.

    Accepts "this-month", "last-month", "next-month", "YYYY-MM" or any date
    ``parse_date`` understands (its month is used).

    Raises:
        ValueError: If the month cannot be parsed
    """
    month_str = month_str.strip().lower()
    today = date.today()
    shifts = {"this-month": 0, "last-month": -1, "next-month": 1}
    if month_str in shifts:
        return (today + relativedelta(months=shifts[month_str])).strftime("%Y-%m")

    parts = month_str.split("-")
    if len(parts) == 2 and all(part.isdigit() for part in parts):
        year, month = int(parts[0]), int(parts[1])
        if not 1 <= month <= 12:
            raise ValueError(f"Could not parse month '{month_str}'")
        return f"{year:04d}-{month:02d}"

    return parse_date(month_str).strftime("%Y-%m")
