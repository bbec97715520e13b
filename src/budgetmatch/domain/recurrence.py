"""Recurrence evaluation for budget entries.

Answers "does this entry occur on this date?" and "on which dates in a range
does it occur?". Both are recomputed from the entry on every call; there is
no cached schedule to invalidate when an entry is edited.

Weekday numbering follows the stored ``day_of_week`` convention:
0 = Sunday through 6 = Saturday.

A monthly anchor larger than the month length (e.g. day 31 in February)
does not occur in that month; there is no end-of-month clamping.
"""

from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Union

from budgetmatch.domain.entities import BudgetEntry, Frequency

DateLike = Union[date, str, None]


def to_date(value: DateLike) -> Optional[date]:
    """Coerce a date or ISO ``YYYY-MM-DD`` string to a date, or None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), "%Y-%m-%d").date()
        except ValueError:
            return None
    return None


def weekday_sunday_first(d: date) -> int:
    """Weekday of ``d`` with Sunday as 0."""
    return (d.weekday() + 1) % 7


def _frequency(entry: BudgetEntry) -> Optional[Frequency]:
    try:
        return Frequency(entry.frequency)
    except ValueError:
        return None


def within_window(entry: BudgetEntry, on: date) -> bool:
    """Check that ``on`` falls inside the entry's start/end window.

    An unparseable start date fails closed. An unparseable end date is
    treated as unset.
    """
    start = to_date(entry.start_date)
    if start is None or on < start:
        return False
    if entry.end_date is not None:
        end = to_date(entry.end_date)
        if end is not None and on > end:
            return False
    return True


def anchor_weekday(entry: BudgetEntry, start: date) -> int:
    """Weekday anchor: ``day_of_week`` if set, else the start date's weekday."""
    if entry.day_of_week is not None:
        return entry.day_of_week
    return weekday_sunday_first(start)


def anchor_day_of_month(entry: BudgetEntry, start: date) -> int:
    """Day-of-month anchor: ``day_of_month`` if set, else the start date's day."""
    if entry.day_of_month is not None:
        return entry.day_of_month
    return start.day


def is_fortnight_week(start: date, on: date) -> bool:
    """True when ``on`` falls in an even-numbered week counted from ``start``."""
    return ((on - start).days // 7) % 2 == 0


def occurs(entry: BudgetEntry, on: date) -> bool:
    """Return True if ``entry`` has an occurrence on ``on``."""
    on = to_date(on)
    if on is None or not within_window(entry, on):
        return False

    start = to_date(entry.start_date)
    frequency = _frequency(entry)

    if frequency is Frequency.ONCE_OFF:
        return on == start
    if frequency is Frequency.DAILY:
        return True
    if frequency is Frequency.WEEKLY:
        return weekday_sunday_first(on) == anchor_weekday(entry, start)
    if frequency is Frequency.FORTNIGHTLY:
        return (
            is_fortnight_week(start, on)
            and weekday_sunday_first(on) == anchor_weekday(entry, start)
        )
    if frequency is Frequency.MONTHLY:
        return on.day == anchor_day_of_month(entry, start)
    if frequency is Frequency.ANNUALLY:
        return (on.month, on.day) == (start.month, start.day)
    return False


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date in ``[start, end]``."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def occurrences(entry: BudgetEntry, start: date, end: date) -> list[date]:
    """Return every occurrence of ``entry`` in ``[start, end]``, in order.

    Cost is linear in the range length; callers bound the range.
    """
    return [d for d in iter_dates(start, end) if occurs(entry, d)]


def next_occurrence(entry: BudgetEntry, start: date, end: date) -> Optional[date]:
    """Return the first occurrence of ``entry`` in ``[start, end]``, if any."""
    for d in iter_dates(start, end):
        if occurs(entry, d):
            return d
    return None
