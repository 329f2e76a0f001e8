"""
Report window resolution for the range picker (week / month / custom).

Every function is pure: it returns a new TimeWindow and never mutates
the window it was given.
"""

import math
from datetime import date, timedelta

from hr_reporting.core.errors import InvalidRangeError
from hr_reporting.schemas.report import RangeMode, TimeWindow


def resolve_week(reference: date) -> TimeWindow:
    """Monday–Sunday week containing ``reference``."""
    monday = reference - timedelta(days=reference.weekday())
    return TimeWindow(start_date=monday, end_date=monday + timedelta(days=6))


def week_number(reference: date) -> int:
    """Week of the year for the week containing ``reference``.

    Counted from the Monday of that week: days elapsed since 1 January of
    the Monday's year, plus 1 January's weekday offset (Sunday = 0),
    ceil-divided by 7.
    """
    monday = resolve_week(reference).start_date
    jan_first = date(monday.year, 1, 1)
    past_days = (monday - jan_first).days
    jan_first_offset = (jan_first.weekday() + 1) % 7
    return math.ceil((past_days + jan_first_offset + 1) / 7)


def resolve_month(reference: date) -> TimeWindow:
    """First to last calendar day of the month containing ``reference``."""
    first = reference.replace(day=1)
    if first.month == 12:
        next_first = date(first.year + 1, 1, 1)
    else:
        next_first = date(first.year, first.month + 1, 1)
    return TimeWindow(start_date=first, end_date=next_first - timedelta(days=1))


def resolve_custom(start: date, end: date) -> TimeWindow:
    if start > end:
        raise InvalidRangeError(
            f"Start date {start.isoformat()} is after end date {end.isoformat()}"
        )
    return TimeWindow(start_date=start, end_date=end)


def resolve_range(
    mode: RangeMode | str,
    reference: date | None = None,
    start: date | None = None,
    end: date | None = None,
) -> TimeWindow:
    try:
        mode = RangeMode(mode)
    except ValueError:
        raise InvalidRangeError(f"Unknown range mode '{mode}'") from None

    if mode is RangeMode.CUSTOM:
        if start is None or end is None:
            raise InvalidRangeError("Custom range requires both start and end dates")
        return resolve_custom(start, end)

    reference = reference or date.today()
    if mode is RangeMode.WEEK:
        return resolve_week(reference)
    return resolve_month(reference)


def shift_week(window: TimeWindow, offset: int) -> TimeWindow:
    """Week ``offset`` weeks away from the week that starts ``window``."""
    return resolve_week(window.start_date + timedelta(days=7 * offset))


def shift_month(window: TimeWindow, offset: int) -> TimeWindow:
    month_index = window.start_date.year * 12 + (window.start_date.month - 1) + offset
    year, month = divmod(month_index, 12)
    return resolve_month(date(year, month + 1, 1))


def today_window(mode: RangeMode | str = RangeMode.WEEK, today: date | None = None) -> TimeWindow:
    """Reset navigation to the week or month containing today."""
    return resolve_range(mode, reference=today or date.today())


def days_of_window(window: TimeWindow) -> list[date]:
    span = (window.end_date - window.start_date).days
    return [window.start_date + timedelta(days=i) for i in range(span + 1)]


def _day_month(d: date) -> str:
    return f"{d.day:02d}/{d.month:02d}"


def format_range_label(window: TimeWindow) -> str:
    """'dd/MM – dd/MM/yyyy' label for the range picker."""
    return f"{_day_month(window.start_date)} – {_day_month(window.end_date)}/{window.end_date.year}"


def format_week_label(window: TimeWindow) -> str:
    """'Week N (dd/MM - dd/MM)' label for the week navigator."""
    return (
        f"Week {week_number(window.start_date)} "
        f"({_day_month(window.start_date)} - {_day_month(window.end_date)})"
    )
