"""
Working-day helpers shared by data retrieval, planning and the routes
"""
import calendar
from datetime import date, timedelta
from typing import Iterable, List, Optional, Set, Tuple

from attendance.services.date_tools import parse_iso_date
from attendance.utils.timezone import start_of_month


def iter_dates(start: date, end: date) -> Iterable[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def get_working_days(start_date: str, end_date: str, holiday_set: Optional[Set[str]] = None) -> List[str]:
    """
    Weekdays (Mon-Fri) in an inclusive range, minus holidays

    Args:
        start_date: YYYY-MM-DD
        end_date: YYYY-MM-DD
        holiday_set: Holiday dates to skip

    Returns:
        Ascending YYYY-MM-DD strings; empty when the range is inverted
    """
    start = parse_iso_date(start_date)
    end = parse_iso_date(end_date)
    if start is None or end is None:
        raise ValueError(f"Invalid date range: {start_date} to {end_date}")

    holidays = holiday_set or set()
    return [
        d.isoformat() for d in iter_dates(start, end)
        if d.weekday() < 5 and d.isoformat() not in holidays
    ]


def get_day_of_week(date_str: str) -> str:
    """'2026-03-02' -> 'Monday'"""
    return calendar.day_name[parse_iso_date(date_str).weekday()]


def format_date_nice(date_str: str) -> str:
    """'2026-03-04' -> 'Wednesday, Mar 4'"""
    d = parse_iso_date(date_str)
    return f"{calendar.day_name[d.weekday()]}, {calendar.month_abbr[d.month]} {d.day}"


def get_month_range(year_month: str) -> Tuple[str, str]:
    """'2026-02' -> ('2026-02-01', '2026-02-28')"""
    year, month = (int(part) for part in year_month.split('-'))
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1).isoformat(), date(year, month, last_day).isoformat()


def member_edit_window(today: date, window_days: int = 90) -> Tuple[str, str]:
    """Dates a non-admin may edit: start of the current month through today + window"""
    return start_of_month(today).isoformat(), (today + timedelta(days=window_days)).isoformat()


def is_member_allowed_date(date_str: str, today: date, window_days: int = 90) -> bool:
    min_date, max_date = member_edit_window(today, window_days)
    return min_date <= date_str <= max_date


def _shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def resolve_period_range(period, today: date) -> Tuple[str, str]:
    """
    Concrete (start, end) for a reasoning period

    Args:
        period: None / 'this_month', 'next_month', 'last_month', 'YYYY-MM',
            or {"start": "YYYY-MM-DD", "end": "YYYY-MM-DD"}
        today: Reference date

    Raises:
        ValueError: for anything else, or an inverted range
    """
    if period is None or period == 'this_month':
        return get_month_range(f"{today.year}-{today.month:02d}")
    if period in ('next_month', 'last_month'):
        year, month = _shift_month(today.year, today.month, 1 if period == 'next_month' else -1)
        return get_month_range(f"{year}-{month:02d}")
    if isinstance(period, str) and len(period) == 7 and period[4] == '-':
        try:
            return get_month_range(period)
        except ValueError:
            raise ValueError(f"Invalid period: {period}")
    if isinstance(period, dict):
        start, end = parse_iso_date(period.get('start')), parse_iso_date(period.get('end'))
        if start is None or end is None:
            raise ValueError('period.start and period.end must be YYYY-MM-DD')
        if start > end:
            raise ValueError('period.start must not be after period.end')
        return start.isoformat(), end.isoformat()
    raise ValueError(f"Invalid period: {period}")


def previous_period_range(start_date: str, end_date: str) -> Tuple[str, str]:
    """The period just before a range: the previous month for whole months, else the same length"""
    start, end = parse_iso_date(start_date), parse_iso_date(end_date)
    is_whole_month = start.day == 1 and end == start.replace(day=calendar.monthrange(start.year, start.month)[1])
    if is_whole_month:
        year, month = _shift_month(start.year, start.month, -1)
        return get_month_range(f"{year}-{month:02d}")
    length = (end - start).days + 1
    previous_end = start - timedelta(days=1)
    return (previous_end - timedelta(days=length - 1)).isoformat(), previous_end.isoformat()
