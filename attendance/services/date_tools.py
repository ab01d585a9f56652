"""
Date Generators

Pure date-expansion functions behind the Workbot's date tools. Every
generator has the signature ``(today, params) -> DateToolResult`` and never
touches the database or the wall clock: ``today`` is always supplied by the
caller, already resolved in the reference timezone.

Conventions shared by all generators:
    - Dates are returned as ``YYYY-MM-DD`` strings, unique and ascending.
    - Day numbers are 1-based days of the month; ranges are inclusive and
      clamped to ``[1, days_in_month]``.
    - "Weekday" means Monday-Friday. Only ``expand_weekends``,
      ``expand_all_days``, ``expand_day_of_week``,
      ``expand_multiple_days_of_week`` and ``expand_range_days_of_week`` can
      return Saturdays or Sundays.
    - Negative ordinals and week numbers count from the end of the month
      (``-1`` = last). See ``nth_weekday_of_month`` and ``week_block_bounds``.
"""
import calendar
import math
import re
from collections import OrderedDict
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from attendance.services.date_types import DateToolResult


DAY_NAMES = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']
DAY_INDEX = {name: index for index, name in enumerate(DAY_NAMES)}

THIS_MONTH = 'this_month'
NEXT_MONTH = 'next_month'
PERIODS = (THIS_MONTH, NEXT_MONTH)

ISO_DATE_RE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})$')
RELATIVE_DAY_RE = re.compile(r'^(next|this)\s+(\w+)$')


# ===== HELPERS =====

def parse_period(today: date, period: str) -> Tuple[int, int]:
    """
    Resolve a relative period reference to a concrete (year, month)

    Args:
        today: Reference date
        period: 'this_month' or 'next_month'

    Returns:
        (year, month) tuple; next_month wraps December into January
    """
    if period == NEXT_MONTH:
        if today.month == 12:
            return today.year + 1, 1
        return today.year, today.month + 1
    return today.year, today.month


def parse_iso_date(value: Any) -> Optional[date]:
    """Parse a strict YYYY-MM-DD string, rejecting impossible dates like 2025-02-30"""
    if not isinstance(value, str):
        return None
    match = ISO_DATE_RE.match(value.strip())
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def day_index(name: Any) -> Optional[int]:
    """Map a weekday name to date.weekday() numbering (monday=0), or None"""
    if not isinstance(name, str):
        return None
    return DAY_INDEX.get(name.strip().lower())


def is_weekday(d: date) -> bool:
    return d.weekday() < 5


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_name(year: int, month: int) -> str:
    return f"{calendar.month_name[month]} {year}"


def month_dates(year: int, month: int, start_day: int = 1, end_day: Optional[int] = None) -> List[date]:
    """All calendar dates of a month between two day numbers, clamped to the month"""
    total = days_in_month(year, month)
    start = max(int(start_day), 1)
    end = total if end_day is None else min(int(end_day), total)
    return [date(year, month, day) for day in range(start, end + 1)]


def to_date_strings(dates: Iterable[date]) -> List[str]:
    """Format, deduplicate and sort"""
    return sorted({d.isoformat() for d in dates})


def week_monday(d: date) -> date:
    """Monday of the Monday-Sunday week containing d"""
    return d - timedelta(days=d.weekday())


def group_by_week(dates: Iterable[date]) -> 'OrderedDict[date, List[date]]':
    """Group dates by their Monday-anchored week, keys and members ascending"""
    groups: Dict[date, List[date]] = {}
    for d in sorted(set(dates)):
        groups.setdefault(week_monday(d), []).append(d)
    return OrderedDict(sorted(groups.items()))


def week_of_month(day: int) -> int:
    """Calendar week number of a day: week 1 = days 1-7, week 2 = days 8-14, ..."""
    return math.ceil(day / 7)


def week_block_bounds(week: int, total_days: int) -> Optional[Tuple[int, int]]:
    """
    Day-number bounds of a week number within a month

    Positive weeks count from the start (week k = days 7(k-1)+1 .. 7k).
    Negative weeks count 7-day blocks back from the last day of the month:
    -1 = the last 7 days, -2 = the 7 days before those, and so on.

    Args:
        week: Week number, non-zero
        total_days: Number of days in the month

    Returns:
        (start_day, end_day) clamped to the month, or None when the week
        falls entirely outside it (or week is 0)
    """
    week = int(week)
    if week > 0:
        start = 7 * (week - 1) + 1
        end = 7 * week
    elif week < 0:
        end = total_days + 7 * (week + 1)
        start = end - 6
    else:
        return None

    start = max(start, 1)
    end = min(end, total_days)
    if start > end:
        return None
    return start, end


def nth_weekday_of_month(year: int, month: int, day_name: str, ordinal: int) -> Optional[int]:
    """
    Day number of the Nth occurrence of a weekday within a month

    Args:
        year: Year
        month: Month (1-12)
        day_name: Weekday name, any case
        ordinal: 1 = first, 2 = second, ..., -1 = last, -2 = second-last

    Returns:
        Day of month, or None if the name is unknown, the ordinal is 0 or
        fractional, or the month has no such occurrence
    """
    target = day_index(day_name)
    if target is None or ordinal != int(ordinal) or int(ordinal) == 0:
        return None

    ordinal = int(ordinal)
    hits = [d.day for d in month_dates(year, month) if d.weekday() == target]
    if ordinal > 0:
        return hits[ordinal - 1] if ordinal <= len(hits) else None
    return hits[ordinal] if -ordinal <= len(hits) else None


def _split_day_names(names: Iterable[Any]) -> Tuple[set, List[Any]]:
    """Return (valid weekday indexes, invalid raw names)"""
    valid = set()
    invalid = []
    for name in names:
        index = day_index(name)
        if index is None:
            invalid.append(name)
        else:
            valid.add(index)
    return valid, invalid


def _alternate(days: List[date], mode: str) -> List[date]:
    """
    Alternation over a run of consecutive calendar days

    'calendar' keeps every other calendar day (1st, 3rd, 5th, ... of the run)
    and then drops weekends; 'working' walks the weekdays only and keeps every
    other one, starting with the first.
    """
    if mode == 'calendar':
        return [d for d in days[::2] if is_weekday(d)]

    kept = []
    keep = True
    for d in days:
        if not is_weekday(d):
            continue
        if keep:
            kept.append(d)
        keep = not keep
    return kept


# ===== EXPLICIT RESOLUTION =====

def resolve_dates(today: date, params: Dict[str, Any]) -> DateToolResult:
    """
    Resolve explicit date tokens

    Accepts YYYY-MM-DD literals, 'today', 'tomorrow', 'next <weekday>',
    'this <weekday>' and bare weekday names. 'next X' and a bare 'X' always
    land strictly after today; 'this X' may be today but is never in the past.
    Success requires at least one resolved date and no unrecognized tokens.
    """
    resolved = []
    unknowns = []

    for raw in params['dates']:
        token = raw.strip().lower()

        if ISO_DATE_RE.match(token):
            parsed = parse_iso_date(token)
            if parsed:
                resolved.append(parsed)
            else:
                unknowns.append(raw)
            continue

        if token == 'today':
            resolved.append(today)
            continue

        if token == 'tomorrow':
            resolved.append(today + timedelta(days=1))
            continue

        relative = RELATIVE_DAY_RE.match(token)
        if relative and relative.group(2) in DAY_INDEX:
            days_ahead = DAY_INDEX[relative.group(2)] - today.weekday()
            if relative.group(1) == 'next':
                if days_ahead <= 0:
                    days_ahead += 7
            elif days_ahead < 0:
                days_ahead += 7
            resolved.append(today + timedelta(days=days_ahead))
            continue

        if token in DAY_INDEX:
            days_ahead = DAY_INDEX[token] - today.weekday()
            if days_ahead <= 0:
                days_ahead += 7
            resolved.append(today + timedelta(days=days_ahead))
            continue

        unknowns.append(raw)

    dates = to_date_strings(resolved)
    return DateToolResult(
        success=bool(dates) and not unknowns,
        dates=dates,
        description=f"Resolved {len(dates)} explicit date(s)",
        error=f"Unrecognized date tokens: {', '.join(unknowns)}" if unknowns else None,
    )


# ===== WHOLE-PERIOD GENERATORS =====

def expand_month(today: date, params: Dict[str, Any]) -> DateToolResult:
    """All weekdays of the month"""
    year, month = parse_period(today, params['period'])
    dates = to_date_strings(d for d in month_dates(year, month) if is_weekday(d))
    return DateToolResult(
        success=True,
        dates=dates,
        description=f"All {len(dates)} weekdays in {month_name(year, month)}",
    )


def expand_all_days(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Every calendar day of the month, weekends included"""
    year, month = parse_period(today, params['period'])
    dates = to_date_strings(month_dates(year, month))
    return DateToolResult(
        success=True,
        dates=dates,
        description=f"All {len(dates)} days in {month_name(year, month)} (including weekends)",
    )


def expand_weekends(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Saturdays and Sundays of the month"""
    year, month = parse_period(today, params['period'])
    dates = to_date_strings(d for d in month_dates(year, month) if not is_weekday(d))
    return DateToolResult(
        success=True,
        dates=dates,
        description=f"All {len(dates)} weekend days in {month_name(year, month)}",
    )


# ===== SLICE GENERATORS =====

def expand_weeks(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Weekdays of the first or last N seven-day blocks of the month"""
    year, month = parse_period(today, params['period'])
    total = days_in_month(year, month)
    count = int(params['count'])
    span = max(count, 0) * 7

    if params['position'] == 'first':
        days = month_dates(year, month, 1, min(span, total))
    else:
        days = month_dates(year, month, max(1, total - span + 1), total) if span else []

    dates = to_date_strings(d for d in days if is_weekday(d))
    return DateToolResult(
        success=True,
        dates=dates,
        description=f"{params['position'].capitalize()} {count} week(s) of {month_name(year, month)}: {len(dates)} weekdays",
    )


def expand_working_days(today: date, params: Dict[str, Any]) -> DateToolResult:
    """First or last N weekdays of the month"""
    year, month = parse_period(today, params['period'])
    count = max(int(params['count']), 0)
    weekdays = [d for d in month_dates(year, month) if is_weekday(d)]

    if params['position'] == 'first':
        picked = weekdays[:count]
    else:
        picked = weekdays[len(weekdays) - count:] if count else []

    dates = to_date_strings(picked)
    return DateToolResult(
        success=True,
        dates=dates,
        description=f"{params['position'].capitalize()} {count} working days of {month_name(year, month)}: {len(dates)} dates",
    )


def expand_half_month(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Weekdays of days 1-15 ('first') or 16-end ('second')"""
    year, month = parse_period(today, params['period'])
    days = month_dates(year, month, 1, 15) if params['half'] == 'first' else month_dates(year, month, 16)
    dates = to_date_strings(d for d in days if is_weekday(d))
    return DateToolResult(
        success=True,
        dates=dates,
        description=f"{params['half'].capitalize()} half of {month_name(year, month)}: {len(dates)} weekdays",
    )


def expand_specific_weeks(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Weekdays of the listed week numbers (negative = counted from the end)"""
    year, month = parse_period(today, params['period'])
    total = days_in_month(year, month)

    picked = set()
    for week in params['weeks']:
        bounds = week_block_bounds(week, total)
        if bounds:
            picked.update(month_dates(year, month, bounds[0], bounds[1]))

    dates = to_date_strings(d for d in picked if is_weekday(d))
    weeks = ', '.join(str(w) for w in params['weeks'])
    return DateToolResult(
        success=True,
        dates=dates,
        description=f"Week(s) {weeks} of {month_name(year, month)}: {len(dates)} weekdays",
    )


# ===== WEEKDAY-SET GENERATORS =====

def expand_day_of_week(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Every occurrence of one named day (weekend names allowed)"""
    target = day_index(params['day'])
    if target is None:
        return DateToolResult.failure(f"Unknown day name: {params['day']}")

    year, month = parse_period(today, params['period'])
    dates = to_date_strings(d for d in month_dates(year, month) if d.weekday() == target)
    return DateToolResult(
        success=True,
        dates=dates,
        description=f"Every {DAY_NAMES[target].capitalize()} in {month_name(year, month)}: {len(dates)} dates",
    )


def expand_multiple_days_of_week(today: date, params: Dict[str, Any]) -> DateToolResult:
    """
    Every occurrence of several named days

    Invalid names are dropped and reported in ``error`` without failing the
    call; the call fails only when no name is valid.
    """
    targets, invalid = _split_day_names(params['days'])
    if not targets:
        return DateToolResult.failure(f"No valid day names in: {', '.join(map(str, params['days']))}")

    year, month = parse_period(today, params['period'])
    dates = to_date_strings(d for d in month_dates(year, month) if d.weekday() in targets)
    names = ', '.join(DAY_NAMES[i].capitalize() for i in sorted(targets))
    return DateToolResult(
        success=True,
        dates=dates,
        description=f"Every {names} in {month_name(year, month)}: {len(dates)} dates",
        error=f"Dropped invalid day names: {', '.join(map(str, invalid))}" if invalid else None,
    )


def expand_range_days_of_week(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Named days inside a day-of-month range (not limited to weekdays)"""
    targets, invalid = _split_day_names(params['days'])
    if not targets:
        return DateToolResult.failure(f"No valid day names in: {', '.join(map(str, params['days']))}")

    year, month = parse_period(today, params['period'])
    days = month_dates(year, month, params['start_day'], params['end_day'])
    dates = to_date_strings(d for d in days if d.weekday() in targets)
    names = ', '.join(DAY_NAMES[i].capitalize() for i in sorted(targets))
    return DateToolResult(
        success=True,
        dates=dates,
        description=(
            f"{names} between days {params['start_day']}-{params['end_day']} "
            f"of {month_name(year, month)}: {len(dates)} dates"
        ),
        error=f"Dropped invalid day names: {', '.join(map(str, invalid))}" if invalid else None,
    )


# ===== RANGE GENERATORS =====

def expand_range(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Weekdays in an inclusive day-of-month range"""
    year, month = parse_period(today, params['period'])
    days = month_dates(year, month, params['start_day'], params['end_day'])
    dates = to_date_strings(d for d in days if is_weekday(d))
    return DateToolResult(
        success=True,
        dates=dates,
        description=(
            f"Days {params['start_day']}-{params['end_day']} of {month_name(year, month)}: "
            f"{len(dates)} weekdays"
        ),
    )


def expand_month_except_range(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Month weekdays outside an excluded day-of-month range"""
    year, month = parse_period(today, params['period'])
    start, end = params['exclude_start'], params['exclude_end']
    dates = to_date_strings(
        d for d in month_dates(year, month)
        if is_weekday(d) and not (start <= d.day <= end)
    )
    return DateToolResult(
        success=True,
        dates=dates,
        description=f"All weekdays in {month_name(year, month)} except days {start}-{end}: {len(dates)} dates",
    )


def expand_range_except_days(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Weekdays in a range minus the named days"""
    excluded, _ = _split_day_names(params['exclude_days'])
    if not excluded:
        return DateToolResult.failure(f"No valid day names in: {', '.join(map(str, params['exclude_days']))}")
    year, month = parse_period(today, params['period'])
    days = month_dates(year, month, params['start_day'], params['end_day'])
    dates = to_date_strings(d for d in days if is_weekday(d) and d.weekday() not in excluded)
    names = ', '.join(DAY_NAMES[i].capitalize() for i in sorted(excluded))
    return DateToolResult(
        success=True,
        dates=dates,
        description=(
            f"Days {params['start_day']}-{params['end_day']} of {month_name(year, month)} "
            f"except {names}: {len(dates)} dates"
        ),
    )


def expand_range_alternate(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Alternate days inside a range; see _alternate for the two modes"""
    year, month = parse_period(today, params['period'])
    days = month_dates(year, month, params['start_day'], params['end_day'])
    dates = to_date_strings(_alternate(days, params['type']))
    kind = 'working day' if params['type'] == 'working' else 'day'
    return DateToolResult(
        success=True,
        dates=dates,
        description=(
            f"Every alternate {kind} in {month_name(year, month)} days "
            f"{params['start_day']}-{params['end_day']}: {len(dates)} dates"
        ),
    )


def expand_alternate(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Alternate days across the whole month"""
    year, month = parse_period(today, params['period'])
    dates = to_date_strings(_alternate(month_dates(year, month), params['type']))
    kind = 'working day' if params['type'] == 'working' else 'day'
    return DateToolResult(
        success=True,
        dates=dates,
        description=f"Every alternate {kind} in {month_name(year, month)}: {len(dates)} dates",
    )


# ===== EXCEPTION GENERATORS =====

def expand_except(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Month weekdays minus one named day"""
    excluded = day_index(params['exclude_day'])
    if excluded is None:
        return DateToolResult.failure(f"Unknown day name: {params['exclude_day']}")

    year, month = parse_period(today, params['period'])
    dates = to_date_strings(
        d for d in month_dates(year, month) if is_weekday(d) and d.weekday() != excluded
    )
    return DateToolResult(
        success=True,
        dates=dates,
        description=(
            f"All weekdays in {month_name(year, month)} except "
            f"{DAY_NAMES[excluded].capitalize()}s: {len(dates)} dates"
        ),
    )


def expand_half_except_day(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Half-month weekdays minus one named day"""
    excluded = day_index(params['exclude_day'])
    if excluded is None:
        return DateToolResult.failure(f"Unknown day name: {params['exclude_day']}")

    year, month = parse_period(today, params['period'])
    days = month_dates(year, month, 1, 15) if params['half'] == 'first' else month_dates(year, month, 16)
    dates = to_date_strings(d for d in days if is_weekday(d) and d.weekday() != excluded)
    return DateToolResult(
        success=True,
        dates=dates,
        description=(
            f"{params['half'].capitalize()} half of {month_name(year, month)} except "
            f"{DAY_NAMES[excluded].capitalize()}s: {len(dates)} dates"
        ),
    )


def expand_month_except_weeks(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Month weekdays minus the listed week numbers (same numbering as expand_specific_weeks)"""
    year, month = parse_period(today, params['period'])
    total = days_in_month(year, month)

    excluded = set()
    for week in params['exclude_weeks']:
        bounds = week_block_bounds(week, total)
        if bounds:
            excluded.update(range(bounds[0], bounds[1] + 1))

    dates = to_date_strings(
        d for d in month_dates(year, month) if is_weekday(d) and d.day not in excluded
    )
    weeks = ', '.join(str(w) for w in params['exclude_weeks'])
    return DateToolResult(
        success=True,
        dates=dates,
        description=f"All weekdays in {month_name(year, month)} except week(s) {weeks}: {len(dates)} dates",
    )


def expand_n_working_days_except(today: date, params: Dict[str, Any]) -> DateToolResult:
    """First or last N weekdays, then minus the named days"""
    sliced = expand_working_days(today, params)
    if not sliced.success:
        return sliced
    excluded, _ = _split_day_names(params['exclude_days'])
    if not excluded:
        return DateToolResult.failure(f"No valid day names in: {', '.join(map(str, params['exclude_days']))}")
    dates = [d for d in sliced.dates if parse_iso_date(d).weekday() not in excluded]
    names = ', '.join(DAY_NAMES[i].capitalize() for i in sorted(excluded))
    return DateToolResult(
        success=True,
        dates=dates,
        description=(
            f"{params['position'].capitalize()} {int(params['count'])} working days except {names}: "
            f"{len(dates)} dates"
        ),
    )


# ===== PER-WEEK POSITIONAL GENERATORS =====

def expand_first_weekday_per_week(today: date, params: Dict[str, Any]) -> DateToolResult:
    """First weekday of each Monday-anchored week that intersects the month"""
    year, month = parse_period(today, params['period'])
    weeks = group_by_week(d for d in month_dates(year, month) if is_weekday(d))
    dates = to_date_strings(days[0] for days in weeks.values())
    return DateToolResult(
        success=True,
        dates=dates,
        description=f"First weekday of each week in {month_name(year, month)}: {len(dates)} dates",
    )


def expand_last_weekday_per_week(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Last weekday of each Monday-anchored week that intersects the month"""
    year, month = parse_period(today, params['period'])
    weeks = group_by_week(d for d in month_dates(year, month) if is_weekday(d))
    dates = to_date_strings(days[-1] for days in weeks.values())
    return DateToolResult(
        success=True,
        dates=dates,
        description=f"Last weekday of each week in {month_name(year, month)}: {len(dates)} dates",
    )


# ===== ORDINAL GENERATORS =====

def expand_ordinal_day_of_week(today: date, params: Dict[str, Any]) -> DateToolResult:
    """
    Specific ordinal weekdays, e.g. "first Monday and last Friday"

    Args:
        params: period plus ordinals, a list of {"ordinal": int, "day": str}

    Returns:
        Every occurrence that exists; misses are reported in ``error``.
        Succeeds when at least one occurrence resolved.
    """
    year, month = parse_period(today, params['period'])
    found = []
    errors = []

    for item in params['ordinals']:
        if not isinstance(item, dict):
            errors.append(f"Invalid ordinal entry: {item}")
            continue
        ordinal = item.get('ordinal')
        day_name = item.get('day')
        day = None
        if isinstance(ordinal, (int, float)) and not isinstance(ordinal, bool):
            day = nth_weekday_of_month(year, month, day_name, ordinal)
        if day is None:
            errors.append(f"Could not find ordinal {ordinal} of {day_name}")
        else:
            found.append(date(year, month, day))

    dates = to_date_strings(found)
    return DateToolResult(
        success=bool(dates),
        dates=dates,
        description=f"Ordinal weekdays in {month_name(year, month)}: {len(dates)} dates",
        error='; '.join(errors) if errors else None,
    )


def expand_anchor_range(today: date, params: Dict[str, Any]) -> DateToolResult:
    """
    Weekdays of a sub-range bounded by ordinal weekday anchors

    Directions:
        on_and_after: anchor .. month end
        on_and_before: month start .. anchor
        after: day after anchor .. month end
        before: month start .. day before anchor
        between: between the anchor and a second anchor (end_day,
            end_occurrence), normalized so start <= end
    """
    year, month = parse_period(today, params['period'])
    total = days_in_month(year, month)
    direction = params['direction']

    anchor = nth_weekday_of_month(year, month, params['anchor_day'], params['anchor_occurrence'])
    if anchor is None:
        return DateToolResult.failure(
            f"Could not find occurrence {params['anchor_occurrence']} of {params['anchor_day']} in the month"
        )

    if direction == 'between':
        end_day = params.get('end_day')
        end_occurrence = params.get('end_occurrence')
        if end_day is None or end_occurrence is None:
            return DateToolResult.failure('direction "between" requires end_day and end_occurrence')
        end_anchor = None
        if isinstance(end_occurrence, (int, float)) and not isinstance(end_occurrence, bool):
            end_anchor = nth_weekday_of_month(year, month, end_day, end_occurrence)
        if end_anchor is None:
            return DateToolResult.failure(
                f"Could not find occurrence {end_occurrence} of {end_day} in the month"
            )
        start, end = min(anchor, end_anchor), max(anchor, end_anchor)
    elif direction == 'on_and_after':
        start, end = anchor, total
    elif direction == 'on_and_before':
        start, end = 1, anchor
    elif direction == 'after':
        start, end = anchor + 1, total
    else:
        start, end = 1, anchor - 1

    dates = to_date_strings(d for d in month_dates(year, month, start, end) if is_weekday(d))
    return DateToolResult(
        success=True,
        dates=dates,
        description=(
            f"Weekdays {direction.replace('_', ' ')} occurrence {params['anchor_occurrence']} of "
            f"{params['anchor_day']} in {month_name(year, month)} (days {start}-{end}): {len(dates)} dates"
        ),
    )


def expand_n_days_from_ordinal(today: date, params: Dict[str, Any]) -> DateToolResult:
    """N consecutive weekdays starting at an ordinal weekday, bounded by month end"""
    year, month = parse_period(today, params['period'])
    anchor = nth_weekday_of_month(year, month, params['day'], params['ordinal'])
    if anchor is None:
        return DateToolResult.failure(f"Could not find ordinal {params['ordinal']} of {params['day']}")

    count = max(int(params['count']), 0)
    weekdays = [d for d in month_dates(year, month, anchor) if is_weekday(d)]
    dates = to_date_strings(weekdays[:count])
    return DateToolResult(
        success=True,
        dates=dates,
        description=(
            f"{count} working days from ordinal {params['ordinal']} {params['day']} "
            f"in {month_name(year, month)}: {len(dates)} dates"
        ),
    )


# ===== STRIDE AND CONVENIENCE GENERATORS =====

def expand_every_nth(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Days start_day, start_day+n, start_day+2n, ... kept only when weekdays"""
    n = params['n']
    if n != int(n) or int(n) < 1:
        return DateToolResult.failure(f"expand_every_nth: n must be a positive whole number, got {n}")
    n = int(n)

    start_day = params.get('start_day')
    start_day = 1 if start_day is None else int(start_day)

    year, month = parse_period(today, params['period'])
    days = month_dates(year, month, start_day)[::n]
    dates = to_date_strings(d for d in days if is_weekday(d))
    return DateToolResult(
        success=True,
        dates=dates,
        description=(
            f"Every {n} day(s) of {month_name(year, month)} starting from day {start_day}: "
            f"{len(dates)} weekday dates"
        ),
    )


def expand_week_period(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Monday-Friday of this week or next week"""
    monday = week_monday(today)
    if params['week'] == 'next_week':
        monday += timedelta(days=7)

    dates = to_date_strings(monday + timedelta(days=offset) for offset in range(5))
    label = 'Next' if params['week'] == 'next_week' else 'This'
    return DateToolResult(
        success=True,
        dates=dates,
        description=f"{label} week (Mon-Fri): {len(dates)} days",
    )


def expand_rest_of_month(today: date, params: Dict[str, Any]) -> DateToolResult:
    """Weekdays from tomorrow through the end of the current month"""
    days = month_dates(today.year, today.month, today.day + 1)
    dates = to_date_strings(d for d in days if is_weekday(d))
    return DateToolResult(
        success=True,
        dates=dates,
        description=f"Rest of this month: {len(dates)} remaining weekdays",
    )
