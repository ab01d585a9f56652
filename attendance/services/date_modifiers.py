"""
Modifier Pipeline

Ordered set operators applied to a generator's output. Each modifier takes
the current date list and returns a new one; a malformed modifier returns
the input unchanged together with an error string, so a bad step degrades
the result instead of discarding it.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from attendance.services.date_tools import (
    day_index,
    group_by_week,
    is_weekday,
    parse_iso_date,
    week_of_month,
)
from attendance.services.date_types import DateModifier, ModifierType

logger = logging.getLogger(__name__)

ModifierOutcome = Tuple[List[str], Optional[str]]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _day_of_month(date_str: str) -> int:
    return int(date_str[8:10])


def _weekday(date_str: str) -> int:
    return parse_iso_date(date_str).weekday()


def _weekday_set(names: Iterable[Any]) -> set:
    return {index for index in (day_index(name) for name in names) if index is not None}


def _count_and_position(mod_type: str, params: Dict[str, Any]) -> Optional[str]:
    if not _is_number(params.get('count')) or params.get('position') not in ('first', 'last'):
        return f'{mod_type}: "count" (number) and "position" (first|last) required'
    return None


def _slice(items: Sequence[Any], count: int, position: str) -> List[Any]:
    count = max(int(count), 0)
    if position == 'first':
        return list(items[:count])
    return list(items[len(items) - count:]) if count else []


# ===== EXCLUSIONS =====

def exclude_dates(dates: List[str], params: Dict[str, Any], context: Dict[str, Any]) -> ModifierOutcome:
    if not isinstance(params.get('dates'), list):
        return dates, 'exclude_dates: "dates" must be an array'
    excluded = set(params['dates'])
    return [d for d in dates if d not in excluded], None


def exclude_days_of_week(dates: List[str], params: Dict[str, Any], context: Dict[str, Any]) -> ModifierOutcome:
    if not isinstance(params.get('days'), list):
        return dates, 'exclude_days_of_week: "days" must be an array'
    excluded = _weekday_set(params['days'])
    return [d for d in dates if _weekday(d) not in excluded], None


def exclude_range(dates: List[str], params: Dict[str, Any], context: Dict[str, Any]) -> ModifierOutcome:
    start, end = params.get('start_day'), params.get('end_day')
    if not _is_number(start) or not _is_number(end):
        return dates, 'exclude_range: "start_day" and "end_day" must be numbers'
    return [d for d in dates if not (start <= _day_of_month(d) <= end)], None


def exclude_weeks(dates: List[str], params: Dict[str, Any], context: Dict[str, Any]) -> ModifierOutcome:
    weeks = params.get('weeks')
    if not isinstance(weeks, list) or not all(_is_number(w) for w in weeks):
        return dates, 'exclude_weeks: "weeks" must be an array of numbers'
    excluded = set(weeks)
    return [d for d in dates if week_of_month(_day_of_month(d)) not in excluded], None


def exclude_working_days_count(dates: List[str], params: Dict[str, Any], context: Dict[str, Any]) -> ModifierOutcome:
    """Drop the first/last N weekdays of the *current* set, not of the month"""
    error = _count_and_position('exclude_working_days_count', params)
    if error:
        return dates, error
    working = sorted(d for d in dates if is_weekday(parse_iso_date(d)))
    excluded = set(_slice(working, params['count'], params['position']))
    return [d for d in dates if d not in excluded], None


def exclude_holidays(dates: List[str], params: Dict[str, Any], context: Dict[str, Any]) -> ModifierOutcome:
    """Subtract params.dates, falling back to the holidays supplied in context"""
    holidays = params.get('dates')
    if holidays is None:
        holidays = context.get('holidays') or []
    if not isinstance(holidays, (list, set, tuple, frozenset)):
        return dates, 'exclude_holidays: "dates" must be an array'
    excluded = set(holidays)
    return [d for d in dates if d not in excluded], None


# ===== FILTERS =====

def filter_days_of_week(dates: List[str], params: Dict[str, Any], context: Dict[str, Any]) -> ModifierOutcome:
    if not isinstance(params.get('days'), list):
        return dates, 'filter_days_of_week: "days" must be an array'
    kept = _weekday_set(params['days'])
    if not kept:
        return dates, 'filter_days_of_week: no valid day names provided'
    return [d for d in dates if _weekday(d) in kept], None


def filter_range(dates: List[str], params: Dict[str, Any], context: Dict[str, Any]) -> ModifierOutcome:
    start, end = params.get('start_day'), params.get('end_day')
    if not _is_number(start) or not _is_number(end):
        return dates, 'filter_range: "start_day" and "end_day" must be numbers'
    return [d for d in dates if start <= _day_of_month(d) <= end], None


def filter_weekday_slice(dates: List[str], params: Dict[str, Any], context: Dict[str, Any]) -> ModifierOutcome:
    """Keep the first/last N dates of each Monday-anchored week in the current set"""
    error = _count_and_position('filter_weekday_slice', params)
    if error:
        return dates, error
    weeks = group_by_week(parse_iso_date(d) for d in dates)
    kept = []
    for week_dates in weeks.values():
        kept.extend(d.isoformat() for d in _slice(week_dates, params['count'], params['position']))
    return kept, None


MODIFIER_HANDLERS: Dict[ModifierType, Callable[[List[str], Dict[str, Any], Dict[str, Any]], ModifierOutcome]] = {
    ModifierType.EXCLUDE_DATES: exclude_dates,
    ModifierType.EXCLUDE_DAYS_OF_WEEK: exclude_days_of_week,
    ModifierType.EXCLUDE_RANGE: exclude_range,
    ModifierType.EXCLUDE_WEEKS: exclude_weeks,
    ModifierType.EXCLUDE_WORKING_DAYS_COUNT: exclude_working_days_count,
    ModifierType.EXCLUDE_HOLIDAYS: exclude_holidays,
    ModifierType.FILTER_DAYS_OF_WEEK: filter_days_of_week,
    ModifierType.FILTER_RANGE: filter_range,
    ModifierType.FILTER_WEEKDAY_SLICE: filter_weekday_slice,
}

_missing = set(ModifierType) - set(MODIFIER_HANDLERS)
if _missing:
    raise RuntimeError(f"Missing modifier handler for: {', '.join(sorted(m.value for m in _missing))}")


def apply_single_modifier(
    dates: List[str],
    modifier: Union[DateModifier, Dict[str, Any]],
    context: Optional[Dict[str, Any]] = None,
) -> ModifierOutcome:
    """
    Apply one modifier

    Args:
        dates: Current date set
        modifier: DateModifier or its wire form {"type": ..., "params": {...}}
        context: Optional request context, e.g. {"holidays": [...]}

    Returns:
        (dates, error) where error is None on success; on error the input
        dates are returned unchanged
    """
    if isinstance(modifier, DateModifier):
        mod_type, params = modifier.type, modifier.params
    else:
        raw = modifier if isinstance(modifier, dict) else {}
        params = raw.get('params') or {}
        try:
            mod_type = ModifierType(raw.get('type'))
        except ValueError:
            return dates, f"Unknown modifier type: {raw.get('type')}"
        if not isinstance(params, dict):
            return dates, f"{mod_type.value}: params must be an object"

    try:
        return MODIFIER_HANDLERS[mod_type](dates, params, context or {})
    except Exception as e:
        logger.error(f"Modifier {mod_type.value} failed: {str(e)}", exc_info=True)
        return dates, f"Modifier error ({mod_type.value}): {str(e)}"


def apply_modifiers(
    dates: Iterable[str],
    modifiers: Optional[Sequence[Union[DateModifier, Dict[str, Any]]]],
    context: Optional[Dict[str, Any]] = None,
) -> Tuple[List[str], List[str]]:
    """
    Apply modifiers strictly in order

    Args:
        dates: Generator output
        modifiers: Ordered modifier list; None or empty is a no-op
        context: Optional request context passed to every modifier

    Returns:
        (sorted unique dates, list of non-fatal modifier errors)
    """
    current = sorted(set(dates))
    errors = []
    for modifier in modifiers or []:
        current, error = apply_single_modifier(current, modifier, context)
        if error:
            logger.warning(f"Modifier skipped: {error}")
            errors.append(error)
    return sorted(set(current)), errors
