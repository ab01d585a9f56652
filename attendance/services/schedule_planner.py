"""
Schedule Planner

Turns classifier actions ("mark every Monday next month as office") into a
validated per-date change list, and applies accepted changes to the entries
table in one transaction.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Set

from attendance.error_handlers import ValidationException, with_db_transaction
from attendance.models import get_db, get_models
from attendance.services.data_retrieval import find_user_by_name, get_holiday_context, get_holiday_set
from attendance.services.date_tool_registry import execute_date_pipeline, execute_date_tool
from attendance.services.date_tools import ISO_DATE_RE, parse_iso_date
from attendance.services.date_types import DateTool
from attendance.services.schedule_types import (
    EntryStatus,
    HalfDayPortion,
    LeaveDuration,
    WorkingPortion,
)
from attendance.services.working_days import get_day_of_week, is_member_allowed_date

logger = logging.getLogger(__name__)

ACTION_TYPES = ('set', 'clear')
CLEAR = 'clear'
CHANGE_STATUSES = (EntryStatus.OFFICE.value, EntryStatus.LEAVE.value, CLEAR)
FILTER_STATUSES = ('wfh', EntryStatus.OFFICE.value, EntryStatus.LEAVE.value)
REFERENCE_CONDITIONS = ('present', 'absent')


# ===== BODY VALIDATION =====

def _half_day_errors(item: Dict[str, Any], path: str, status: Optional[str]) -> List[str]:
    errors = []
    leave_duration = item.get('leaveDuration')
    half_day_portion = item.get('halfDayPortion')
    working_portion = item.get('workingPortion')

    if leave_duration is not None and leave_duration not in [d.value for d in LeaveDuration]:
        errors.append(f'{path}.leaveDuration: must be "full" or "half"')
    if half_day_portion is not None and half_day_portion not in [p.value for p in HalfDayPortion]:
        errors.append(f'{path}.halfDayPortion: must be "first-half" or "second-half"')
    if working_portion is not None and working_portion not in [p.value for p in WorkingPortion]:
        errors.append(f'{path}.workingPortion: must be "wfh" or "office"')

    if status != EntryStatus.LEAVE.value:
        for key in ('leaveDuration', 'halfDayPortion', 'workingPortion'):
            if item.get(key) is not None:
                errors.append(f'{path}.{key}: only allowed when status is "leave"')
    elif leave_duration == LeaveDuration.HALF.value and not half_day_portion:
        errors.append(f'{path}.halfDayPortion: required when leaveDuration is "half"')
    return errors


def validate_actions(actions: Any, max_actions: int) -> List[Dict[str, Any]]:
    """
    Check the shape of a resolve request

    Raises:
        ValidationException: with details.errors listing every problem
    """
    if not isinstance(actions, list) or not actions:
        raise ValidationException('actions array is required.')
    if len(actions) > max_actions:
        raise ValidationException(f'Maximum {max_actions} actions per request.')

    errors = []
    for index, action in enumerate(actions):
        path = f'actions[{index}]'
        if not isinstance(action, dict):
            errors.append(f'{path}: must be an object')
            continue

        if action.get('type') not in ACTION_TYPES:
            errors.append(f'{path}.type: must be "set" or "clear"')
        status = action.get('status')
        if action.get('type') == 'set' and status is not None and status not in CHANGE_STATUSES[:2]:
            errors.append(f'{path}.status: must be "office" or "leave"')

        tool_call = action.get('toolCall')
        expressions = action.get('dateExpressions')
        if tool_call is None and not expressions:
            errors.append(f'{path}: toolCall or dateExpressions is required')
        if tool_call is not None and not isinstance(tool_call, dict):
            errors.append(f'{path}.toolCall: must be an object')
        if expressions is not None and (
                not isinstance(expressions, list) or not all(isinstance(e, str) for e in expressions)):
            errors.append(f'{path}.dateExpressions: must be an array of strings')
        if action.get('modifiers') is not None and not isinstance(action.get('modifiers'), list):
            errors.append(f'{path}.modifiers: must be an array')

        if action.get('filterByCurrentStatus') is not None and action['filterByCurrentStatus'] not in FILTER_STATUSES:
            errors.append(f'{path}.filterByCurrentStatus: must be one of {", ".join(FILTER_STATUSES)}')
        if action.get('referenceCondition') is not None and action['referenceCondition'] not in REFERENCE_CONDITIONS:
            errors.append(f'{path}.referenceCondition: must be "present" or "absent"')
        if action.get('note') is not None and not isinstance(action['note'], str):
            errors.append(f'{path}.note: must be a string')

        errors.extend(_half_day_errors(action, path, status if action.get('type') == 'set' else None))

    if errors:
        raise ValidationException('Invalid actions', details={'errors': errors})
    return actions


def validate_changes(changes: Any, max_changes: int) -> List[Dict[str, Any]]:
    """
    Check the shape of an apply request

    Raises:
        ValidationException: with details.errors listing every problem
    """
    if not isinstance(changes, list) or not changes:
        raise ValidationException('changes array is required.')
    if len(changes) > max_changes:
        raise ValidationException(f'Maximum {max_changes} changes per batch.')

    errors = []
    for index, change in enumerate(changes):
        path = f'changes[{index}]'
        if not isinstance(change, dict):
            errors.append(f'{path}: must be an object')
            continue
        if not isinstance(change.get('date'), str):
            errors.append(f'{path}.date: must be a string')
        if change.get('note') is not None and not isinstance(change['note'], str):
            errors.append(f'{path}.note: must be a string')
        errors.extend(_half_day_errors(change, path, change.get('status')))

    if errors:
        raise ValidationException('Invalid changes', details={'errors': errors})
    return changes


# ===== RESOLVE =====

def _resolve_action_dates(action: Dict[str, Any], today: date) -> List[str]:
    expressions = action.get('dateExpressions') or []
    fallback = {'tool': DateTool.RESOLVE_DATES.value, 'params': {'dates': expressions}}

    tool_call = action.get('toolCall')
    if tool_call is None:
        result = execute_date_tool(fallback, today)
        logger.info(f"Date expressions resolved {len(result.dates)} dates")
        return result.dates

    if action.get('modifiers'):
        generated = execute_date_tool(tool_call, today)
        context = get_holiday_context(generated.dates) if generated.success else None
        result = execute_date_pipeline(tool_call, action['modifiers'], today, context)
        generated = result.generator_result
    else:
        result = generated = execute_date_tool(tool_call, today)

    if result.success:
        logger.info(f"Tool \"{tool_call.get('tool')}\" resolved {len(result.dates)} dates")
        return result.dates

    logger.warning(f"Tool \"{tool_call.get('tool')}\" failed: {generated.error}")
    if expressions:
        return execute_date_tool(fallback, today).dates
    return []


def _reference_presence(action: Dict[str, Any], dates: List[str]) -> Optional[Set[str]]:
    """Dates on which the referenced person has an office entry; empty when unknown"""
    ref_name = (action.get('referenceUser') or '').strip()
    if not ref_name or not action.get('referenceCondition'):
        return None

    ref_user = find_user_by_name(ref_name)
    if ref_user is None or not dates:
        return set()

    Entry = get_models()['Entry']
    entries = Entry.query.filter(
        Entry.user_id == ref_user.id,
        Entry.status == EntryStatus.OFFICE.value,
        Entry.date.in_([date.fromisoformat(d) for d in dates])
    ).all()
    return {entry.date.isoformat() for entry in entries}


def _current_statuses(user_id: int, dates: List[str]) -> Dict[str, str]:
    valid = [parse_iso_date(d) for d in dates if parse_iso_date(d)]
    if not valid:
        return {}
    Entry = get_models()['Entry']
    entries = Entry.query.filter(Entry.user_id == user_id, Entry.date.in_(valid)).all()
    return {entry.date.isoformat(): entry.status for entry in entries}


def _validate_change_date(day: str, holidays: Set[str], today: date, is_admin: bool, window_days: int) -> Optional[str]:
    parsed = parse_iso_date(day)
    if parsed.weekday() >= 5:
        return 'Weekend date – skipped'
    if day in holidays:
        return 'Holiday – skipped'
    if not is_admin and not is_member_allowed_date(day, today, window_days):
        return 'Outside allowed editing window'
    return None


def resolve_plan(
    user,
    actions: List[Dict[str, Any]],
    today: date,
    is_admin: bool = False,
    window_days: int = 90,
) -> Dict[str, Any]:
    """
    Expand actions into a reviewed change list

    Each action's dates come from its toolCall (plus modifiers); when the
    tool fails, its dateExpressions are resolved instead. Dates are then
    narrowed by filterByCurrentStatus ("wfh" = no entry) and by a reference
    person's presence, and each surviving date is validated.

    Returns:
        {"changes": [...], "validCount": n, "invalidCount": m} where changes
        are sorted by date and later actions win for the same date
    """
    resolved = [(action, _resolve_action_dates(action, today)) for action in actions]
    all_dates = sorted({d for _, dates in resolved for d in dates})

    holidays: Set[str] = set()
    if all_dates:
        holidays = get_holiday_set(all_dates[0], all_dates[-1])
    current_statuses = {}
    if any(action.get('filterByCurrentStatus') for action in actions):
        current_statuses = _current_statuses(user.id, all_dates)

    changes = []
    for action, dates in resolved:
        status = CLEAR if action.get('type') == CLEAR else (action.get('status') or EntryStatus.OFFICE.value)
        status_filter = action.get('filterByCurrentStatus')
        presence = _reference_presence(action, dates)
        note = action.get('note')

        for day in dates:
            if not ISO_DATE_RE.match(day) or parse_iso_date(day) is None:
                changes.append({
                    'date': day, 'day': 'Unknown', 'status': status, 'note': note,
                    'valid': False, 'validationMessage': 'Invalid date format',
                })
                continue

            if status_filter:
                current = current_statuses.get(day)
                if status_filter == 'wfh' and current is not None:
                    continue
                if status_filter != 'wfh' and current != status_filter:
                    continue

            if presence is not None:
                is_present = day in presence
                if action['referenceCondition'] == 'present' and not is_present:
                    continue
                if action['referenceCondition'] == 'absent' and is_present:
                    continue

            message = _validate_change_date(day, holidays, today, is_admin, window_days)
            if message is None and status not in CHANGE_STATUSES:
                message = f"Invalid status: {status}"

            change = {
                'date': day,
                'day': get_day_of_week(day),
                'status': status,
                'note': note,
                'valid': message is None,
                'validationMessage': message,
            }
            if status == EntryStatus.LEAVE.value and action.get('leaveDuration') == LeaveDuration.HALF.value:
                change['leaveDuration'] = LeaveDuration.HALF.value
                change['halfDayPortion'] = action.get('halfDayPortion') or HalfDayPortion.FIRST_HALF.value
                change['workingPortion'] = action.get('workingPortion') or WorkingPortion.WFH.value
            changes.append(change)

    # Stable sort keeps action order within a date, so the last action wins
    latest = {}
    for change in sorted(changes, key=lambda c: c['date']):
        latest[change['date']] = change
    deduplicated = list(latest.values())

    return {
        'changes': deduplicated,
        'validCount': sum(1 for c in deduplicated if c['valid']),
        'invalidCount': sum(1 for c in deduplicated if not c['valid']),
    }


# ===== APPLY =====

def _apply_one(Entry, db, user_id: int, change: Dict[str, Any]) -> Dict[str, Any]:
    day = change['date']
    status = change.get('status')
    entry_date = date.fromisoformat(day)
    existing = Entry.query.filter_by(user_id=user_id, date=entry_date).first()

    if status == CLEAR:
        if existing is not None:
            db.session.delete(existing)
        return {'date': day, 'success': True, 'message': 'Cleared (reverted to WFH)'}

    if existing is None:
        existing = Entry(user_id=user_id, date=entry_date, status=status)
        db.session.add(existing)

    existing.status = status
    existing.note = (change.get('note') or '').strip() or None
    if status == EntryStatus.LEAVE.value and change.get('leaveDuration') == LeaveDuration.HALF.value:
        existing.leave_duration = LeaveDuration.HALF.value
        existing.half_day_portion = change.get('halfDayPortion') or HalfDayPortion.FIRST_HALF.value
        existing.working_portion = change.get('workingPortion') or WorkingPortion.WFH.value
    else:
        existing.leave_duration = None
        existing.half_day_portion = None
        existing.working_portion = None

    field_errors = existing.validate_fields()
    if field_errors:
        if existing in db.session.new:
            db.session.expunge(existing)
        else:
            db.session.refresh(existing)
        return {'date': day, 'success': False, 'message': '; '.join(field_errors)}

    return {'date': day, 'success': True}


@with_db_transaction
def apply_changes(
    user,
    changes: List[Dict[str, Any]],
    today: date,
    is_admin: bool = False,
    window_days: int = 90,
) -> Dict[str, Any]:
    """
    Persist reviewed changes for one user

    Every item is re-validated (format, editing window unless admin,
    status). "clear" deletes the entry; anything else upserts it. All
    accepted items commit together.

    Returns:
        {"processed": n, "failed": m, "results": [{date, success, message?}]}
    """
    models = get_models()
    Entry = models['Entry']
    db = get_db()

    results = []
    for change in changes:
        day = change.get('date')
        if not isinstance(day, str) or parse_iso_date(day) is None:
            results.append({'date': day, 'success': False, 'message': 'Invalid date format'})
            continue
        if not is_admin and not is_member_allowed_date(day, today, window_days):
            results.append({'date': day, 'success': False, 'message': 'Outside allowed editing window'})
            continue
        if change.get('status') not in CHANGE_STATUSES:
            results.append({'date': day, 'success': False, 'message': 'Invalid status'})
            continue

        results.append(_apply_one(Entry, db, user.id, change))

    processed = sum(1 for r in results if r['success'])
    logger.info(f"Applied workbot changes for user {user.id}: {processed} processed, {len(results) - processed} failed")

    return {
        'processed': processed,
        'failed': len(results) - processed,
        'results': results,
    }
