"""
Entries API Routes
Read and edit per-day attendance entries
"""
from flask import Blueprint, request, jsonify, current_app

from attendance.error_handlers import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
    handle_errors,
    with_db_transaction,
)
from attendance.models import get_models, validate_entry_fields
from attendance.services.date_tools import parse_iso_date
from attendance.services.working_days import is_member_allowed_date
from attendance.utils.request_helpers import get_json_body, get_user_or_404, resolve_today

entries_bp = Blueprint('entries', __name__, url_prefix='/api/entries')


def _parse_date_arg(name, value):
    parsed = parse_iso_date(value)
    if parsed is None:
        raise ValidationException(f'{name} must be YYYY-MM-DD')
    return parsed


def _check_edit_window(day, is_admin):
    if is_admin:
        return
    window_days = current_app.config.get('MEMBER_EDIT_WINDOW_DAYS', 90)
    if not is_member_allowed_date(day.isoformat(), resolve_today(), window_days):
        raise AuthorizationException('Outside allowed editing window')


@entries_bp.route('', methods=['GET'])
@handle_errors
def list_entries():
    """Entries for one user in an inclusive date range"""
    Entry = get_models()['Entry']
    user = get_user_or_404(request.args.get('userId', type=int))
    start = _parse_date_arg('start', request.args.get('start'))
    end = _parse_date_arg('end', request.args.get('end'))

    entries = Entry.query.filter(
        Entry.user_id == user.id,
        Entry.date >= start,
        Entry.date <= end
    ).order_by(Entry.date).all()

    return jsonify({
        'success': True,
        'entries': [entry.to_dict() for entry in entries]
    })


@entries_bp.route('', methods=['PUT'])
@handle_errors
@with_db_transaction
def upsert_entry():
    """Create or replace a user's entry for one date"""
    Entry = get_models()['Entry']
    db = current_app.extensions['sqlalchemy']
    data = get_json_body()

    user = get_user_or_404(data.get('userId'))
    day = _parse_date_arg('date', data.get('date'))
    _check_edit_window(day, bool(data.get('isAdmin')))

    note = (data.get('note') or '').strip() or None
    fields = {
        'status': data.get('status'),
        'leave_duration': data.get('leaveDuration'),
        'half_day_portion': data.get('halfDayPortion'),
        'working_portion': data.get('workingPortion'),
        'start_time': data.get('startTime'),
        'end_time': data.get('endTime'),
        'note': note,
    }
    errors = validate_entry_fields(**fields)
    if errors:
        raise ValidationException('Invalid entry', details={'errors': errors})

    entry = Entry.query.filter_by(user_id=user.id, date=day).first()
    created = entry is None
    if created:
        entry = Entry(user_id=user.id, date=day, status=fields['status'])
        db.session.add(entry)
    for key, value in fields.items():
        setattr(entry, key, value)
    db.session.flush()

    current_app.logger.info(f"{'Created' if created else 'Updated'} entry for user {user.id} on {day}")
    return jsonify({'success': True, 'entry': entry.to_dict()}), 201 if created else 200


@entries_bp.route('/<int:user_id>/<entry_date>', methods=['DELETE'])
@handle_errors
@with_db_transaction
def delete_entry(user_id, entry_date):
    """Remove an entry; the day reverts to WFH"""
    Entry = get_models()['Entry']
    db = current_app.extensions['sqlalchemy']
    day = _parse_date_arg('date', entry_date)
    _check_edit_window(day, request.args.get('isAdmin', 'false').lower() == 'true')

    entry = Entry.query.filter_by(user_id=user_id, date=day).first()
    if entry is None:
        raise ResourceNotFoundException(f'No entry for user {user_id} on {day.isoformat()}')

    db.session.delete(entry)
    return jsonify({'success': True, 'message': 'Entry removed (reverted to WFH)'})
