"""
Holidays API Routes
Manages organization-wide holidays
"""
from datetime import date
from flask import Blueprint, request, jsonify, current_app

from attendance.error_handlers import (
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
    handle_errors,
    with_db_transaction,
)
from attendance.models import get_models
from attendance.services.date_tools import parse_iso_date
from attendance.utils.request_helpers import get_json_body

holidays_bp = Blueprint('holidays', __name__, url_prefix='/api/holidays')


@holidays_bp.route('', methods=['GET'])
@handle_errors
def get_holidays():
    """All holidays, optionally limited to one year"""
    Holiday = get_models()['Holiday']
    year = request.args.get('year', type=int)

    query = Holiday.query
    if year:
        query = query.filter(
            Holiday.date >= date(year, 1, 1),
            Holiday.date <= date(year, 12, 31)
        )

    holidays = query.order_by(Holiday.date).all()
    return jsonify({
        'success': True,
        'holidays': [h.to_dict() for h in holidays]
    })


@holidays_bp.route('', methods=['POST'])
@handle_errors
@with_db_transaction
def create_holiday():
    """Create a holiday; one per date"""
    Holiday = get_models()['Holiday']
    db = current_app.extensions['sqlalchemy']
    data = get_json_body()

    name = (data.get('name') or '').strip()
    if not name:
        raise ValidationException('Holiday name is required')

    holiday_date = parse_iso_date(data.get('date'))
    if holiday_date is None:
        raise ValidationException('Invalid date format. Use YYYY-MM-DD')

    if Holiday.query.filter_by(date=holiday_date).first():
        raise ConflictException(f"A holiday already exists on {holiday_date.isoformat()}")

    holiday = Holiday(name=name, date=holiday_date)
    db.session.add(holiday)
    db.session.flush()

    current_app.logger.info(f"Created holiday: {holiday.name} on {holiday.date}")
    return jsonify({
        'success': True,
        'holiday': holiday.to_dict(),
        'message': f"Holiday '{holiday.name}' created successfully"
    }), 201


@holidays_bp.route('/<int:holiday_id>', methods=['DELETE'])
@handle_errors
@with_db_transaction
def delete_holiday(holiday_id):
    Holiday = get_models()['Holiday']
    db = current_app.extensions['sqlalchemy']

    holiday = db.session.get(Holiday, holiday_id)
    if holiday is None:
        raise ResourceNotFoundException(f'Holiday {holiday_id} not found')

    db.session.delete(holiday)
    current_app.logger.info(f"Deleted holiday: {holiday.name} on {holiday.date}")
    return jsonify({'success': True, 'message': f"Holiday '{holiday.name}' deleted"})
