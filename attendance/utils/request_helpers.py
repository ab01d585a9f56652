"""Helpers shared by the JSON blueprints."""

from flask import current_app, request

from attendance.error_handlers import ResourceNotFoundException, ValidationException
from attendance.models import get_db, get_models
from attendance.services.date_tools import parse_iso_date
from attendance.utils.timezone import today_in_zone


def get_json_body():
    """Request body as a dict, or a 400 when it is not a JSON object."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationException('Request body must be a JSON object')
    return data


def resolve_today(value=None):
    """Explicit YYYY-MM-DD from the body, else today in REFERENCE_TIMEZONE."""
    if value is None:
        return today_in_zone(current_app.config.get('REFERENCE_TIMEZONE'))
    parsed = parse_iso_date(value)
    if parsed is None:
        raise ValidationException(f'today must be YYYY-MM-DD, got {value!r}')
    return parsed


def get_user_or_404(user_id):
    User = get_models()['User']
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise ValidationException('userId must be an integer')
    user = get_db().session.get(User, user_id)
    if user is None:
        raise ResourceNotFoundException(f'User {user_id} not found')
    return user
