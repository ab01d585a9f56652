"""
Admin API Routes
User management for admins: list, create, update and delete team members
"""
from functools import wraps

from flask import Blueprint, request, jsonify, current_app, g

from attendance.error_handlers import (
    AuthorizationException,
    ConflictException,
    ValidationException,
    handle_errors,
    with_db_transaction,
)
from attendance.models import get_models
from attendance.utils.request_helpers import get_json_body, get_user_or_404

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin/users')

ROLES = ('member', 'admin')
MAX_PAGE_SIZE = 100


def admin_required(f):
    """Decorator to require an active admin, named by the X-User-Id header"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        raw = request.headers.get('X-User-Id', '')
        if not raw.isdigit():
            raise AuthorizationException('Admin access required')
        acting = get_user_or_404(int(raw))
        if not acting.is_admin or not acting.is_active:
            raise AuthorizationException('Admin access required')
        g.acting_user = acting
        return f(*args, **kwargs)
    return decorated_function


def _clean_name(value):
    if not isinstance(value, str) or not value.strip():
        raise ValidationException('name: is required')
    name = value.strip()
    if len(name) > 100:
        raise ValidationException('name: must be at most 100 characters')
    return name


def _clean_email(value):
    if not isinstance(value, str) or '@' not in value.strip():
        raise ValidationException('email: invalid email address')
    return value.strip().lower()


def _clean_role(value):
    if value not in ROLES:
        raise ValidationException('role: must be "member" or "admin"')
    return value


def _check_email_free(User, email, user_id=None):
    existing = User.query.filter_by(email=email).first()
    if existing is not None and existing.id != user_id:
        raise ConflictException(f'A user with email {email} already exists')


@admin_bp.route('', methods=['GET'])
@handle_errors
@admin_required
def list_users():
    """Users ordered by name, paginated with page/limit"""
    User = get_models()['User']
    page = max(1, request.args.get('page', 1, type=int))
    limit = min(MAX_PAGE_SIZE, max(1, request.args.get('limit', 20, type=int)))

    query = User.query.order_by(User.name, User.id)
    total = query.count()
    users = query.offset((page - 1) * limit).limit(limit).all()

    return jsonify({
        'success': True,
        'users': [user.to_dict() for user in users],
        'pagination': {
            'page': page,
            'limit': limit,
            'total': total,
            'totalPages': (total + limit - 1) // limit,
        }
    })


@admin_bp.route('', methods=['POST'])
@handle_errors
@admin_required
@with_db_transaction
def create_user():
    User = get_models()['User']
    db = current_app.extensions['sqlalchemy']
    data = get_json_body()

    name = _clean_name(data.get('name'))
    email = _clean_email(data.get('email'))
    role = _clean_role(data.get('role') or 'member')
    _check_email_free(User, email)

    user = User(name=name, email=email, role=role)
    db.session.add(user)
    db.session.flush()

    current_app.logger.info(f"{g.acting_user.name} created user {user.email} ({user.role})")
    return jsonify({'success': True, 'user': user.to_dict()}), 201


@admin_bp.route('/<int:user_id>', methods=['PUT'])
@handle_errors
@admin_required
@with_db_transaction
def update_user(user_id):
    """Update any of name, email, role and isActive"""
    User = get_models()['User']
    user = get_user_or_404(user_id)
    data = get_json_body()

    if not any(key in data for key in ('name', 'email', 'role', 'isActive')):
        raise ValidationException('At least one field to update is required')

    if 'name' in data:
        user.name = _clean_name(data['name'])
    if 'email' in data:
        email = _clean_email(data['email'])
        _check_email_free(User, email, user.id)
        user.email = email
    if 'role' in data:
        user.role = _clean_role(data['role'])
    if 'isActive' in data:
        if not isinstance(data['isActive'], bool):
            raise ValidationException('isActive: must be a boolean')
        user.is_active = data['isActive']

    current_app.logger.info(f"{g.acting_user.name} updated user {user.id}")
    return jsonify({'success': True, 'user': user.to_dict()})


@admin_bp.route('/<int:user_id>', methods=['DELETE'])
@handle_errors
@admin_required
@with_db_transaction
def delete_user(user_id):
    """Delete a user together with their entries"""
    db = current_app.extensions['sqlalchemy']
    user = get_user_or_404(user_id)
    if user.id == g.acting_user.id:
        raise ValidationException('Cannot delete your own account')

    db.session.delete(user)
    current_app.logger.info(f"{g.acting_user.name} deleted user {user.email}")
    return jsonify({'success': True, 'message': f"User '{user.name}' deleted"})
