"""
Unified Error Handling System

Usage:
    from attendance.error_handlers import handle_errors, ValidationException

    @bp.route('/endpoint', methods=['POST'])
    @handle_errors
    def my_endpoint():
        if not valid:
            raise ValidationException('Invalid data')
        return jsonify({'success': True})
"""
from .exceptions import (
    AppException,
    ValidationException,
    AuthorizationException,
    ResourceNotFoundException,
    ConflictException,
    DatabaseException
)
from .decorators import handle_errors, with_db_transaction
from .logging import setup_logging, register_error_handlers


__all__ = [
    # Exceptions
    'AppException',
    'ValidationException',
    'AuthorizationException',
    'ResourceNotFoundException',
    'ConflictException',
    'DatabaseException',
    # Decorators
    'handle_errors',
    'with_db_transaction',
    # App setup
    'setup_logging',
    'register_error_handlers',
]
