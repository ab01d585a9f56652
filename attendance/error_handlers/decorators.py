"""
Error handling decorators

Provides decorators for consistent error handling across endpoints.
"""
from functools import wraps
from flask import jsonify, current_app
from datetime import datetime
from sqlalchemy.exc import SQLAlchemyError

from .exceptions import AppException, DatabaseException


def handle_errors(f):
    """
    Universal error handler decorator - use on all endpoints

    AppException subclasses become their own JSON body and status code.
    Anything else is logged with a traceback and an error ID and returned
    as a generic 500.

    Usage:
        @workbot_bp.route('/apply', methods=['POST'])
        @handle_errors
        def apply():
            if not valid:
                raise ValidationException('Invalid input')
            return jsonify({'success': True})
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            return f(*args, **kwargs)

        except AppException as e:
            current_app.logger.warning(
                f"{e.error_type} in {f.__name__}: {e.message}",
                extra={'details': e.details} if e.details else {}
            )
            return jsonify(e.to_dict()), e.status_code

        except Exception as e:
            error_id = datetime.utcnow().strftime('%Y%m%d_%H%M%S_%f')

            current_app.logger.error(
                f"Unexpected error [{error_id}] in {f.__name__}: {str(e)}",
                exc_info=True
            )

            # Don't expose internal error details
            return jsonify({
                'success': False,
                'error': 'InternalError',
                'message': 'An unexpected error occurred',
                'error_id': error_id,
                'status_code': 500
            }), 500

    return decorated


def with_db_transaction(f):
    """
    Wrap a function in a database transaction

    Commits on success; rolls back and re-raises on any error so the
    surrounding @handle_errors can format the response. Driver errors are
    re-raised as DatabaseException.

    Usage:
        @handle_errors
        @with_db_transaction
        def apply_changes(...):
            ...
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        db = current_app.extensions['sqlalchemy']

        try:
            result = f(*args, **kwargs)
            db.session.commit()
            return result
        except SQLAlchemyError as e:
            db.session.rollback()
            raise DatabaseException(f"Database error in {f.__name__}") from e
        except Exception:
            db.session.rollback()
            raise

    return decorated
