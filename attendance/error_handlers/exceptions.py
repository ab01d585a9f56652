"""
Custom exception hierarchy for type-safe error handling

Maps outer-layer failures to HTTP status codes. The date engine itself never
raises across its boundary; these are for request handling and persistence.

Exception Hierarchy:
    AppException (base)
    ├── ValidationException (400)
    ├── AuthorizationException (403)
    ├── ResourceNotFoundException (404)
    ├── ConflictException (409)
    └── DatabaseException (500)
"""
from typing import Dict, Any, Optional


class AppException(Exception):
    """
    Base exception for all application errors

    Attributes:
        status_code: HTTP status code for the error
        error_type: String identifier for the error type
        message: Human-readable error message
        details: Additional context about the error
    """
    status_code = 500
    error_type = 'ApplicationError'

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        if status_code:
            self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to JSON-serializable dictionary

        Returns:
            Dictionary suitable for JSON response
        """
        result = {
            'success': False,
            'error': self.error_type,
            'message': self.message,
            'status_code': self.status_code
        }

        if self.details:
            result.update(self.details)

        return result

    def __str__(self) -> str:
        return f"{self.error_type}: {self.message}"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}('{self.message}', status_code={self.status_code})>"


class ValidationException(AppException):
    """
    Validation errors (HTTP 400)

    Example:
        >>> if not isinstance(body.get('changes'), list):
        ...     raise ValidationException('changes must be an array')
    """
    status_code = 400
    error_type = 'ValidationError'


class AuthorizationException(AppException):
    """
    Authorization errors (HTTP 403)

    Raised when a non-admin acts outside their own editing window or on
    admin-only resources.
    """
    status_code = 403
    error_type = 'AuthorizationError'


class ResourceNotFoundException(AppException):
    """
    Resource not found (HTTP 404)

    Example:
        >>> user = User.query.get(user_id)
        >>> if not user:
        ...     raise ResourceNotFoundException(f'User {user_id} not found')
    """
    status_code = 404
    error_type = 'NotFound'


class ConflictException(AppException):
    """Duplicate resource, e.g. a second holiday on the same date (HTTP 409)"""
    status_code = 409
    error_type = 'Conflict'


class DatabaseException(AppException):
    """Database operation failed (HTTP 500)"""
    status_code = 500
    error_type = 'DatabaseError'
