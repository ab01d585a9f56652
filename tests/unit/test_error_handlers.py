"""
Unit tests for the exception hierarchy and error-handling decorators.
"""
import pytest
from datetime import date

from attendance.error_handlers import (
    DatabaseException,
    ValidationException,
    handle_errors,
    with_db_transaction,
)


class TestExceptions:
    """Tests for AppException.to_dict()."""

    @pytest.mark.unit
    def test_details_are_merged(self):
        error = ValidationException('Invalid entry', details={'errors': ['date: must be a string']})

        body = error.to_dict()

        assert body['success'] is False
        assert body['error'] == 'ValidationError'
        assert body['status_code'] == 400
        assert body['errors'] == ['date: must be a string']


class TestDecorators:
    """Tests for @handle_errors and @with_db_transaction."""

    @pytest.mark.unit
    def test_handle_errors_formats_app_exceptions(self, app):
        @handle_errors
        def view():
            raise ValidationException('bad input')

        with app.test_request_context():
            response, status = view()

        assert status == 400
        assert response.get_json()['message'] == 'bad input'

    @pytest.mark.unit
    def test_handle_errors_hides_unexpected_errors(self, app):
        @handle_errors
        def view():
            raise KeyError('secret')

        with app.test_request_context():
            response, status = view()

        body = response.get_json()
        assert status == 500
        assert body['error'] == 'InternalError'
        assert 'secret' not in body['message']
        assert body['error_id']

    @pytest.mark.unit
    def test_transaction_rolls_back_driver_errors(self, models, db, holiday_factory):
        Holiday = models['Holiday']
        holiday_factory(date=date(2026, 3, 4))

        @with_db_transaction
        def add_duplicate():
            db.session.add(Holiday(date=date(2026, 3, 4), name='Duplicate'))

        with pytest.raises(DatabaseException):
            add_duplicate()

        assert Holiday.query.count() == 1
