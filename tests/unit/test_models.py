"""
Unit tests for database models.

Tests cover:
- Model creation and defaults
- Entry field validation rules
- Constraints and relationships
"""
import pytest
from datetime import date

from sqlalchemy.exc import IntegrityError

from attendance.models import validate_entry_fields


class TestUserModel:
    """Tests for the User model."""

    @pytest.mark.unit
    def test_create_user(self, models, db):
        User = models['User']
        user = User(name='Asha Rao', email='asha@example.com')
        db.session.add(user)
        db.session.commit()

        assert user.id is not None
        assert user.role == 'member'  # Default
        assert user.is_active is True  # Default
        assert user.is_admin is False

    @pytest.mark.unit
    def test_admin(self, user_factory):
        assert user_factory(role='admin').is_admin is True

    @pytest.mark.unit
    def test_user_repr_and_dict(self, user_factory):
        user = user_factory(name='Test Person')

        assert 'Test Person' in repr(user)
        assert user.to_dict()['name'] == 'Test Person'

    @pytest.mark.unit
    def test_deleting_user_removes_entries(self, models, db, user_factory, entry_factory):
        user = user_factory()
        entry_factory(user=user, date=date(2026, 3, 2))
        entry_factory(user=user, date=date(2026, 3, 3))

        db.session.delete(user)
        db.session.commit()

        assert models['Entry'].query.count() == 0


class TestEntryModel:
    """Tests for the Entry model."""

    @pytest.mark.unit
    def test_create_entry(self, entry_factory):
        entry = entry_factory(date=date(2026, 3, 2), status='office', note='Sprint planning')

        assert entry.id is not None
        assert entry.to_dict()['date'] == '2026-03-02'
        assert entry.to_entry_data().status == 'office'
        assert entry.to_entry_data().note == 'Sprint planning'

    @pytest.mark.unit
    def test_one_entry_per_user_per_date(self, models, db, user_factory, entry_factory):
        user = user_factory()
        entry_factory(user=user, date=date(2026, 3, 2))

        db.session.add(models['Entry'](user_id=user.id, date=date(2026, 3, 2), status='leave'))
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()

    @pytest.mark.unit
    def test_half_day_entry(self, entry_factory):
        entry = entry_factory(status='leave', leave_duration='half',
                              half_day_portion='second-half', working_portion='office')

        assert entry.validate_fields() == []
        assert entry.to_entry_data().is_half_day is True


class TestEntryValidation:
    """Tests for validate_entry_fields()."""

    @pytest.mark.unit
    def test_valid_entries(self):
        assert validate_entry_fields('office') == []
        assert validate_entry_fields('leave', 'full') == []
        assert validate_entry_fields('leave', 'half', 'first-half', 'wfh') == []
        assert validate_entry_fields('office', start_time='09:30', end_time='18:00') == []

    @pytest.mark.unit
    @pytest.mark.parametrize('kwargs, message', [
        ({'status': 'wfh'}, 'status must be one of'),
        ({'status': 'office', 'leave_duration': 'full'}, 'leaveDuration is only allowed when status is "leave"'),
        ({'status': 'leave', 'leave_duration': 'half'}, 'halfDayPortion is required when leaveDuration is "half"'),
        ({'status': 'leave', 'leave_duration': 'full', 'working_portion': 'office'},
         'workingPortion is only allowed when leaveDuration is "half"'),
        ({'status': 'leave', 'leave_duration': 'full', 'half_day_portion': 'first-half'},
         'halfDayPortion is only allowed when leaveDuration is "half"'),
        ({'status': 'leave', 'leave_duration': 'quarter'}, 'leaveDuration must be "full" or "half"'),
        ({'status': 'office', 'start_time': '9:00'}, 'startTime must be in HH:mm 24-hour format'),
        ({'status': 'office', 'start_time': '18:00', 'end_time': '09:00'}, 'startTime must be before endTime'),
        ({'status': 'office', 'note': 'x' * 501}, 'Note cannot exceed 500 characters'),
    ])
    def test_invalid_entries(self, kwargs, message):
        errors = validate_entry_fields(**kwargs)
        assert any(message in error for error in errors), errors


class TestHolidayModel:
    """Tests for the Holiday model."""

    @pytest.mark.unit
    def test_get_holiday_dates(self, models, holiday_factory):
        holiday_factory(date=date(2026, 3, 4), name='Holi')
        holiday_factory(date=date(2026, 4, 3), name='Good Friday')

        Holiday = models['Holiday']

        assert Holiday.get_holiday_dates('2026-03-01', '2026-03-31') == {'2026-03-04'}
        assert Holiday.get_holiday_dates(date(2026, 3, 1), date(2026, 4, 30)) == {'2026-03-04', '2026-04-03'}

    @pytest.mark.unit
    def test_unique_date(self, models, db, holiday_factory):
        holiday_factory(date=date(2026, 3, 4))

        db.session.add(models['Holiday'](date=date(2026, 3, 4), name='Duplicate'))
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()
