"""
Pytest configuration and fixtures for the office attendance service tests.

This module provides shared fixtures for:
- Flask application with test configuration
- Database setup and teardown
- Model factories for creating test data
- Schedule snapshots for the pure reasoning tests
"""
import pytest
from datetime import date

from attendance import create_app
from attendance.extensions import db as _db
from attendance.services.data_retrieval import build_user_schedule


@pytest.fixture(scope='session')
def app():
    """
    Create application for the tests.

    Uses TestingConfig with in-memory SQLite database.
    Scope is 'session' to reuse the same app across all tests.
    """
    app = create_app('testing')
    app.config.update({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'RATELIMIT_ENABLED': False,  # Disable rate limiting for tests
    })

    return app


@pytest.fixture(scope='function')
def db(app):
    """
    Create database for the tests.

    Creates all tables before each test function and drops them after.
    This ensures test isolation.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def client(app, db):
    """
    Create a test client for the app.

    The client can be used to make requests to the application.
    """
    with app.test_client() as client:
        with app.app_context():
            yield client


@pytest.fixture(scope='function')
def models(app, db):
    """Models registered by create_app()"""
    from attendance.models import get_models
    return get_models()


# =============================================================================
# Model Factories
# =============================================================================

@pytest.fixture
def user_factory(models, db):
    """
    Factory for creating User instances.

    Usage:
        user = user_factory(name="Asha Rao")
        admin = user_factory(role="admin")
    """
    counter = [0]  # Use list to allow mutation in closure

    def _create_user(**kwargs):
        User = models['User']
        counter[0] += 1
        defaults = {
            'name': f'Test User {counter[0]}',
            'email': f'user{counter[0]}@example.com',
            'role': 'member',
            'is_active': True,
        }
        defaults.update(kwargs)
        user = User(**defaults)
        db.session.add(user)
        db.session.commit()
        return user

    return _create_user


@pytest.fixture
def entry_factory(models, db, user_factory):
    """
    Factory for creating Entry instances.

    Creates an associated user if not provided.

    Usage:
        entry = entry_factory(user=alice, date=date(2026, 3, 2))
        entry = entry_factory(status='leave', leave_duration='half',
                              half_day_portion='first-half', working_portion='office')
    """
    def _create_entry(user=None, **kwargs):
        Entry = models['Entry']

        if user is None:
            user = user_factory()

        defaults = {
            'user_id': user.id,
            'date': date(2026, 3, 2),
            'status': 'office',
        }
        defaults.update(kwargs)
        entry = Entry(**defaults)
        db.session.add(entry)
        db.session.commit()
        return entry

    return _create_entry


@pytest.fixture
def holiday_factory(models, db):
    """
    Factory for creating Holiday instances.

    Usage:
        holiday = holiday_factory(date=date(2026, 3, 4), name="Holi")
    """
    def _create_holiday(**kwargs):
        Holiday = models['Holiday']
        defaults = {
            'date': date(2026, 3, 4),
            'name': 'Test Holiday',
        }
        defaults.update(kwargs)
        holiday = Holiday(**defaults)
        db.session.add(holiday)
        db.session.commit()
        return holiday

    return _create_holiday


@pytest.fixture
def schedule_factory():
    """
    Factory for UserScheduleData snapshots over a date range (no database).

    Usage:
        alice = schedule_factory(1, 'Alice', {'2026-03-02': EntryData(status='office')})
    """
    def _create_schedule(user_id, name, entries=None, start='2026-03-01', end='2026-03-31', holidays=None):
        return build_user_schedule(user_id, name, start, end, set(holidays or ()), dict(entries or {}))

    return _create_schedule
