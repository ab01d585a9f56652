"""
Integration tests for the entries, holidays and health endpoints.

Tests cover:
- Entry upsert, listing, deletion and the member editing window
- Holiday CRUD
- Health checks
- JSON error responses
"""
import pytest
import json

from attendance.utils.timezone import today_string


def put_json(client, url, body):
    return client.put(url, data=json.dumps(body), content_type='application/json')


def post_json(client, url, body):
    return client.post(url, data=json.dumps(body), content_type='application/json')


class TestEntriesAPI:
    """Tests for /api/entries."""

    @pytest.mark.integration
    def test_create_then_update(self, client, user_factory):
        user = user_factory()
        body = {'userId': user.id, 'date': '2026-03-02', 'status': 'office', 'isAdmin': True}

        response = put_json(client, '/api/entries', body)
        assert response.status_code == 201
        assert json.loads(response.data)['entry']['status'] == 'office'

        response = put_json(client, '/api/entries', dict(body, status='leave', leaveDuration='full'))
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['entry']['status'] == 'leave'
        assert data['entry']['leave_duration'] == 'full'

    @pytest.mark.integration
    def test_list_entries(self, client, user_factory):
        user = user_factory()
        for day in ('2026-03-03', '2026-03-02', '2026-04-01'):
            put_json(client, '/api/entries', {'userId': user.id, 'date': day, 'status': 'office', 'isAdmin': True})

        response = client.get(f'/api/entries?userId={user.id}&start=2026-03-01&end=2026-03-31')

        assert response.status_code == 200
        entries = json.loads(response.data)['entries']
        assert [e['date'] for e in entries] == ['2026-03-02', '2026-03-03']

    @pytest.mark.integration
    def test_list_requires_range(self, client, user_factory):
        user = user_factory()
        response = client.get(f'/api/entries?userId={user.id}&end=2026-03-31')
        assert response.status_code == 400
        assert json.loads(response.data)['message'] == 'start must be YYYY-MM-DD'

    @pytest.mark.integration
    def test_invalid_half_day(self, client, user_factory):
        user = user_factory()
        response = put_json(client, '/api/entries', {
            'userId': user.id, 'date': '2026-03-02', 'status': 'leave',
            'leaveDuration': 'half', 'isAdmin': True,
        })
        assert response.status_code == 400
        errors = json.loads(response.data)['errors']
        assert any('halfDayPortion is required' in error for error in errors)

    @pytest.mark.integration
    def test_member_editing_window(self, client, app, user_factory):
        user = user_factory()
        today = today_string(app.config['REFERENCE_TIMEZONE'])

        outside = put_json(client, '/api/entries', {'userId': user.id, 'date': '2000-01-03', 'status': 'office'})
        inside = put_json(client, '/api/entries', {'userId': user.id, 'date': today, 'status': 'office'})

        assert outside.status_code == 403
        assert json.loads(outside.data)['message'] == 'Outside allowed editing window'
        assert inside.status_code == 201

    @pytest.mark.integration
    def test_unknown_user(self, client, db):
        response = put_json(client, '/api/entries', {'userId': 9999, 'date': '2026-03-02', 'status': 'office'})
        assert response.status_code == 404

    @pytest.mark.integration
    def test_delete_entry(self, client, user_factory):
        user = user_factory()
        put_json(client, '/api/entries', {'userId': user.id, 'date': '2026-03-02', 'status': 'office', 'isAdmin': True})

        response = client.delete(f'/api/entries/{user.id}/2026-03-02?isAdmin=true')
        assert response.status_code == 200

        response = client.delete(f'/api/entries/{user.id}/2026-03-02?isAdmin=true')
        assert response.status_code == 404


class TestHolidaysAPI:
    """Tests for /api/holidays."""

    @pytest.mark.integration
    def test_create_and_list(self, client, db):
        response = post_json(client, '/api/holidays', {'name': 'Holi', 'date': '2026-03-04'})
        assert response.status_code == 201
        assert json.loads(response.data)['holiday']['name'] == 'Holi'

        holidays = json.loads(client.get('/api/holidays?year=2026').data)['holidays']
        assert [h['date'] for h in holidays] == ['2026-03-04']
        assert json.loads(client.get('/api/holidays?year=2025').data)['holidays'] == []

    @pytest.mark.integration
    def test_duplicate_date(self, client, holiday_factory):
        holiday_factory()
        response = post_json(client, '/api/holidays', {'name': 'Again', 'date': '2026-03-04'})
        assert response.status_code == 409

    @pytest.mark.integration
    @pytest.mark.parametrize('body', [
        {'date': '2026-03-04'},
        {'name': '   ', 'date': '2026-03-04'},
        {'name': 'Holi', 'date': '04/03/2026'},
    ])
    def test_invalid_holiday(self, client, db, body):
        response = post_json(client, '/api/holidays', body)
        assert response.status_code == 400

    @pytest.mark.integration
    def test_delete(self, client, holiday_factory):
        holiday = holiday_factory()

        assert client.delete(f'/api/holidays/{holiday.id}').status_code == 200
        assert client.delete(f'/api/holidays/{holiday.id}').status_code == 404


class TestHealth:
    """Tests for /health checks."""

    @pytest.mark.integration
    def test_ping(self, client):
        response = client.get('/health/ping')
        assert response.status_code == 200
        assert json.loads(response.data)['status'] == 'ok'

    @pytest.mark.integration
    def test_ready(self, client):
        response = client.get('/health/ready')
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['status'] == 'ready'
        assert data['checks']['database'] is True


class TestErrorResponses:
    """Framework errors come back as JSON."""

    @pytest.mark.integration
    def test_unknown_route(self, client):
        response = client.get('/api/nowhere')
        assert response.status_code == 404
        assert json.loads(response.data)['error'] == 'Not Found'

    @pytest.mark.integration
    def test_wrong_method(self, client):
        response = client.get('/api/workbot/apply')
        assert response.status_code == 405
        assert json.loads(response.data)['error'] == 'Method Not Allowed'
