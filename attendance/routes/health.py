"""
Health Check Endpoints
Liveness and readiness checks for orchestration.
"""
from flask import Blueprint, jsonify, current_app
from datetime import datetime
from sqlalchemy import text

health_bp = Blueprint('health', __name__, url_prefix='/health')


@health_bp.route('/ping', methods=['GET'])
def ping():
    """
    Simple ping endpoint for basic connectivity checks.
    Returns: 200 OK with pong message
    """
    return jsonify({
        'status': 'ok',
        'message': 'pong',
        'timestamp': datetime.utcnow().isoformat()
    }), 200


@health_bp.route('/ready', methods=['GET'])
def readiness():
    """
    Readiness check - verifies the database is reachable.

    Returns:
        200: Application is ready
        503: Application is not ready
    """
    checks = {'database': False}
    errors = []

    try:
        db = current_app.extensions['sqlalchemy']
        db.session.execute(text('SELECT 1'))
        checks['database'] = True
    except Exception as e:
        current_app.logger.error(f"Readiness check failed: {str(e)}")
        errors.append(f"Database: {str(e)}")

    ready = all(checks.values())
    response = {
        'status': 'ready' if ready else 'not_ready',
        'checks': checks,
        'timestamp': datetime.utcnow().isoformat()
    }
    if errors:
        response['errors'] = errors
    return jsonify(response), 200 if ready else 503
