"""
Logging setup and global JSON error handlers
"""
import logging
import os
from datetime import datetime
from flask import jsonify, request

from .exceptions import AppException


def setup_logging(app):
    """Configure application logging"""
    log_level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO').upper())
    log_file = app.config.get('LOG_FILE')

    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    )

    handlers = []

    if log_file:
        # Make log file path absolute if it's not
        if not os.path.isabs(log_file):
            basedir = os.path.abspath(os.path.dirname(os.path.dirname(os.path.dirname(__file__))))
            log_file = os.path.join(basedir, log_file)
        os.makedirs(os.path.dirname(log_file), exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    app.logger.setLevel(log_level)
    for handler in handlers:
        app.logger.addHandler(handler)

    # Service modules log under the package logger
    package_logger = logging.getLogger('attendance')
    package_logger.setLevel(log_level)
    if not package_logger.handlers:
        for handler in handlers:
            package_logger.addHandler(handler)

    logging.getLogger('werkzeug').setLevel(log_level)

    return app.logger


def _error_response(error, message, status_code, **extra):
    body = {'success': False, 'error': error, 'message': message, 'status_code': status_code}
    body.update(extra)
    return jsonify(body), status_code


def register_error_handlers(app):
    """Register global JSON error handlers for the Flask app"""

    @app.errorhandler(AppException)
    def app_exception(error):
        app.logger.warning(f"{error.error_type}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(400)
    def bad_request_error(error):
        app.logger.warning(f"Bad request from {request.remote_addr}: {request.url}")
        return _error_response('Bad Request', 'The request could not be understood by the server', 400)

    @app.errorhandler(404)
    def not_found_error(error):
        app.logger.info(f"404 Not Found: {request.url} from {request.remote_addr}")
        return _error_response('Not Found', 'The requested resource was not found', 404)

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        app.logger.warning(f"Method not allowed: {request.method} {request.url} from {request.remote_addr}")
        return _error_response(
            'Method Not Allowed', f'The {request.method} method is not allowed for this endpoint', 405
        )

    @app.errorhandler(429)
    def rate_limited_error(error):
        app.logger.warning(f"Rate limit hit: {request.url} from {request.remote_addr}")
        return _error_response('Too Many Requests', str(error.description), 429)

    @app.errorhandler(500)
    def internal_error(error):
        error_id = datetime.utcnow().strftime('%Y%m%d_%H%M%S_%f')
        app.logger.error(f"Internal Server Error [{error_id}]: {str(error)}", exc_info=True)
        return _error_response('Internal Server Error', 'An unexpected error occurred', 500, error_id=error_id)
