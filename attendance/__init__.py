"""
Flask application factory.

Creates the office attendance service: models, JSON blueprints, logging
and error handling.
"""

from flask import Flask
import os

from .extensions import db, migrate, limiter
from .config import get_config


def create_app(config_name=None):
    """
    Application factory function.

    Args:
        config_name: Configuration name (development, testing, production)
                    If None, determined from environment

    Returns:
        Flask application instance
    """
    app = Flask(__name__)

    # Load configuration
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Ensure instance directory exists and make relative sqlite paths absolute
    basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///instance/'):
        os.makedirs(os.path.join(basedir, "instance"), exist_ok=True)
        db_name = app.config['SQLALCHEMY_DATABASE_URI'].rsplit('/', 1)[-1]
        app.config['SQLALCHEMY_DATABASE_URI'] = f'sqlite:///{os.path.join(basedir, "instance", db_name)}'

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    # Configure logging and error handling
    from attendance.error_handlers import setup_logging, register_error_handlers
    setup_logging(app)
    register_error_handlers(app)

    # Initialize database models
    from attendance.models import init_models, model_registry
    models = init_models(db)

    model_registry.init_app(app)
    model_registry.register(models)

    register_blueprints(app)

    return app


def register_blueprints(app):
    """Register all Flask blueprints."""
    from attendance.routes import workbot_bp, entries_bp, holidays_bp, admin_bp, health_bp

    app.register_blueprint(workbot_bp)
    app.register_blueprint(entries_bp)
    app.register_blueprint(holidays_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(health_bp)

    # Health checks are never throttled
    limiter.exempt(health_bp)


def init_db(app):
    """Create all tables."""
    with app.app_context():
        db.create_all()
