"""
Configuration management for the office attendance service
Handles environment-based settings via python-decouple

Credentials are validated lazily so development and tests run without a
fully populated environment.
"""
import secrets
from decouple import config
from typing import Optional


class Config:
    """Base configuration class"""
    # Flask settings
    SECRET_KEY = config('SECRET_KEY', default=secrets.token_hex(32))
    SQLALCHEMY_DATABASE_URI = config('DATABASE_URL', default='sqlite:///instance/attendance.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Calendar settings
    # All "today" resolution happens in this zone, never the server's
    REFERENCE_TIMEZONE = config('REFERENCE_TIMEZONE', default='Asia/Kolkata')
    MEMBER_EDIT_WINDOW_DAYS = config('MEMBER_EDIT_WINDOW_DAYS', default=90, cast=int)

    # Workbot limits
    WORKBOT_MAX_ACTIONS = config('WORKBOT_MAX_ACTIONS', default=50, cast=int)
    WORKBOT_MAX_CHANGES = config('WORKBOT_MAX_CHANGES', default=100, cast=int)
    WORKBOT_APPLY_RATE_LIMIT = config('WORKBOT_APPLY_RATE_LIMIT', default='10 per minute')

    # Logging settings
    LOG_LEVEL = config('LOG_LEVEL', default='INFO')
    LOG_FILE = config('LOG_FILE', default='logs/attendance.log')

    # Rate limiting
    RATELIMIT_ENABLED = config('RATELIMIT_ENABLED', default=True, cast=bool)
    RATELIMIT_DEFAULT = config('RATELIMIT_DEFAULT', default='200 per hour')

    @classmethod
    def validate(cls) -> None:
        """
        Validate configuration - can be called explicitly or on-demand

        Raises:
            ValueError: If required configuration is missing or invalid
        """
        if cls.MEMBER_EDIT_WINDOW_DAYS < 0:
            raise ValueError("MEMBER_EDIT_WINDOW_DAYS must not be negative")
        if cls.WORKBOT_MAX_CHANGES < 1 or cls.WORKBOT_MAX_ACTIONS < 1:
            raise ValueError("WORKBOT_MAX_CHANGES and WORKBOT_MAX_ACTIONS must be positive")


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = config('LOG_LEVEL', default='DEBUG')


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    LOG_FILE = None
    RATELIMIT_ENABLED = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    SECRET_KEY = config('SECRET_KEY', default='change-this-to-a-random-secret-key-in-production')

    # Database Connection Pool (for production databases)
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_recycle': config('DB_POOL_RECYCLE', default=3600, cast=int),
        'pool_pre_ping': True,
    }

    LOG_LEVEL = config('LOG_LEVEL', default='WARNING')

    @classmethod
    def validate(cls) -> None:
        """
        Production mode: validate all required settings

        Raises:
            ValueError: If any required configuration is missing
        """
        super().validate()

        try:
            secret_key = config('SECRET_KEY')
        except Exception:
            raise ValueError(
                "SECRET_KEY environment variable must be set in production. "
                "Generate a secure key with: python -c 'import secrets; print(secrets.token_hex(32))'"
            )

        if len(secret_key) < 32:
            raise ValueError(
                f"SECRET_KEY must be at least 32 characters in production (current: {len(secret_key)})."
            )


# Configuration mapping
config_mapping = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(config_name: Optional[str] = None, validate: bool = False) -> type:
    """
    Get configuration class based on environment.

    Args:
        config_name: Environment name ('development', 'testing', 'production');
            read from FLASK_ENV when omitted
        validate: Whether to validate configuration immediately (default: False)

    Returns:
        Config class for the specified environment

    Raises:
        ValueError: If validation is enabled and required variables are missing
    """
    if config_name is None:
        config_name = config('FLASK_ENV', default='development')

    config_class = config_mapping.get(config_name, DevelopmentConfig)

    if validate:
        config_class.validate()

    return config_class
