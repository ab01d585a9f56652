"""
JSON blueprints
"""
from .workbot import workbot_bp
from .entries import entries_bp
from .holidays import holidays_bp
from .admin import admin_bp
from .health import health_bp

__all__ = ['workbot_bp', 'entries_bp', 'holidays_bp', 'admin_bp', 'health_bp']
