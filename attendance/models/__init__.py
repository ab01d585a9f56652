"""
Database models for the office attendance service
Centralizes all SQLAlchemy model imports using factory pattern
"""
from .user import create_user_model
from .entry import create_entry_model, validate_entry_fields
from .holiday import create_holiday_model


def init_models(db):
    """
    Initialize all models with the database instance

    Args:
        db: SQLAlchemy database instance

    Returns:
        dict: Dictionary containing all model classes
    """
    User = create_user_model(db)
    Entry = create_entry_model(db)
    Holiday = create_holiday_model(db)

    return {
        'User': User,
        'Entry': Entry,
        'Holiday': Holiday,
    }


__all__ = [
    'init_models',
    'create_user_model',
    'create_entry_model',
    'create_holiday_model',
    'validate_entry_fields',
    # Model registry exports
    'model_registry',
    'get_models',
    'get_db'
]

# Import registry for convenience
from .registry import model_registry, get_models, get_db
