"""
Model Registry - Centralized model access using Flask extension pattern

Usage:
    from attendance.models import get_models

    def my_view():
        models = get_models()
        user = models['User'].query.first()
"""
from flask import current_app
from typing import Dict, Any, Optional


class ModelRegistry:
    """
    Flask extension holding the model classes built by init_models()
    """

    def __init__(self, app=None):
        self.models: Dict[str, Any] = {}
        if app:
            self.init_app(app)

    def init_app(self, app):
        """
        Initialize extension with Flask app

        Args:
            app: Flask application instance
        """
        app.extensions['models'] = self

    def register(self, models_dict: Dict[str, Any]):
        """
        Register all models with the registry

        Args:
            models_dict: Dictionary mapping model names to model classes
        """
        self.models = models_dict

    def get(self, model_name: str) -> Optional[Any]:
        return self.models.get(model_name)

    def __getitem__(self, model_name: str) -> Any:
        return self.models[model_name]


# Global instance
model_registry = ModelRegistry()


def get_models() -> Dict[str, Any]:
    """
    All registered models from the current app context

    Raises:
        RuntimeError: If the registry was never bound to the app
    """
    if 'models' not in current_app.extensions:
        raise RuntimeError(
            "ModelRegistry not initialized. "
            "Ensure model_registry.init_app(app) is called during app setup."
        )

    return current_app.extensions['models'].models


def get_db():
    """SQLAlchemy instance bound to the current app"""
    return current_app.extensions['sqlalchemy']
