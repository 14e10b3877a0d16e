"""Recipe Utils - Servings-aware rendering and orchestration of structured recipes."""

__version__ = "0.1.0"

from . import ingredients, recipes, steps, translation, viewmodel

__all__ = ["ingredients", "recipes", "steps", "translation", "viewmodel"]
