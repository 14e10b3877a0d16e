"""Ingredient quantity formatting and listing utilities."""

from .formatting import format_quantity
from .listing import IngredientRow, capitalize_name, ingredient_rows, scale_quantity

__all__ = [
    "format_quantity",
    "IngredientRow",
    "capitalize_name",
    "ingredient_rows",
    "scale_quantity",
]
