"""Rows of the ingredient lists shown next to a recipe and its steps."""

import dataclasses
from typing import List, Optional

from recipe_utils.ingredients.formatting import format_quantity
from recipe_utils.recipes.models import Ingredient


@dataclasses.dataclass
class IngredientRow:
    name: str
    amount: Optional[str]
    unit: Optional[str]


def scale_quantity(quantity: float, original: int, current: int) -> float:
    """Linearly scale a quantity from ``original`` to ``current`` servings."""
    return quantity / max(original, 1) * current


def capitalize_name(name: str) -> str:
    """Capitalize the first letter of a name, leaving the rest untouched.

    Examples:
        >>> capitalize_name("olive oil")
        'Olive oil'
        >>> capitalize_name("x")
        'x'
    """
    if len(name) > 1:
        return name[0].upper() + name[1:]
    return name


def ingredient_rows(
    ingredients: List[Ingredient],
    original: int,
    current: int,
    description_length: Optional[int] = None,
) -> List[IngredientRow]:
    """Build the display rows of an ingredient list.

    Args:
        ingredients: Ingredients to list, in display order.
        original: Servings the quantities were written for.
        current: Servings to display the quantities for.
        description_length: Length of the owning step description. When given,
            ingredients whose quantity does not appear in that step are listed
            without an amount.

    Returns:
        One IngredientRow per ingredient.
    """
    rows = []
    for ingredient in ingredients:
        amount = None
        if description_length is None or ingredient.has_inline_quantity(
            description_length
        ):
            amount = format_quantity(
                scale_quantity(ingredient.quantity, original, current)
            )
        rows.append(
            IngredientRow(
                name=capitalize_name(ingredient.name),
                amount=amount,
                unit=ingredient.unit or None,
            )
        )
    return rows
