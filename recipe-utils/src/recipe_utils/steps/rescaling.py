"""Fill the quantity placeholders of a segmented step for a number of servings."""

import dataclasses
import re
from typing import List, Optional

from recipe_utils.ingredients.formatting import format_quantity
from recipe_utils.ingredients.listing import scale_quantity
from recipe_utils.recipes.models import Ingredient, RecipeStep, Timer
from recipe_utils.steps.segmentation import (
    INGREDIENT_PLACEHOLDER,
    TEXT_BLOCK,
    TIMER_BLOCK,
    StepBlock,
    StepSegmentation,
    in_block,
    sorted_by_position,
)

_FIRST_ALNUM = re.compile(r"[^\W_]")


@dataclasses.dataclass
class RenderedBlock:
    """A block ready to be handed to the renderer."""

    kind: str
    text: str = ""
    timer: Optional[Timer] = None


def strip_leading_separators(text: str) -> str:
    """Remove whitespace and punctuation in front of a block's first word.

    Removing a quantity can leave a separator such as ", " at the start of a
    block. Blocks without any alphabetic character are returned unchanged.

    Examples:
        >>> strip_leading_separators(", add 400 g pasta.")
        'add 400 g pasta.'
        >>> strip_leading_separators(" 2 eggs")
        '2 eggs'
        >>> strip_leading_separators(" ...")
        ' ...'
    """
    if not any(char.isalpha() for char in text):
        return text
    match = _FIRST_ALNUM.search(text)
    return text[match.start() :]


def rescale_block(
    block: StepBlock,
    ingredients: List[Ingredient],
    description_length: int,
    original: int,
    current: int,
) -> str:
    """Fill the placeholders of a text block, left to right.

    Always pass a block straight from the segmentation: the placeholders are
    consumed, so a rescaled text cannot be rescaled again.

    Args:
        block: A text block produced by ``segment_step``.
        ingredients: The ingredients of the step, in any order.
        description_length: Length of the step description.
        original: Servings the quantities were written for.
        current: Servings to render the quantities for.

    Returns:
        The block text with rescaled, formatted quantities.
    """
    text = block.template
    for ingredient in sorted_by_position(ingredients):
        if not in_block(ingredient, block.span, description_length):
            continue
        quantity = scale_quantity(ingredient.quantity, original, current)
        text = text.replace(INGREDIENT_PLACEHOLDER, format_quantity(quantity), 1)
    return strip_leading_separators(text)


def render_step(
    segmentation: StepSegmentation,
    step: RecipeStep,
    original: int,
    current: int,
) -> List[RenderedBlock]:
    """Render every block of a segmented step for ``current`` servings."""
    description_length = len(segmentation.description)
    rendered = []
    for block in segmentation.blocks:
        if block.kind == TIMER_BLOCK:
            rendered.append(RenderedBlock(kind=TIMER_BLOCK, timer=block.timer))
        else:
            rendered.append(
                RenderedBlock(
                    kind=TEXT_BLOCK,
                    text=rescale_block(
                        block, step.ingredients, description_length, original, current
                    ),
                )
            )
    return rendered
