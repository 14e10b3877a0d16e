"""Split a step description into text and timer blocks.

Every text block keeps the original substring and a template in which the
ingredient quantities are replaced by INGREDIENT_PLACEHOLDER, so the
quantities can be filled in again whenever the number of servings changes.
"""

import dataclasses
from typing import List, Optional

from recipe_utils.recipes.models import Ingredient, RecipeStep, TextSpan, Timer

# --- Constants ---

# Marks a removed quantity. Private use code points never occur in recipe text.
INGREDIENT_PLACEHOLDER = "\ue000"

TEXT_BLOCK = "text"
TIMER_BLOCK = "timer"

# --- Classes ---


@dataclasses.dataclass
class StepBlock:
    """A text or timer block of a step.

    Attributes:
        kind: TEXT_BLOCK or TIMER_BLOCK.
        span: Offsets of the block in the step description (text blocks only).
        text: The original substring of the description (text blocks only).
        template: ``text`` with quantities replaced by placeholders.
        timer: The timer of a timer block.
    """

    kind: str
    span: Optional[TextSpan] = None
    text: str = ""
    template: str = ""
    timer: Optional[Timer] = None

    @property
    def start_offset(self) -> int:
        return self.span.begin if self.span is not None else 0


@dataclasses.dataclass
class StepSegmentation:
    description: str
    blocks: List[StepBlock]

    @property
    def text_blocks(self) -> List[StepBlock]:
        return [block for block in self.blocks if block.kind == TEXT_BLOCK]

    def joined_text(self) -> str:
        """Concatenate the text blocks, which gives back the description."""
        return "".join(block.text for block in self.text_blocks)


# --- Functions ---


def in_block(ingredient: Ingredient, block_span: TextSpan, description_length: int) -> bool:
    """Check if an ingredient's quantity is written inside a block."""
    if not ingredient.has_inline_quantity(description_length):
        return False
    return block_span.contains(ingredient.quantity_position)


def sorted_by_position(ingredients: List[Ingredient], descending: bool = False) -> List[Ingredient]:
    """Order ingredients by the start of their quantity position.

    Ingredients without a position sort first in ascending order.
    """
    return sorted(
        ingredients,
        key=lambda ing: ing.quantity_position.begin if ing.quantity_position else -1,
        reverse=descending,
    )


def replace_quantities(
    description: str,
    ingredients: List[Ingredient],
    block_span: TextSpan,
) -> str:
    """Replace the quantities inside a block with placeholders.

    Args:
        description: The whole step description.
        ingredients: The step ingredients, in descending begin order.
        block_span: The block to produce the template for.

    Returns:
        The block text with one placeholder per contained quantity.
    """
    text = description[block_span.begin : block_span.end]
    for ingredient in ingredients:
        if not ingredient.has_inline_quantity(len(description)):
            continue
        position = ingredient.quantity_position
        if position.begin < block_span.begin:
            # This one and all the following lie before the block
            break
        if position.end > block_span.end:
            # Lies after the block, a following one may still be inside
            continue
        begin = position.begin - block_span.begin
        end = position.end - block_span.begin
        text = text[:begin] + INGREDIENT_PLACEHOLDER + text[end:]
    return text


def segment_step(step: RecipeStep) -> StepSegmentation:
    """Split a step into text and timer blocks.

    Each timer closes the text block running from the previous boundary up to
    the end of the timer, and is followed by its own timer block. Text after
    the last timer becomes a trailing text block.

    Args:
        step: The step to segment. Timers must be ascending and non-overlapping.

    Returns:
        The ordered blocks of the step.

    Example:
        >>> step = RecipeStep("Boil for 5 minutes, then drain.",
        ...                   timers=[Timer(TextSpan(9, 18))])
        >>> [block.text for block in segment_step(step).text_blocks]
        ['Boil for 5 minutes', ', then drain.']
    """
    description = step.description
    ingredients = sorted_by_position(step.ingredients, descending=True)
    blocks = []
    cursor = 0

    for timer in step.timers:
        end = min(max(timer.position.end, cursor), len(description))
        # Timers sharing an end, such as the ones lost in translation, get no
        # empty text block between them
        if end > cursor:
            span = TextSpan(cursor, end)
            blocks.append(
                StepBlock(
                    kind=TEXT_BLOCK,
                    span=span,
                    text=description[cursor:end],
                    template=replace_quantities(description, ingredients, span),
                )
            )
        blocks.append(StepBlock(kind=TIMER_BLOCK, timer=timer))
        cursor = end

    if cursor < len(description):
        span = TextSpan(cursor, len(description))
        blocks.append(
            StepBlock(
                kind=TEXT_BLOCK,
                span=span,
                text=description[cursor:],
                template=replace_quantities(description, ingredients, span),
            )
        )

    return StepSegmentation(description=description, blocks=blocks)
