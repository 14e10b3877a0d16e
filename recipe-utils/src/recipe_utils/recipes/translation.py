"""Collect the translatable sentences of a recipe and apply their translation."""

import copy
import logging
import re
from typing import List, Optional

from recipe_utils.exceptions import TranslationError
from recipe_utils.recipes.models import Recipe, RecipeStep, TextSpan, Timer

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"\d+(?:[.,/]\d+)?")


def collect_sentences(recipe: Recipe) -> List[str]:
    """List the strings of a recipe that need translating, in a fixed order.

    The order is: the recipe description (if any), the recipe ingredient
    names, then per step its description followed by its ingredient names.
    ``build_translated_recipe`` expects the translations in the same order.
    """
    sentences = []
    if recipe.description:
        sentences.append(recipe.description)
    sentences.extend(ingredient.name for ingredient in recipe.ingredients)
    for step in recipe.steps:
        sentences.append(step.description)
        sentences.extend(ingredient.name for ingredient in step.ingredients)
    return sentences


def relocate_span(
    original_text: str, span: TextSpan, translated_text: str, start: int
) -> Optional[TextSpan]:
    """Find where a span of the original text ended up in its translation.

    The search starts at ``start`` so that relocated spans stay ascending and
    never overlap. The span text itself is tried first, then its leading
    number.

    Returns:
        The relocated span, or None if it can't be found.
    """
    needle = original_text[span.begin : span.end]
    if needle:
        index = translated_text.find(needle, start)
        if index != -1:
            return TextSpan(index, index + len(needle))

    number = _NUMBER.search(needle)
    if number:
        index = translated_text.find(number.group(), start)
        if index != -1:
            return TextSpan(index, index + len(number.group()))
    return None


def _translate_step(step: RecipeStep, translated: List[str]) -> RecipeStep:
    """Build a translated step, consuming its sentences from ``translated``."""
    old_description = step.description
    description = translated.pop(0)
    new_step = copy.deepcopy(step)
    new_step.description = description

    positioned = [
        ingredient
        for ingredient in new_step.ingredients
        if ingredient.has_inline_quantity(len(old_description))
    ]
    positioned_ids = {id(ingredient) for ingredient in positioned}
    # Relocate everything left to right so the spans keep their order
    anchors = [(ingredient.quantity_position, ingredient) for ingredient in positioned]
    anchors += [(timer.position, timer) for timer in new_step.timers]
    anchors.sort(key=lambda anchor: anchor[0].begin)

    cursor = 0
    for span, owner in anchors:
        relocated = relocate_span(old_description, span, description, cursor)
        if relocated is not None:
            cursor = relocated.end
        elif isinstance(owner, Timer):
            logger.warning(
                f"Could not relocate timer '{old_description[span.begin:span.end]}'"
            )
            relocated = TextSpan(len(description), len(description))
        else:
            relocated = TextSpan(0, len(description))
        if isinstance(owner, Timer):
            owner.position = relocated
        else:
            owner.quantity_position = relocated

    # Lost timers sit at the end of the description, after every found one
    new_step.timers.sort(key=lambda timer: timer.position.begin)

    for ingredient in new_step.ingredients:
        if id(ingredient) not in positioned_ids:
            ingredient.quantity_position = TextSpan(0, len(description))
        ingredient.name = translated.pop(0)

    return new_step


def build_translated_recipe(recipe: Recipe, translated: List[str]) -> Recipe:
    """Substitute translated sentences into a copy of a recipe.

    Args:
        recipe: The recipe the sentences were collected from.
        translated: Translations, positionally matching ``collect_sentences``.

    Returns:
        A new Recipe; ``recipe`` is left untouched.

    Raises:
        TranslationError: If the number of translations doesn't match.
    """
    expected = len(collect_sentences(recipe))
    if len(translated) != expected:
        raise TranslationError(
            f"Expected {expected} translated sentences, got {len(translated)}"
        )

    remaining = list(translated)
    new_recipe = copy.deepcopy(recipe)
    if new_recipe.description:
        new_recipe.description = remaining.pop(0)
    for ingredient in new_recipe.ingredients:
        ingredient.name = remaining.pop(0)
    new_recipe.steps = [_translate_step(step, remaining) for step in recipe.steps]
    return new_recipe
