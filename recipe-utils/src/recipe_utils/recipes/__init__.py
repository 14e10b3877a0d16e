"""Recipe data model, extraction and translation utilities."""

from .extraction import RecipeExtractor, StructuredRecipeExtractor
from .models import ExtractedText, Ingredient, Recipe, RecipeStep, TextSpan, Timer
from .translation import build_translated_recipe, collect_sentences, relocate_span

__all__ = [
    "ExtractedText",
    "Ingredient",
    "Recipe",
    "RecipeStep",
    "TextSpan",
    "Timer",
    "RecipeExtractor",
    "StructuredRecipeExtractor",
    "build_translated_recipe",
    "collect_sentences",
    "relocate_span",
]
