"""The two language variants of a recipe."""

import enum
import logging
from typing import Optional

from recipe_utils.constants import SOURCE_LANGUAGE, TARGET_LANGUAGE
from recipe_utils.exceptions import TranslationCacheError
from recipe_utils.recipes.models import Recipe

logger = logging.getLogger(__name__)


class Language(enum.Enum):
    SOURCE = SOURCE_LANGUAGE
    TARGET = TARGET_LANGUAGE


class TranslationCache:
    """Keeps the extracted recipe and, once translated, its translation.

    Attributes:
        english_recipe: The canonical recipe as extracted. Never replaced.
        dutch_recipe: The translation, set at most once.
        active_language: The language currently presented.
    """

    def __init__(self, english_recipe: Recipe):
        self.english_recipe = english_recipe
        self.dutch_recipe: Optional[Recipe] = None
        self.active_language = Language.SOURCE

    @property
    def is_target_active(self) -> bool:
        return self.active_language is Language.TARGET

    @property
    def active_recipe(self) -> Recipe:
        if self.is_target_active and self.dutch_recipe is not None:
            return self.dutch_recipe
        return self.english_recipe

    def needs_translation(self, to_target: bool) -> bool:
        """Check if switching to the requested language needs a translation call."""
        if to_target == self.is_target_active:
            return False
        return to_target and self.dutch_recipe is None

    def store_translation(self, recipe: Recipe) -> None:
        if self.dutch_recipe is not None:
            raise TranslationCacheError("A translation is already cached")
        self.dutch_recipe = recipe

    def switch(self, to_target: bool) -> Optional[Recipe]:
        """Select a language.

        Returns:
            The recipe to present, or None if the translation isn't available
            yet (the language is selected regardless).
        """
        self.active_language = Language.TARGET if to_target else Language.SOURCE
        if to_target:
            return self.dutch_recipe
        return self.english_recipe

    def revert(self) -> None:
        """Go back to the source language after a failed translation."""
        logger.info("Reverting to the source language")
        self.active_language = Language.SOURCE
