"""Exceptions raised by recipe-utils."""


class RecipeUtilsError(Exception):
    """Base class for all recipe-utils errors."""


class ExtractionError(RecipeUtilsError):
    """The extractor could not produce a recipe from the raw document."""


class TranslationError(RecipeUtilsError):
    """A translation result could not be applied to a recipe."""


class TranslationCacheError(RecipeUtilsError):
    """A translation was stored in a cache that already holds one."""
