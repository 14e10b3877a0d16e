"""Extractors turning a raw document into a structured Recipe."""

import json
import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional

from recipe_utils.constants import DETECTION_STEPS
from recipe_utils.exceptions import ExtractionError
from recipe_utils.recipes.models import ExtractedText, Recipe

logger = logging.getLogger(__name__)


class RecipeExtractor(ABC):
    """Abstract base class for recipe extractors.

    ``extract`` may run for a long time on a background thread; ``progress``
    is read concurrently from another thread while it runs.
    """

    @abstractmethod
    def extract(self, extracted_text: ExtractedText) -> Optional[Recipe]:
        """Extract a recipe from a document.

        Returns:
            The recipe, or None if no recipe could be detected.

        Raises:
            ExtractionError: If the document can't be processed.
        """
        pass

    @abstractmethod
    def progress(self) -> int:
        """Return the number of detection steps completed, 0..DETECTION_STEPS."""
        pass


class StructuredRecipeExtractor(RecipeExtractor):
    """Reads recipes that were already annotated into the structured format.

    The first section of the document must hold the JSON form of a recipe (see
    ``Recipe.from_dict``). The four detection steps are: document parsed,
    ingredients read, steps read, timers checked.
    """

    def __init__(self):
        self._progress = 0
        self._lock = threading.Lock()

    def _advance(self) -> None:
        with self._lock:
            self._progress = min(self._progress + 1, DETECTION_STEPS)

    def progress(self) -> int:
        with self._lock:
            return self._progress

    def extract(self, extracted_text: ExtractedText) -> Optional[Recipe]:
        with self._lock:
            self._progress = 0

        if not extracted_text.sections:
            logger.warning(f"No sections in document '{extracted_text.title}'")
            return None

        try:
            data = json.loads(extracted_text.sections[0])
        except ValueError as e:
            raise ExtractionError(f"Section is not a structured recipe: {e}") from e
        if not isinstance(data, dict) or "steps" not in data:
            return None
        self._advance()

        try:
            recipe = Recipe.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ExtractionError(f"Malformed recipe document: {e}") from e
        self._advance()

        if not recipe.steps:
            return None
        self._advance()

        for index, step in enumerate(recipe.steps):
            self._check_timers(index, step.description, step.timers)
        self._advance()

        return recipe

    @staticmethod
    def _check_timers(index, description, timers) -> None:
        """Check that the timers of a step are ascending, disjoint and in range."""
        previous_end = 0
        for timer in timers:
            if timer.position.begin < previous_end or timer.position.end > len(
                description
            ):
                raise ExtractionError(
                    f"Step {index} has overlapping or out of range timers"
                )
            previous_end = timer.position.end
