import copy
import json
import pathlib
import threading

import pytest

from recipe_utils.constants import DETECTION_STEPS
from recipe_utils.preferences import InMemoryPreferences
from recipe_utils.recipes.extraction import RecipeExtractor
from recipe_utils.recipes.models import Recipe
from recipe_utils.translation.base import Translator
from recipe_utils.viewmodel.orchestrator import RecipeOrchestrator

DATA_DIR = pathlib.Path(__file__).parent / "data"


class FakeExtractor(RecipeExtractor):
    """Returns a fixed recipe, optionally waiting for ``release`` first."""

    def __init__(self, recipe=None, error=None, block=False):
        self.recipe = recipe
        self.error = error
        self.calls = 0
        self.release = threading.Event()
        if not block:
            self.release.set()
        self._progress = 0

    def extract(self, extracted_text):
        self.calls += 1
        self.release.wait(5)
        self._progress = DETECTION_STEPS
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.recipe)

    def progress(self):
        return self._progress


class FakeTranslator(Translator):
    """Upper-cases every sentence, or returns a fixed result."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def translate_batch(self, sentences, source_tag, target_tag):
        self.calls.append((list(sentences), source_tag, target_tag))
        if self.error is not None:
            raise self.error
        if self.result is not None:
            return self.result
        return [sentence.upper() for sentence in sentences]


@pytest.fixture
def pasta_document():
    return (DATA_DIR / "pasta.json").read_text(encoding="utf-8")


@pytest.fixture
def pasta_recipe(pasta_document):
    return Recipe.from_dict(json.loads(pasta_document))


@pytest.fixture
def preferences():
    return InMemoryPreferences()


@pytest.fixture
def translator():
    return FakeTranslator()


@pytest.fixture
def make_orchestrator(preferences, translator):
    created = []

    def factory(extractor=None, translator=translator, preferences=preferences, **kwargs):
        kwargs.setdefault("millis_between_updates", 10)
        orchestrator = RecipeOrchestrator(
            extractor or FakeExtractor(), translator, preferences, **kwargs
        )
        created.append(orchestrator)
        return orchestrator

    yield factory
    for orchestrator in created:
        orchestrator.close()
