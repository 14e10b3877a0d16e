import copy
import threading
import time

import pytest

from conftest import FakeExtractor, FakeTranslator
from recipe_utils.constants import (
    DEFAULT_SERVINGS_AMOUNT,
    MAX_PEOPLE,
    TRANSLATE_PREFERENCE_KEY,
)
from recipe_utils.exceptions import ExtractionError
from recipe_utils.recipes.models import ExtractedText
from recipe_utils.steps.segmentation import TEXT_BLOCK
from recipe_utils.viewmodel import StepPresenter
from recipe_utils.viewmodel.orchestrator import (
    TRANSLATION_FAILED_MESSAGE,
    ProcessingState,
)


@pytest.fixture
def document(pasta_document):
    return ExtractedText(title="pasta", sections=[pasta_document])


def recorder(observable):
    values = []
    observable.subscribe(values.append)
    return values


def test_initialize_extracts_recipe(make_orchestrator, pasta_recipe, document):
    orchestrator = make_orchestrator(FakeExtractor(pasta_recipe))
    states = recorder(orchestrator.processing_state)

    assert orchestrator.initialize(document)
    assert orchestrator.join(timeout=5)

    assert orchestrator.state is ProcessingState.SUCCEEDED
    assert states == [
        ProcessingState.NOT_STARTED,
        ProcessingState.RUNNING,
        ProcessingState.SUCCEEDED,
    ]
    assert orchestrator.progress_percent.value == 100
    assert orchestrator.get_progress() == 100
    assert orchestrator.current_servings.value == 2
    assert orchestrator.recipe.value.steps[0].description.startswith("Boil water")
    assert orchestrator.processing_failed.value is False
    assert orchestrator.default_servings_applied.value is False


def test_initialize_accepts_json_text(make_orchestrator, pasta_recipe, document):
    extractor = FakeExtractor(pasta_recipe)
    orchestrator = make_orchestrator(extractor)
    assert orchestrator.initialize(document.to_json())
    assert orchestrator.join(timeout=5)
    assert orchestrator.state is ProcessingState.SUCCEEDED


def test_initialize_with_invalid_json_fails(make_orchestrator, pasta_recipe):
    extractor = FakeExtractor(pasta_recipe)
    orchestrator = make_orchestrator(extractor)
    orchestrator.initialize("not json")
    assert orchestrator.join(timeout=5)
    assert orchestrator.state is ProcessingState.FAILED
    assert extractor.calls == 0


def test_progress_never_decreases(make_orchestrator, pasta_recipe, document):
    orchestrator = make_orchestrator(FakeExtractor(pasta_recipe))
    percentages = recorder(orchestrator.progress_percent)
    orchestrator.initialize(document)
    orchestrator.join(timeout=5)
    assert percentages == sorted(percentages)
    assert all(0 <= percent <= 100 for percent in percentages)


@pytest.mark.parametrize(
    "extractor",
    [FakeExtractor(None), FakeExtractor(error=ExtractionError("unreadable"))],
)
def test_extraction_failure(make_orchestrator, extractor, document):
    orchestrator = make_orchestrator(extractor)
    orchestrator.initialize(document)
    assert orchestrator.join(timeout=5)

    assert orchestrator.state is ProcessingState.FAILED
    assert orchestrator.processing_failed.value is True
    assert orchestrator.recipe.value is None


def test_initialize_again_after_failure(make_orchestrator, pasta_recipe, document):
    extractor = FakeExtractor(None)
    orchestrator = make_orchestrator(extractor)
    orchestrator.initialize(document)
    orchestrator.join(timeout=5)
    assert orchestrator.state is ProcessingState.FAILED

    extractor.recipe = pasta_recipe
    assert orchestrator.initialize(document)
    assert orchestrator.join(timeout=5)
    assert orchestrator.state is ProcessingState.SUCCEEDED
    assert orchestrator.processing_failed.value is False
    assert extractor.calls == 2


def test_initialize_after_success_is_ignored(make_orchestrator, pasta_recipe, document):
    extractor = FakeExtractor(pasta_recipe)
    orchestrator = make_orchestrator(extractor)
    orchestrator.initialize(document)
    orchestrator.join(timeout=5)

    assert not orchestrator.initialize(document)
    orchestrator.join(timeout=5)
    assert extractor.calls == 1


def test_initialize_while_running_is_ignored(make_orchestrator, pasta_recipe, document):
    extractor = FakeExtractor(pasta_recipe, block=True)
    orchestrator = make_orchestrator(extractor)
    assert orchestrator.initialize(document)
    assert not orchestrator.initialize(document)

    extractor.release.set()
    assert orchestrator.join(timeout=5)
    assert extractor.calls == 1


def test_poller_stops_when_extraction_finishes(make_orchestrator, pasta_recipe, document):
    orchestrator = make_orchestrator(
        FakeExtractor(pasta_recipe), millis_between_updates=5000
    )
    orchestrator.initialize(document)
    assert orchestrator.join(timeout=2)
    assert orchestrator.progress_percent.value == 100


def test_late_extraction_result_is_ignored(make_orchestrator, pasta_recipe, document):
    extractor = FakeExtractor(pasta_recipe, block=True)
    orchestrator = make_orchestrator(extractor)
    orchestrator.initialize(document)

    supplied = copy.deepcopy(pasta_recipe)
    supplied.number_of_people = 6
    orchestrator.initialize_with_recipe(supplied)

    extractor.release.set()
    assert orchestrator.join(timeout=5)
    assert orchestrator.recipe.value is supplied
    assert orchestrator.current_servings.value == 6


@pytest.mark.parametrize("servings", [-1, 0])
def test_default_servings(make_orchestrator, pasta_recipe, servings):
    pasta_recipe.number_of_people = servings
    orchestrator = make_orchestrator()
    flags = recorder(orchestrator.default_servings_applied)

    orchestrator.initialize_with_recipe(pasta_recipe)
    orchestrator.increment_servings()

    assert orchestrator.current_servings.value == DEFAULT_SERVINGS_AMOUNT + 1
    assert orchestrator.original_servings == DEFAULT_SERVINGS_AMOUNT
    assert flags == [False, True]


def test_servings_are_emitted_before_recipe(make_orchestrator, pasta_recipe):
    orchestrator = make_orchestrator()
    seen = []
    orchestrator.recipe.subscribe(
        lambda recipe: seen.append(orchestrator.current_servings.value)
    )
    orchestrator.initialize_with_recipe(pasta_recipe)
    assert seen == [0, 2]


def test_servings_are_bounded(make_orchestrator, pasta_recipe):
    orchestrator = make_orchestrator()
    pasta_recipe.number_of_people = MAX_PEOPLE
    orchestrator.initialize_with_recipe(pasta_recipe)
    emitted = recorder(orchestrator.current_servings)

    orchestrator.increment_servings()
    assert emitted == [MAX_PEOPLE]

    for _ in range(MAX_PEOPLE + 5):
        orchestrator.decrement_servings()
    assert orchestrator.current_servings.value == 1
    assert emitted[-1] == 1
    assert len(emitted) == MAX_PEOPLE


def test_servings_above_maximum_are_capped(make_orchestrator, pasta_recipe):
    pasta_recipe.number_of_people = MAX_PEOPLE + 20
    orchestrator = make_orchestrator()
    orchestrator.initialize_with_recipe(pasta_recipe)
    assert orchestrator.current_servings.value == MAX_PEOPLE
    assert orchestrator.original_servings == MAX_PEOPLE + 20


def test_servings_changes_before_recipe_are_ignored(make_orchestrator):
    orchestrator = make_orchestrator()
    orchestrator.increment_servings()
    orchestrator.decrement_servings()
    assert orchestrator.current_servings.value == 0


def test_translate_is_cached(make_orchestrator, pasta_recipe, translator):
    orchestrator = make_orchestrator()
    orchestrator.initialize_with_recipe(pasta_recipe)
    english = orchestrator.recipe.value

    orchestrator.translate(True)
    assert orchestrator.join(timeout=5)
    dutch = orchestrator.recipe.value
    assert dutch.steps[0].description == "BOIL WATER FOR 5 MINUTES, ADD 200 G PASTA."
    assert orchestrator.is_translated

    orchestrator.translate(False)
    assert orchestrator.recipe.value is english
    assert not orchestrator.is_translated

    orchestrator.translate(True)
    orchestrator.join(timeout=5)
    assert orchestrator.recipe.value is dutch
    assert len(translator.calls) == 1
    _, source_tag, target_tag = translator.calls[0]
    assert (source_tag, target_tag) == ("en", "nl")


def test_translate_twice_while_in_flight(make_orchestrator, pasta_recipe, translator):
    orchestrator = make_orchestrator()
    orchestrator.initialize_with_recipe(pasta_recipe)
    orchestrator.translate(True)
    orchestrator.translate(True)
    orchestrator.join(timeout=5)
    assert len(translator.calls) == 1


def test_translate_without_recipe_does_nothing(make_orchestrator, translator):
    orchestrator = make_orchestrator()
    orchestrator.translate(True)
    assert orchestrator.join(timeout=5)
    assert translator.calls == []
    assert not orchestrator.is_translated


@pytest.mark.parametrize(
    "failing_translator",
    [
        FakeTranslator(result=[]),
        FakeTranslator(result=["te kort"]),
        FakeTranslator(error=RuntimeError("service down")),
    ],
)
def test_translation_failure_keeps_source(
    make_orchestrator, pasta_recipe, failing_translator
):
    orchestrator = make_orchestrator(translator=failing_translator)
    orchestrator.initialize_with_recipe(pasta_recipe)
    english = orchestrator.recipe.value

    orchestrator.translate(True)
    assert orchestrator.join(timeout=5)

    assert orchestrator.failure_message.value == TRANSLATION_FAILED_MESSAGE
    assert orchestrator.recipe.value is english
    assert not orchestrator.is_translated
    assert orchestrator.translation_cache.dutch_recipe is None


def test_preference_change_translates(
    make_orchestrator, pasta_recipe, preferences, translator
):
    orchestrator = make_orchestrator()
    orchestrator.initialize_with_recipe(pasta_recipe)

    preferences.set(TRANSLATE_PREFERENCE_KEY, True)
    orchestrator.join(timeout=5)
    assert orchestrator.is_translated
    assert orchestrator.recipe.value.description == "A QUICK PASTA FOR WEEKNIGHTS."

    preferences.set(TRANSLATE_PREFERENCE_KEY, False)
    assert orchestrator.recipe.value is orchestrator.translation_cache.english_recipe
    assert len(translator.calls) == 1


def test_preference_set_before_commit_translates(
    make_orchestrator, pasta_recipe, preferences
):
    preferences.set(TRANSLATE_PREFERENCE_KEY, True)
    orchestrator = make_orchestrator()
    orchestrator.initialize_with_recipe(pasta_recipe)
    orchestrator.join(timeout=5)
    assert orchestrator.is_translated
    assert orchestrator.recipe.value.ingredients[0].name == "PASTA"


def test_closed_orchestrator_stops_observing(
    make_orchestrator, pasta_recipe, preferences, translator
):
    orchestrator = make_orchestrator()
    orchestrator.initialize_with_recipe(pasta_recipe)
    orchestrator.close()
    preferences.set(TRANSLATE_PREFERENCE_KEY, True)
    assert translator.calls == []


def test_is_being_processed_flag(make_orchestrator):
    orchestrator = make_orchestrator()
    assert orchestrator.is_being_processed is False
    orchestrator.is_being_processed = True
    assert orchestrator.is_being_processed is True


def test_step_presenter_renders_servings(make_orchestrator, pasta_recipe):
    orchestrator = make_orchestrator()
    orchestrator.initialize_with_recipe(pasta_recipe)
    renders = []
    presenter = StepPresenter(
        orchestrator, 0, lambda index, blocks, rows: renders.append((blocks, rows))
    )
    assert renders[-1][0][-1].text == "add 200 g pasta."

    orchestrator.increment_servings()
    blocks, rows = renders[-1]
    assert blocks[-1].text == "add 300 g pasta."
    assert [(row.name, row.amount, row.unit) for row in rows] == [
        ("Pasta", "300", "g"),
        ("Water", None, "l"),
    ]
    presenter.close()

    orchestrator.increment_servings()
    assert len(renders) == 2


def test_step_presenter_follows_translation(make_orchestrator, pasta_recipe):
    orchestrator = make_orchestrator()
    orchestrator.initialize_with_recipe(pasta_recipe)
    orchestrator.increment_servings()
    renders = []
    presenter = StepPresenter(
        orchestrator, 0, lambda index, blocks, rows: renders.append(blocks)
    )

    orchestrator.translate(True)
    orchestrator.join(timeout=5)
    texts = [block.text for block in renders[-1] if block.kind == TEXT_BLOCK]
    assert texts[-1].endswith("ADD 300 G PASTA.")
    presenter.close()


def test_step_presenter_ignores_missing_step(make_orchestrator, pasta_recipe):
    orchestrator = make_orchestrator()
    orchestrator.initialize_with_recipe(pasta_recipe)
    renders = []
    StepPresenter(orchestrator, 7, lambda *args: renders.append(args)).close()
    assert renders == []


def test_subscriber_reading_state_does_not_block_commit(make_orchestrator, pasta_recipe):
    orchestrator = make_orchestrator()
    subscribed = threading.Event()
    states = []

    def on_recipe(recipe):
        if recipe is None:
            subscribed.set()
            time.sleep(0.2)
        states.append(orchestrator.state)

    subscriber = threading.Thread(
        target=orchestrator.recipe.subscribe, args=(on_recipe,), daemon=True
    )
    subscriber.start()
    assert subscribed.wait(5)
    committer = threading.Thread(
        target=orchestrator.commit_recipe, args=(pasta_recipe,), daemon=True
    )
    committer.start()

    subscriber.join(3)
    committer.join(3)
    assert not subscriber.is_alive() and not committer.is_alive()
    assert orchestrator.state is ProcessingState.SUCCEEDED
    assert ProcessingState.SUCCEEDED in states


def test_subscribers_may_change_servings(make_orchestrator, pasta_recipe):
    orchestrator = make_orchestrator()
    seen = []

    def on_servings(servings):
        seen.append((servings, orchestrator.original_servings))
        if servings == 2:
            orchestrator.increment_servings()

    orchestrator.current_servings.subscribe(on_servings)
    orchestrator.initialize_with_recipe(pasta_recipe)
    assert seen == [(0, 0), (2, 2), (3, 2)]
    assert orchestrator.current_servings.value == 3
