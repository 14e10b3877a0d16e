"""Holds the data of a recipe and keeps it up to date for the presentation layer.

The orchestrator runs the extraction of a recipe in the background while
reporting progress, keeps the extracted recipe and its translation, and tracks
the number of servings the user is cooking for. Everything it exposes is an
ObservableValue.

Background work runs on a thread pool. Its results are posted to a serial
dispatcher, the single presentation thread, and every state change happens
while holding the orchestrator lock, whether it comes from the dispatcher or
from a synchronous call such as ``increment_servings``. The observable values
are published only after that lock is released, so subscribers may read the
orchestrator from their callbacks.
"""

import contextlib
import dataclasses
import enum
import functools
import logging
import threading
import time
from concurrent import futures
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Iterator, List, Optional, Union

from recipe_utils.constants import (
    DEFAULT_SERVINGS_AMOUNT,
    DETECTION_STEPS,
    MAX_PEOPLE,
    MAX_PERCENTAGE,
    MAX_WAIT_TIME,
    MILLIS_BETWEEN_UPDATES,
    SOURCE_LANGUAGE,
    TARGET_LANGUAGE,
    TRANSLATE_PREFERENCE_KEY,
)
from recipe_utils.exceptions import TranslationError
from recipe_utils.preferences import InMemoryPreferences, Preferences
from recipe_utils.recipes.extraction import RecipeExtractor
from recipe_utils.recipes.models import ExtractedText, Recipe
from recipe_utils.recipes.translation import build_translated_recipe, collect_sentences
from recipe_utils.translation.base import Translator
from recipe_utils.viewmodel.cache import TranslationCache
from recipe_utils.viewmodel.dispatch import SerialDispatcher
from recipe_utils.viewmodel.observable import ObservableValue

logger = logging.getLogger(__name__)

TRANSLATION_FAILED_MESSAGE = "The recipe could not be translated"


class ProcessingState(enum.Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclasses.dataclass
class ServingsState:
    """Servings the recipe was written for and servings currently chosen."""

    original: int
    current: int

    @classmethod
    def for_recipe(cls, number_of_people: int) -> "ServingsState":
        original = max(number_of_people, 1)
        return cls(original=original, current=min(original, MAX_PEOPLE))

    def increment(self) -> bool:
        """Add one serving, up to MAX_PEOPLE. Returns whether anything changed."""
        if self.current >= MAX_PEOPLE:
            return False
        self.current += 1
        return True

    def decrement(self) -> bool:
        """Remove one serving, down to 1. Returns whether anything changed."""
        if self.current <= 1:
            return False
        self.current -= 1
        return True


@dataclasses.dataclass
class OrchestratorState:
    processing_state: ProcessingState = ProcessingState.NOT_STARTED
    progress_step: int = 0
    is_being_processed: bool = False
    translation_in_flight: bool = False
    servings: Optional[ServingsState] = None
    cache: Optional[TranslationCache] = None


class RecipeOrchestrator:
    """Drives extraction, progress reporting, translation and servings.

    Attributes:
        processing_state: Observable ProcessingState.
        progress_percent: Observable extraction progress, 0..100.
        current_servings: Observable number of servings cooked for.
        recipe: Observable recipe in the active language, or None.
        processing_failed: Observable flag, True once extraction failed.
        failure_message: Observable message of the last translation failure.
        default_servings_applied: Observable flag, True when the servings were
            not found and DEFAULT_SERVINGS_AMOUNT was used.
    """

    def __init__(
        self,
        extractor: RecipeExtractor,
        translator: Translator,
        preferences: Optional[Preferences] = None,
        millis_between_updates: int = MILLIS_BETWEEN_UPDATES,
        max_wait_time: int = MAX_WAIT_TIME,
        max_workers: int = 4,
    ):
        """Initialize the orchestrator.

        Args:
            extractor: Extracts recipes from raw documents.
            translator: Translates batches of sentences.
            preferences: Preference store holding the translation toggle.
                Defaults to an empty in-memory store.
            millis_between_updates: Interval between progress polls.
            max_wait_time: Stop polling for progress after this many ms.
            max_workers: Size of the background thread pool.
        """
        self.extractor = extractor
        self.translator = translator
        self.preferences = preferences or InMemoryPreferences()
        self.millis_between_updates = millis_between_updates
        self.max_wait_time = max_wait_time

        self._state = OrchestratorState()
        self._lock = threading.RLock()
        self._publish_lock = threading.RLock()
        self._outbox: List[Callable[[], Any]] = []
        self._depth = 0
        self._extraction_done = threading.Event()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="recipe-worker"
        )
        self._dispatcher = SerialDispatcher()
        self._pending: List[Future] = []
        self._pending_lock = threading.Lock()

        self.processing_state = ObservableValue(ProcessingState.NOT_STARTED)
        self.progress_step = ObservableValue(0)
        self.progress_percent = ObservableValue(0)
        self.current_servings = ObservableValue(0)
        self.recipe: ObservableValue[Recipe] = ObservableValue(None)
        self.processing_failed = ObservableValue(False)
        self.failure_message: ObservableValue[str] = ObservableValue(None)
        self.default_servings_applied = ObservableValue(False)

        self._unsubscribe_preference = self.preferences.observe(
            TRANSLATE_PREFERENCE_KEY, self._on_preference_changed
        )

    # --- Task bookkeeping ---

    def _track(self, future: Future) -> Future:
        with self._pending_lock:
            self._pending.append(future)
        return future

    def _submit(self, func: Callable[..., Any], *args: Any) -> Future:
        """Run a function on the background pool."""
        return self._track(self._executor.submit(func, *args))

    def _post(self, func: Callable[..., Any], *args: Any) -> Future:
        """Run a function on the presentation thread."""
        return self._track(self._dispatcher.post(func, *args))

    @contextlib.contextmanager
    def _transaction(self) -> Iterator[None]:
        """Hold the orchestrator lock while changing state.

        Values queued with ``_publish`` and tasks queued with ``_submit_later``
        are handled in queueing order once the outermost transaction has
        released the lock, so subscribers are free to read the orchestrator.
        """
        with self._lock:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
                outbox = []
                if self._depth == 0:
                    outbox, self._outbox = self._outbox, []
        if outbox:
            with self._publish_lock:
                for action in outbox:
                    action()

    def _publish(self, observable: ObservableValue, value: Any) -> None:
        self._outbox.append(functools.partial(observable.set, value))

    def _submit_later(self, func: Callable[..., Any], *args: Any) -> None:
        self._outbox.append(functools.partial(self._submit, func, *args))

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for all background tasks and queued presentation updates.

        Returns:
            True if everything finished, False on timeout.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._pending_lock:
                self._pending = [future for future in self._pending if not future.done()]
                pending = list(self._pending)
            if not pending:
                return True
            remaining = None
            if deadline is not None:
                remaining = max(deadline - time.monotonic(), 0)
            _, not_done = futures.wait(pending, timeout=remaining)
            if not_done:
                return False

    def close(self) -> None:
        """Stop observing preferences and wait for outstanding work."""
        self._unsubscribe_preference()
        self._extraction_done.set()
        self._executor.shutdown(wait=True)
        self._dispatcher.shutdown(wait=True)

    def __enter__(self) -> "RecipeOrchestrator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- Read access ---

    @property
    def state(self) -> ProcessingState:
        with self._lock:
            return self._state.processing_state

    @property
    def is_being_processed(self) -> bool:
        with self._lock:
            return self._state.is_being_processed

    @is_being_processed.setter
    def is_being_processed(self, value: bool) -> None:
        with self._lock:
            self._state.is_being_processed = value

    @property
    def is_translated(self) -> bool:
        with self._lock:
            cache = self._state.cache
            return cache is not None and cache.is_target_active

    @property
    def translation_cache(self) -> Optional[TranslationCache]:
        with self._lock:
            return self._state.cache

    @property
    def original_servings(self) -> int:
        with self._lock:
            servings = self._state.servings
            return servings.original if servings else 0

    def get_progress(self) -> int:
        """Get the extraction progress in percent."""
        with self._lock:
            return int(MAX_PERCENTAGE / DETECTION_STEPS * self._state.progress_step)

    # --- Extraction ---

    def _set_processing_state(self, state: ProcessingState) -> None:
        logger.info(f"Processing state: {self._state.processing_state.value} -> {state.value}")
        self._state.processing_state = state
        self._publish(self.processing_state, state)

    def initialize(self, source: Union[str, ExtractedText]) -> bool:
        """Start extracting a recipe from a document.

        Does nothing if a recipe was already extracted or an extraction is
        running. Extraction and progress polling run in the background.

        Args:
            source: The document, as JSON text or as ExtractedText.

        Returns:
            True if an extraction was started.
        """
        with self._transaction():
            if self._state.processing_state in (
                ProcessingState.SUCCEEDED,
                ProcessingState.RUNNING,
            ):
                logger.debug("Recipe already initialised or being extracted")
                return False

            self._extraction_done.clear()
            self._state.progress_step = 0
            self._publish(self.progress_step, 0)
            self._publish(self.progress_percent, 0)
            self._set_processing_state(ProcessingState.RUNNING)

            self._submit_later(self._poll_progress)
            self._submit_later(self._run_extraction, source)
            return True

    def _poll_progress(self) -> None:
        """Republish the extractor's progress until it is done or times out."""
        interval = self.millis_between_updates / 1000
        up_time = 0
        while True:
            finished = self._extraction_done.wait(interval)
            up_time += self.millis_between_updates
            step = self.extractor.progress()
            self._post(self._publish_progress, step)

            if finished or step >= DETECTION_STEPS or up_time > self.max_wait_time:
                break
            with self._lock:
                if self._state.processing_state is not ProcessingState.RUNNING:
                    break

    def _publish_progress(self, step: int) -> None:
        step = max(0, min(step, DETECTION_STEPS))
        with self._transaction():
            # Progress never goes back
            if step <= self._state.progress_step:
                return
            self._state.progress_step = step
            self._publish(self.progress_step, step)
            self._publish(self.progress_percent, self.get_progress())

    def _run_extraction(self, source: Union[str, ExtractedText]) -> None:
        recipe = None
        try:
            if isinstance(source, str):
                source = ExtractedText.from_json(source)
            recipe = self.extractor.extract(source)
        except Exception as e:
            logger.error(f"Recipe extraction failed: {e}")
        finally:
            self._extraction_done.set()
        self._post(self._on_extraction_finished, recipe)

    def _on_extraction_finished(self, recipe: Optional[Recipe]) -> None:
        with self._transaction():
            if self._state.processing_state is ProcessingState.SUCCEEDED:
                logger.debug("Ignoring late extraction result")
                return
            if recipe is None:
                logger.error("No recipe could be extracted")
                self._set_processing_state(ProcessingState.FAILED)
                self._publish(self.processing_failed, True)
                return
            self.commit_recipe(recipe)

    def commit_recipe(self, recipe: Recipe) -> None:
        """Make ``recipe`` the canonical recipe.

        Missing servings are replaced by DEFAULT_SERVINGS_AMOUNT, which is
        flagged through ``default_servings_applied``. If the translation
        preference is set, the translation is started right away. Does nothing
        once a recipe was committed.
        """
        with self._transaction():
            if self._state.processing_state is ProcessingState.SUCCEEDED:
                logger.debug("A recipe was already committed")
                return

            default_applied = False
            if not recipe.has_servings():
                logger.info(
                    f"Servings not found, using default of {DEFAULT_SERVINGS_AMOUNT}"
                )
                recipe.number_of_people = DEFAULT_SERVINGS_AMOUNT
                default_applied = True

            self._state.servings = ServingsState.for_recipe(recipe.number_of_people)
            self._state.cache = TranslationCache(recipe)
            self._extraction_done.set()

            self._publish(self.current_servings, self._state.servings.current)
            self._publish(self.recipe, recipe)
            if default_applied:
                self._publish(self.default_servings_applied, True)
            self._publish(self.processing_failed, False)
            self._set_processing_state(ProcessingState.SUCCEEDED)

            if self.preferences.get(TRANSLATE_PREFERENCE_KEY, False):
                self.translate(True)

    initialize_with_recipe = commit_recipe

    # --- Translation ---

    def _on_preference_changed(self, key: str, value: Any) -> None:
        self.translate(bool(value))

    def translate(self, to_target: bool) -> None:
        """Switch the presented recipe between the source and target language.

        The translation is requested at most once; afterwards both variants
        are served from the cache. On failure the source language is restored
        and ``failure_message`` is set.
        """
        with self._transaction():
            cache = self._state.cache
            if cache is None or cache.is_target_active == to_target:
                return

            if not cache.needs_translation(to_target):
                self._publish(self.recipe, cache.switch(to_target))
                return

            cache.switch(True)
            if self._state.translation_in_flight:
                return
            self._state.translation_in_flight = True
            sentences = collect_sentences(cache.english_recipe)
            logger.info(f"Translating {len(sentences)} sentences to {TARGET_LANGUAGE}")
            self._submit_later(self._run_translation, cache, sentences)

    def _run_translation(self, cache: TranslationCache, sentences: List[str]) -> None:
        try:
            translated = self.translator.translate_batch(
                sentences, SOURCE_LANGUAGE, TARGET_LANGUAGE
            )
        except Exception as e:
            logger.error(f"Translation backend failed: {e}")
            translated = []
        self._post(self._on_translation_finished, cache, translated)

    def _on_translation_finished(
        self, cache: TranslationCache, translated: List[str]
    ) -> None:
        with self._transaction():
            self._state.translation_in_flight = False
            try:
                if not translated:
                    raise TranslationError("The translation service returned nothing")
                translated_recipe = build_translated_recipe(
                    cache.english_recipe, translated
                )
            except TranslationError as e:
                logger.error(f"Translation failed: {e}")
                cache.revert()
                self._publish(self.failure_message, TRANSLATION_FAILED_MESSAGE)
                return

            cache.store_translation(translated_recipe)
            if cache.is_target_active:
                self._publish(self.recipe, translated_recipe)

    # --- Servings ---

    def increment_servings(self) -> None:
        """Cook for one more person, up to MAX_PEOPLE."""
        with self._transaction():
            servings = self._state.servings
            if servings is not None and servings.increment():
                self._publish(self.current_servings, servings.current)

    def decrement_servings(self) -> None:
        """Cook for one person less, down to 1."""
        with self._transaction():
            servings = self._state.servings
            if servings is not None and servings.decrement():
                self._publish(self.current_servings, servings.current)
