"""Observable view model of a recipe."""

from .cache import Language, TranslationCache
from .dispatch import SerialDispatcher
from .observable import ObservableValue
from .orchestrator import ProcessingState, RecipeOrchestrator, ServingsState
from .step_view import StepPresenter

__all__ = [
    "Language",
    "TranslationCache",
    "SerialDispatcher",
    "ObservableValue",
    "ProcessingState",
    "RecipeOrchestrator",
    "ServingsState",
    "StepPresenter",
]
