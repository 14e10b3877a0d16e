"""Keeps the rendered text of one recipe step in sync with the orchestrator."""

import logging
from typing import Callable, List, Optional

from recipe_utils.ingredients.listing import IngredientRow, ingredient_rows
from recipe_utils.recipes.models import Recipe, RecipeStep
from recipe_utils.steps.rescaling import RenderedBlock, render_step
from recipe_utils.steps.segmentation import StepSegmentation, segment_step
from recipe_utils.viewmodel.orchestrator import RecipeOrchestrator

logger = logging.getLogger(__name__)

RenderCallback = Callable[[int, List[RenderedBlock], List[IngredientRow]], None]


class StepPresenter:
    """Renders step ``index`` whenever the recipe or the servings change.

    A new recipe (after extraction or a language switch) is segmented once;
    every servings change re-renders from that segmentation.
    """

    def __init__(
        self, orchestrator: RecipeOrchestrator, index: int, on_render: RenderCallback
    ):
        self.index = index
        self.on_render = on_render
        self.step: Optional[RecipeStep] = None
        self.segmentation: Optional[StepSegmentation] = None
        self.original_servings = 0
        self.current_servings = 0
        self.blocks: List[RenderedBlock] = []
        self.rows: List[IngredientRow] = []
        self._unsubscribers = [
            orchestrator.current_servings.subscribe(self._on_servings),
            orchestrator.recipe.subscribe(self._on_recipe),
        ]

    def _on_recipe(self, recipe: Optional[Recipe]) -> None:
        if recipe is None:
            return
        if self.index >= len(recipe.steps):
            logger.warning(f"Recipe has no step {self.index}")
            return
        self.step = recipe.steps[self.index]
        self.segmentation = segment_step(self.step)
        self.original_servings = max(recipe.number_of_people, 1)
        self.update()

    def _on_servings(self, servings: int) -> None:
        if not servings:
            return
        self.current_servings = servings
        self.update()

    def update(self) -> None:
        """Render the step for the current servings."""
        if self.segmentation is None or not self.current_servings:
            return
        self.blocks = render_step(
            self.segmentation,
            self.step,
            self.original_servings,
            self.current_servings,
        )
        self.rows = ingredient_rows(
            self.step.ingredients,
            self.original_servings,
            self.current_servings,
            len(self.step.description),
        )
        self.on_render(self.index, self.blocks, self.rows)

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
