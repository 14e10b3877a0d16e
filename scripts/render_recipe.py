#!/usr/bin/env python3
"""
Extracts a structured recipe document and prints its steps for a number of servings.
"""

import argparse
import json
import logging
import pathlib
import sys
from typing import List

from tqdm.auto import tqdm

from recipe_utils.constants import MAX_PEOPLE, TRANSLATE_PREFERENCE_KEY
from recipe_utils.ingredients import IngredientRow, ingredient_rows
from recipe_utils.preferences import InMemoryPreferences, JsonFilePreferences
from recipe_utils.recipes import ExtractedText, StructuredRecipeExtractor
from recipe_utils.steps import RenderedBlock
from recipe_utils.steps.segmentation import TIMER_BLOCK
from recipe_utils.translation import BedrockTranslator, HttpTranslator
from recipe_utils.viewmodel import RecipeOrchestrator, StepPresenter

# Config
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def load_document(path: pathlib.Path) -> ExtractedText:
    """Load an extracted-text document, or wrap a bare structured recipe in one."""
    text = path.read_text(encoding="utf-8")
    data = json.loads(text)
    if isinstance(data, dict) and "sections" in data:
        return ExtractedText.from_json(text)
    return ExtractedText(title=path.stem, sections=[text])


def format_timer(block: RenderedBlock) -> str:
    timer = block.timer
    if timer.lower_bound == timer.upper_bound:
        return f"[timer {timer.lower_bound}s]"
    return f"[timer {timer.lower_bound}-{timer.upper_bound}s]"


def format_rows(rows: List[IngredientRow]) -> List[str]:
    lines = []
    for row in rows:
        parts = [part for part in (row.amount, row.unit, row.name) if part]
        lines.append("  - " + " ".join(parts))
    return lines


def build_translator(args):
    if args.backend == "http":
        if not args.endpoint:
            raise SystemExit("--endpoint is required for the http backend")
        return HttpTranslator(args.endpoint, api_key=args.api_key)
    return BedrockTranslator(model_id=args.model_id, region_name=args.region)


def main():
    """Main function to render a recipe for the requested servings."""
    parser = argparse.ArgumentParser(
        description="Render a structured recipe for a number of servings"
    )
    parser.add_argument("document", type=pathlib.Path, help="Recipe JSON document")
    parser.add_argument(
        "--servings",
        type=int,
        default=None,
        help=f"Number of people to cook for (1-{MAX_PEOPLE}, default: as written)",
    )
    parser.add_argument(
        "--translate", action="store_true", help="Translate the recipe to Dutch"
    )
    parser.add_argument(
        "--backend",
        choices=["bedrock", "http"],
        default="bedrock",
        help="Translation backend (default: bedrock)",
    )
    parser.add_argument(
        "--model-id",
        type=str,
        default="anthropic.claude-3-5-haiku-20241022-v1:0",
        help="Bedrock model ID used for translation",
    )
    parser.add_argument("--region", type=str, default="us-east-1", help="AWS region")
    parser.add_argument("--endpoint", type=str, help="URL of the HTTP translation service")
    parser.add_argument("--api-key", type=str, help="API key of the HTTP translation service")
    parser.add_argument(
        "--preferences",
        type=pathlib.Path,
        default=None,
        help="JSON file holding user preferences (default: in memory only)",
    )
    args = parser.parse_args()

    if not args.document.exists():
        logger.error(f"Document not found: {args.document}")
        sys.exit(1)

    preferences = (
        JsonFilePreferences(args.preferences) if args.preferences else InMemoryPreferences()
    )
    if args.translate:
        preferences.set(TRANSLATE_PREFERENCE_KEY, True)

    orchestrator = RecipeOrchestrator(
        StructuredRecipeExtractor(), build_translator(args), preferences
    )
    rendered = {}

    with orchestrator, tqdm(total=100, desc="Detecting recipe") as pbar:
        orchestrator.progress_percent.subscribe(
            lambda percent: pbar.update(max(percent - pbar.n, 0))
        )
        orchestrator.initialize(load_document(args.document))
        orchestrator.join()

        if orchestrator.processing_failed.value:
            logger.error("No recipe could be extracted from the document")
            sys.exit(1)
        if orchestrator.failure_message.value:
            logger.warning(orchestrator.failure_message.value)
        if orchestrator.default_servings_applied.value:
            logger.info("Servings not found in the recipe, using the default")

        recipe = orchestrator.recipe.value
        presenters = [
            StepPresenter(
                orchestrator,
                index,
                lambda i, blocks, rows: rendered.__setitem__(i, (blocks, rows)),
            )
            for index in range(len(recipe.steps))
        ]

        if args.servings is not None:
            target = max(1, min(args.servings, MAX_PEOPLE))
            while orchestrator.current_servings.value < target:
                orchestrator.increment_servings()
            while orchestrator.current_servings.value > target:
                orchestrator.decrement_servings()

        for presenter in presenters:
            presenter.close()

    current = orchestrator.current_servings.value
    original = orchestrator.original_servings
    print(f"\nServings: {current} (recipe written for {original})")
    print("Ingredients:")
    for line in format_rows(ingredient_rows(recipe.ingredients, original, current)):
        print(line)

    for index in sorted(rendered):
        blocks, rows = rendered[index]
        print(f"\nStep {index + 1}")
        for block in blocks:
            print(format_timer(block) if block.kind == TIMER_BLOCK else block.text)
        for line in format_rows(rows):
            print(line)


if __name__ == "__main__":
    main()
