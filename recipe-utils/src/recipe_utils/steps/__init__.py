"""Step segmentation and servings rescaling."""

from .rescaling import RenderedBlock, render_step, rescale_block, strip_leading_separators
from .segmentation import (
    INGREDIENT_PLACEHOLDER,
    StepBlock,
    StepSegmentation,
    replace_quantities,
    segment_step,
)

__all__ = [
    "INGREDIENT_PLACEHOLDER",
    "StepBlock",
    "StepSegmentation",
    "replace_quantities",
    "segment_step",
    "RenderedBlock",
    "render_step",
    "rescale_block",
    "strip_leading_separators",
]
