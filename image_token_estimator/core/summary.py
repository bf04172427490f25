"""
Multi-image estimates and totals.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from .estimator import TokenBreakdown, TokenCalculationResult, calculate_tokens, split_tokens
from .models import DetailLevel, ImageDimensions, ModelIdentifier


@dataclass(frozen=True)
class ImageEstimate:
    """Estimate for a single image."""
    dimensions: ImageDimensions
    model: ModelIdentifier
    detail: DetailLevel
    result: TokenCalculationResult
    breakdown: TokenBreakdown


@dataclass(frozen=True)
class EstimateSummary:
    """Token totals across a set of images.

    model is None when there are no estimates.
    """
    image_count: int
    model: Optional[ModelIdentifier]
    base_tokens: float
    tile_tokens: float
    total_tokens: float


def estimate_image(
    dimensions: ImageDimensions,
    model: Union[ModelIdentifier, str],
    detail: Union[DetailLevel, str] = DetailLevel.HIGH,
) -> ImageEstimate:
    """Estimate tokens for one image and split them into base and tile shares."""
    model = ModelIdentifier(model)
    detail = DetailLevel(detail)
    result = calculate_tokens(dimensions, model, detail)
    return ImageEstimate(
        dimensions=dimensions,
        model=model,
        detail=detail,
        result=result,
        breakdown=split_tokens(result, model, detail),
    )


def estimate_images(
    dimensions_list: Iterable[ImageDimensions],
    model: Union[ModelIdentifier, str],
    detail: Union[DetailLevel, str] = DetailLevel.HIGH,
) -> List[ImageEstimate]:
    """Estimate tokens for each image with the same model and detail level."""
    return [estimate_image(dimensions, model, detail) for dimensions in dimensions_list]


def summarize(estimates: List[ImageEstimate]) -> EstimateSummary:
    """Sum base, tile and total tokens over a list of estimates.

    Raises:
        ValueError: If the estimates were made for different models
    """
    models = {e.model for e in estimates}
    if len(models) > 1:
        raise ValueError(f"Cannot summarize estimates for different models: {sorted(m.value for m in models)}")

    return EstimateSummary(
        image_count=len(estimates),
        model=models.pop() if models else None,
        base_tokens=sum(e.breakdown.base for e in estimates),
        tile_tokens=sum(e.breakdown.tile for e in estimates),
        total_tokens=sum(e.breakdown.total for e in estimates),
    )
