"""
Image token estimation.

Computes how many tokens a vision model charges for an image of a given size.
"""

import math
from dataclasses import dataclass
from typing import Optional, Union

from .models import (
    DetailLevel,
    ImageDimensions,
    ModelIdentifier,
    MultiplierModel,
    TileModel,
    get_model_config,
)

PATCH_SIZE = 32
MAX_PATCHES = 1536
HIGH_DETAIL_MAX_SIZE = 2048
HIGH_DETAIL_MIN_SIZE = 768
HIGH_DETAIL_TILE_SIZE = 512


@dataclass(frozen=True)
class TokenCalculationResult:
    """Estimated tokens and the size the image was measured at.

    scaled_dimensions is None when no rescaling happened.
    """
    tokens: float
    scaled_dimensions: Optional[ImageDimensions] = None


@dataclass(frozen=True)
class TokenBreakdown:
    """Split of total tokens into base and tile shares."""
    base: float
    tile: float
    total: float


def calculate_tokens(
    dimensions: ImageDimensions,
    model: Union[ModelIdentifier, str],
    detail: Union[DetailLevel, str] = DetailLevel.HIGH,
) -> TokenCalculationResult:
    """Estimate image tokens for a model.

    Dimensions must be positive; the caller validates them.

    Args:
        dimensions: Image width and height in pixels
        model: Model identifier
        detail: Detail level, ignored by multiplier models

    Returns:
        TokenCalculationResult with tokens and any rescaled dimensions

    Raises:
        ValueError: If model or detail is not recognised
    """
    config = get_model_config(model)
    detail = DetailLevel(detail)

    if isinstance(config, MultiplierModel):
        return _calculate_patch_tokens(dimensions, config)

    if detail == DetailLevel.LOW:
        return TokenCalculationResult(tokens=config.base_tokens)

    return _calculate_high_detail_tokens(dimensions, config)


def token_breakdown(
    dimensions: ImageDimensions,
    model: Union[ModelIdentifier, str],
    detail: Union[DetailLevel, str] = DetailLevel.HIGH,
) -> TokenBreakdown:
    """Estimate tokens and split them into base and tile shares."""
    return split_tokens(calculate_tokens(dimensions, model, detail), model, detail)


def split_tokens(
    result: TokenCalculationResult,
    model: Union[ModelIdentifier, str],
    detail: Union[DetailLevel, str] = DetailLevel.HIGH,
) -> TokenBreakdown:
    """Split an already computed result into base and tile shares.

    Multiplier models have no base share; low detail has no tile share.
    """
    config = get_model_config(model)
    detail = DetailLevel(detail)
    tokens = result.tokens

    if isinstance(config, MultiplierModel):
        return TokenBreakdown(base=0, tile=tokens, total=tokens)
    if detail == DetailLevel.LOW:
        return TokenBreakdown(base=tokens, tile=0, total=tokens)
    return TokenBreakdown(
        base=config.base_tokens,
        tile=tokens - config.base_tokens,
        total=tokens,
    )


def _count_patches(width: int, height: int) -> int:
    patches_x = math.ceil((width + PATCH_SIZE - 1) / PATCH_SIZE)
    patches_y = math.ceil((height + PATCH_SIZE - 1) / PATCH_SIZE)
    return patches_x * patches_y


def _calculate_patch_tokens(
    dimensions: ImageDimensions, config: MultiplierModel
) -> TokenCalculationResult:
    """Count 32px patches, shrinking once if the image exceeds the patch cap."""
    width, height = dimensions.width, dimensions.height
    total_patches = _count_patches(width, height)
    scaled = None

    if total_patches > MAX_PATCHES:
        shrink_factor = math.sqrt(MAX_PATCHES * PATCH_SIZE ** 2 / (width * height))
        scaled = ImageDimensions(
            width=math.floor(width * shrink_factor),
            height=math.floor(height * shrink_factor),
        )
        total_patches = _count_patches(scaled.width, scaled.height)

    # Single shrink pass; the clamp covers rounding that leaves us over the cap
    tokens = min(total_patches, MAX_PATCHES) * config.multiplier
    return TokenCalculationResult(tokens=tokens, scaled_dimensions=scaled)


def _calculate_high_detail_tokens(
    dimensions: ImageDimensions, config: TileModel
) -> TokenCalculationResult:
    """Fit within 2048x2048, shrink the short side to 768, count 512px tiles."""
    width, height = dimensions.width, dimensions.height
    scaled = False

    if width > HIGH_DETAIL_MAX_SIZE or height > HIGH_DETAIL_MAX_SIZE:
        scale = HIGH_DETAIL_MAX_SIZE / max(width, height)
        width = math.floor(width * scale)
        height = math.floor(height * scale)
        scaled = True

    shortest_side = min(width, height)
    if shortest_side > HIGH_DETAIL_MIN_SIZE:
        scale = HIGH_DETAIL_MIN_SIZE / shortest_side
        width = math.floor(width * scale)
        height = math.floor(height * scale)
        scaled = True

    tiles_x = math.ceil(width / HIGH_DETAIL_TILE_SIZE)
    tiles_y = math.ceil(height / HIGH_DETAIL_TILE_SIZE)
    total_tiles = tiles_x * tiles_y

    return TokenCalculationResult(
        tokens=config.base_tokens + config.tile_tokens * total_tiles,
        scaled_dimensions=ImageDimensions(width, height) if scaled else None,
    )
