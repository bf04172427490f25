"""
Model catalog and value types.

Holds the fixed per-model token parameters used by the estimator.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union


class DetailLevel(str, Enum):
    """Image detail level requested from the model."""
    LOW = "low"
    HIGH = "high"


class ModelIdentifier(str, Enum):
    """Supported vision models."""
    GPT_4_1_MINI = "gpt-4.1-mini"
    GPT_4_1_NANO = "gpt-4.1-nano"
    O4_MINI = "o4-mini"
    GPT_4O = "gpt-4o"
    GPT_4_1 = "gpt-4.1"
    GPT_4O_MINI = "gpt-4o-mini"
    CUA = "cua"
    O1 = "o1"
    O1_PRO = "o1-pro"
    O3 = "o3"


@dataclass(frozen=True)
class ImageDimensions:
    """Image size in pixels."""
    width: int
    height: int

    def validate(self) -> "ImageDimensions":
        """Check both sides are positive.

        Returns:
            The same dimensions, for chaining

        Raises:
            ValueError: If width or height is not a positive integer
        """
        if self.width <= 0:
            raise ValueError("width must be > 0")
        if self.height <= 0:
            raise ValueError("height must be > 0")
        return self

    def __str__(self) -> str:
        return f"{self.width}×{self.height}"


@dataclass(frozen=True)
class MultiplierModel:
    """Patch-based model: tokens = patches * multiplier."""
    multiplier: float

    @property
    def base_tokens(self) -> int:
        return 0

    @property
    def tile_tokens(self) -> int:
        return 0


@dataclass(frozen=True)
class TileModel:
    """Tile-based model: tokens = base + tile * tiles."""
    base_tokens: int
    tile_tokens: int

    @property
    def multiplier(self) -> Optional[float]:
        return None


ModelConfig = Union[MultiplierModel, TileModel]


MODEL_CATALOG: Dict[ModelIdentifier, ModelConfig] = {
    ModelIdentifier.GPT_4_1_MINI: MultiplierModel(multiplier=1.62),
    ModelIdentifier.GPT_4_1_NANO: MultiplierModel(multiplier=2.46),
    ModelIdentifier.O4_MINI: MultiplierModel(multiplier=1.72),
    ModelIdentifier.GPT_4O: TileModel(base_tokens=85, tile_tokens=170),
    ModelIdentifier.GPT_4_1: TileModel(base_tokens=85, tile_tokens=170),
    ModelIdentifier.GPT_4O_MINI: TileModel(base_tokens=2833, tile_tokens=5667),
    ModelIdentifier.O1: TileModel(base_tokens=75, tile_tokens=150),
    ModelIdentifier.O1_PRO: TileModel(base_tokens=75, tile_tokens=150),
    ModelIdentifier.O3: TileModel(base_tokens=75, tile_tokens=150),
    ModelIdentifier.CUA: TileModel(base_tokens=65, tile_tokens=129),
}

DISPLAY_NAMES: Dict[ModelIdentifier, str] = {
    ModelIdentifier.GPT_4_1_MINI: "GPT-4.1 Mini",
    ModelIdentifier.GPT_4_1_NANO: "GPT-4.1 Nano",
    ModelIdentifier.O4_MINI: "O4 Mini",
    ModelIdentifier.GPT_4O: "GPT-4O",
    ModelIdentifier.GPT_4_1: "GPT-4.1",
    ModelIdentifier.GPT_4O_MINI: "GPT-4O Mini",
    ModelIdentifier.CUA: "CUA",
    ModelIdentifier.O1: "O1",
    ModelIdentifier.O1_PRO: "O1 Pro",
    ModelIdentifier.O3: "O3",
}


def get_model_config(model: Union[ModelIdentifier, str]) -> ModelConfig:
    """Get token parameters for a model.

    Args:
        model: Model identifier or its string value

    Returns:
        MultiplierModel or TileModel for the model

    Raises:
        ValueError: If model is not in the catalog
    """
    return MODEL_CATALOG[ModelIdentifier(model)]
