"""
Image Token Estimator.

Estimates vision model image tokens and their cost.
"""

from .core.estimator import TokenBreakdown, TokenCalculationResult, calculate_tokens, token_breakdown
from .core.models import DetailLevel, ImageDimensions, ModelIdentifier, get_model_config
from .core.pricing import PriceEntry, PricingLookup

__version__ = "0.1.0"

__all__ = [
    "DetailLevel",
    "ImageDimensions",
    "ModelIdentifier",
    "PriceEntry",
    "PricingLookup",
    "TokenBreakdown",
    "TokenCalculationResult",
    "calculate_tokens",
    "get_model_config",
    "token_breakdown",
]
