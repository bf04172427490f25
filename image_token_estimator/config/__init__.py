"""
Configuration loading for Image Token Estimator.
"""

from .loader import PricingConfig, load_pricing_config

__all__ = ["PricingConfig", "load_pricing_config"]
