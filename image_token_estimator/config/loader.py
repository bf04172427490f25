"""
Configuration management and loading.

Handles pricing source settings and the model to pricing key mapping.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

import yaml

from ..core.models import ModelIdentifier
from ..core.pricing import DEFAULT_PRICING_KEY, DEFAULT_PRICING_URL, DEFAULT_TIMEOUT


@dataclass(frozen=True)
class PricingConfig:
    """Pricing source and per-model pricing keys."""
    source_url: str = DEFAULT_PRICING_URL
    timeout: float = DEFAULT_TIMEOUT
    default_pricing_key: str = DEFAULT_PRICING_KEY
    model_mapping: Dict[ModelIdentifier, str] = field(default_factory=dict)

    def __post_init__(self):
        """Validate pricing values."""
        if not self.source_url:
            raise ValueError("source_url cannot be empty")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        if not self.default_pricing_key:
            raise ValueError("default_pricing_key cannot be empty")

    def build_model_mapping(self) -> Dict[ModelIdentifier, str]:
        """Pricing key for every model, using the default key where not overridden."""
        return {
            model: self.model_mapping.get(model, self.default_pricing_key)
            for model in ModelIdentifier
        }


def load_pricing_config(path: str) -> PricingConfig:
    """Load and validate pricing configuration from YAML file.

    Every key is optional; unknown keys are rejected so that a typo in a
    model name does not silently fall back to the default pricing key.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated PricingConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Pricing config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if raw_config is None:
        return PricingConfig()

    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    allowed_top_keys = {'source_url', 'timeout', 'default_pricing_key', 'model_mapping'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    source_url = raw_config.get('source_url', DEFAULT_PRICING_URL)
    if not isinstance(source_url, str):
        raise ValueError("'source_url' must be a string")

    timeout = raw_config.get('timeout', DEFAULT_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError("'timeout' must be a number > 0")

    default_key = raw_config.get('default_pricing_key', DEFAULT_PRICING_KEY)
    if not isinstance(default_key, str) or not default_key:
        raise ValueError("'default_pricing_key' must be a non-empty string")

    mapping_data = raw_config.get('model_mapping') or {}
    if not isinstance(mapping_data, dict):
        raise ValueError("'model_mapping' must be a dictionary")

    return PricingConfig(
        source_url=source_url,
        timeout=float(timeout),
        default_pricing_key=default_key,
        model_mapping=_parse_model_mapping(mapping_data),
    )


def _parse_model_mapping(data: Dict) -> Dict[ModelIdentifier, str]:
    """Parse and validate model to pricing key overrides.

    Raises:
        ValueError: If a model is unknown or a key is not a non-empty string
    """
    mapping = {}
    for model_name, pricing_key in data.items():
        try:
            model = ModelIdentifier(str(model_name))
        except ValueError:
            valid_models = [m.value for m in ModelIdentifier]
            raise ValueError(f"Unknown model '{model_name}' in model_mapping, must be one of: {valid_models}")

        if not isinstance(pricing_key, str) or not pricing_key:
            raise ValueError(f"Pricing key for '{model_name}' must be a non-empty string")

        mapping[model] = pricing_key
    return mapping
