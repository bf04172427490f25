"""
Per-token pricing lookup.

Loads an external price table once and converts token counts into cost.
"""

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Union

import httpx

from .models import ModelIdentifier

if TYPE_CHECKING:
    from ..config.loader import PricingConfig

logger = logging.getLogger(__name__)

DEFAULT_PRICING_URL = (
    "https://raw.githubusercontent.com/BerriAI/litellm/"
    "afe8abc768958efc329755de322fff450955eb36/model_prices_and_context_window.json"
)
DEFAULT_PRICING_KEY = "gpt-4-vision-preview"
DEFAULT_TIMEOUT = 10.0

# Every model shares one upstream entry until per-model keys are configured
DEFAULT_MODEL_MAPPING: Dict[ModelIdentifier, str] = {
    model: DEFAULT_PRICING_KEY for model in ModelIdentifier
}


@dataclass(frozen=True)
class PriceEntry:
    """Upstream price for a single pricing key."""
    input_cost_per_token: float


def parse_price_table(raw: Mapping[str, Any]) -> Dict[str, PriceEntry]:
    """Build a price table from an upstream pricing document.

    Entries without a finite non-negative numeric input_cost_per_token are
    skipped.

    Args:
        raw: Parsed JSON document mapping pricing key to price fields

    Returns:
        Mapping of pricing key to PriceEntry
    """
    table = {}
    for key, fields in raw.items():
        if not isinstance(fields, Mapping):
            continue
        cost = fields.get("input_cost_per_token")
        if isinstance(cost, bool) or not isinstance(cost, (int, float)):
            continue
        try:
            cost = float(cost)
        except OverflowError:
            continue
        # json accepts NaN and Infinity literals
        if not math.isfinite(cost) or cost < 0:
            continue
        table[key] = PriceEntry(input_cost_per_token=cost)
    return table


class PricingLookup:
    """Cached price table with model to pricing key mapping.

    The table starts empty and is replaced as a whole by initialize(),
    load() or load_file(). cost() reads whatever is currently published and
    returns 0 when no price is available.
    """

    def __init__(
        self,
        source_url: str = DEFAULT_PRICING_URL,
        model_mapping: Optional[Mapping[Union[ModelIdentifier, str], str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Create a lookup with an empty price table.

        Args:
            source_url: URL of the upstream JSON pricing document
            model_mapping: Per-model pricing key overrides
            timeout: HTTP timeout in seconds
            transport: Optional httpx transport, used by tests

        Raises:
            ValueError: If model_mapping names an unknown model
        """
        self.source_url = source_url
        self.timeout = timeout
        self._transport = transport
        self._model_mapping: Dict[ModelIdentifier, str] = dict(DEFAULT_MODEL_MAPPING)
        for model, key in (model_mapping or {}).items():
            self._model_mapping[ModelIdentifier(model)] = key
        self._prices: Dict[str, PriceEntry] = {}

    @classmethod
    def from_config(
        cls,
        config: "PricingConfig",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "PricingLookup":
        """Create a lookup from a loaded PricingConfig."""
        return cls(
            source_url=config.source_url,
            model_mapping=config.build_model_mapping(),
            timeout=config.timeout,
            transport=transport,
        )

    @property
    def is_loaded(self) -> bool:
        """Whether a non-empty price table has been published."""
        return bool(self._prices)

    @property
    def model_mapping(self) -> Dict[ModelIdentifier, str]:
        return dict(self._model_mapping)

    async def initialize(self) -> None:
        """Fetch the upstream price table and publish it.

        Failures are logged and leave the current table in place.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.source_url)
                response.raise_for_status()
                raw = response.json()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Failed to fetch model pricing data from %s: %s", self.source_url, e)
            return
        except ValueError as e:
            logger.error("Invalid pricing document from %s: %s", self.source_url, e)
            return

        if not isinstance(raw, Mapping):
            logger.error("Pricing document from %s is not a JSON object", self.source_url)
            return

        self.load(raw)

    def load(self, raw: Mapping[str, Any]) -> int:
        """Publish a price table built from an already-parsed document.

        Args:
            raw: Parsed pricing document

        Returns:
            Number of usable price entries
        """
        prices = parse_price_table(raw)
        self._prices = prices
        logger.info("Loaded pricing for %d models", len(prices))
        return len(prices)

    def load_file(self, path: Union[str, Path]) -> int:
        """Publish a price table read from a local JSON file.

        Failures are logged and leave the current table in place.

        Returns:
            Number of usable price entries, 0 on failure
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Failed to read pricing file %s: %s", path, e)
            return 0

        if not isinstance(raw, Mapping):
            logger.error("Pricing file %s is not a JSON object", path)
            return 0

        return self.load(raw)

    def pricing_key(self, model: Union[ModelIdentifier, str]) -> Optional[str]:
        """Upstream pricing key for a model, or None if unmapped."""
        try:
            return self._model_mapping.get(ModelIdentifier(model))
        except ValueError:
            return None

    def get_price(self, model: Union[ModelIdentifier, str]) -> Optional[PriceEntry]:
        """Price entry for a model, or None if unavailable."""
        key = self.pricing_key(model)
        if key is None:
            return None
        return self._prices.get(key)

    def cost(self, model: Union[ModelIdentifier, str], tokens: float) -> float:
        """Cost of a token count for a model.

        Args:
            model: Model identifier
            tokens: Token count, >= 0

        Returns:
            tokens * input_cost_per_token, or 0.0 when no price is available
        """
        price = self.get_price(model)
        if price is None:
            logger.debug("No price available for %s, reporting zero cost", model)
            return 0.0
        return tokens * price.input_cost_per_token
