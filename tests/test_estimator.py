"""
Unit tests for image token estimation.

Tests patch counting, high detail tiling and the base/tile breakdown.
"""

import pytest

from image_token_estimator.core.estimator import (
    MAX_PATCHES,
    calculate_tokens,
    split_tokens,
    token_breakdown,
)
from image_token_estimator.core.models import (
    MODEL_CATALOG,
    DetailLevel,
    ImageDimensions,
    ModelIdentifier,
    MultiplierModel,
    TileModel,
)

TILE_MODELS = [m for m, c in MODEL_CATALOG.items() if isinstance(c, TileModel)]
MULTIPLIER_MODELS = [m for m, c in MODEL_CATALOG.items() if isinstance(c, MultiplierModel)]


class TestHighDetailTiling:
    """Test tile-based models at high detail."""

    def test_square_image_scaled_to_768(self):
        """1024x1024 shrinks to 768x768 and covers 4 tiles."""
        result = calculate_tokens(ImageDimensions(1024, 1024), "gpt-4.1", "high")
        # 85 + 170 * 2 * 2
        assert result.tokens == 765
        assert result.scaled_dimensions == ImageDimensions(768, 768)

    def test_wide_image_scaled_twice(self):
        """4096x2048 fits to 2048x1024 then shrinks to 1536x768."""
        result = calculate_tokens(ImageDimensions(4096, 2048), ModelIdentifier.GPT_4_1)
        # 85 + 170 * 3 * 2
        assert result.tokens == 1105
        assert result.scaled_dimensions == ImageDimensions(1536, 768)

    def test_default_detail_is_high(self):
        """Omitting detail uses the tiling calculation."""
        result = calculate_tokens(ImageDimensions(1024, 1024), "gpt-4.1")
        assert result.tokens == 765

    def test_small_image_not_scaled(self):
        """Images within bounds are never scaled up."""
        result = calculate_tokens(ImageDimensions(512, 512), "gpt-4o")
        assert result.tokens == 85 + 170
        assert result.scaled_dimensions is None

    def test_one_pixel_image_has_one_tile(self):
        """A 1x1 image still covers a full tile."""
        result = calculate_tokens(ImageDimensions(1, 1), "o3")
        assert result.tokens == 75 + 150
        assert result.scaled_dimensions is None

    def test_768_boundary_not_scaled(self):
        """Shortest side exactly 768 triggers no scaling."""
        result = calculate_tokens(ImageDimensions(768, 768), "gpt-4.1")
        assert result.scaled_dimensions is None
        assert result.tokens == 85 + 170 * 4

    def test_2048_boundary_only_short_side_scaling(self):
        """Longer side exactly 2048 is not fitted, short side still shrinks."""
        result = calculate_tokens(ImageDimensions(2048, 2048), "gpt-4.1")
        assert result.scaled_dimensions == ImageDimensions(768, 768)

    def test_tall_image(self):
        """Tall images scale on their width."""
        result = calculate_tokens(ImageDimensions(1000, 4096), "cua")
        # 4096 -> 2048: 500x2048, short side under 768
        assert result.scaled_dimensions == ImageDimensions(500, 2048)
        assert result.tokens == 65 + 129 * 1 * 4

    def test_gpt4o_mini_parameters(self):
        """gpt-4o-mini uses its own large base and tile values."""
        result = calculate_tokens(ImageDimensions(1024, 1024), "gpt-4o-mini")
        assert result.tokens == 2833 + 5667 * 4

    def test_rescaled_dimensions_are_a_fixed_point(self):
        """Feeding scaled dimensions back in scales no further."""
        first = calculate_tokens(ImageDimensions(4096, 2048), "gpt-4.1")
        second = calculate_tokens(first.scaled_dimensions, "gpt-4.1")
        assert second.scaled_dimensions is None
        assert second.tokens == first.tokens


class TestLowDetail:
    """Test tile-based models at low detail."""

    @pytest.mark.parametrize("model", TILE_MODELS)
    def test_low_detail_returns_base_tokens(self, model):
        """Low detail is a flat base cost regardless of size."""
        config = MODEL_CATALOG[model]
        for dimensions in (ImageDimensions(1, 1), ImageDimensions(1024, 1024), ImageDimensions(9000, 300)):
            result = calculate_tokens(dimensions, model, DetailLevel.LOW)
            assert result.tokens == config.base_tokens
            assert result.scaled_dimensions is None

    def test_low_detail_gpt41(self):
        """1024x1024 at low detail costs 85 tokens."""
        result = calculate_tokens(ImageDimensions(1024, 1024), "gpt-4.1", "low")
        assert result.tokens == 85


class TestPatchTokens:
    """Test multiplier models."""

    def test_under_cap_no_shrink(self):
        """512x512 covers 17x17 patches without shrinking."""
        result = calculate_tokens(ImageDimensions(512, 512), "gpt-4.1-mini")
        assert result.tokens == pytest.approx(289 * 1.62)
        assert result.tokens == pytest.approx(468.18)
        assert result.scaled_dimensions is None

    def test_oversized_image_is_shrunk_and_clamped(self):
        """4096x4096 shrinks to 1254x1254 and is clamped to the cap."""
        result = calculate_tokens(ImageDimensions(4096, 4096), "gpt-4.1-mini")
        assert result.scaled_dimensions == ImageDimensions(1254, 1254)
        assert result.tokens == pytest.approx(1536 * 1.62)
        assert result.tokens == pytest.approx(2488.32)

    def test_detail_is_ignored(self):
        """Multiplier models give the same result at any detail."""
        dims = ImageDimensions(800, 600)
        low = calculate_tokens(dims, "o4-mini", "low")
        high = calculate_tokens(dims, "o4-mini", "high")
        assert low == high

    @pytest.mark.parametrize("model", MULTIPLIER_MODELS)
    def test_tokens_never_exceed_cap(self, model):
        """Tokens stay within cap * multiplier."""
        multiplier = MODEL_CATALOG[model].multiplier
        for dimensions in (ImageDimensions(1, 1), ImageDimensions(20000, 50), ImageDimensions(5000, 5000)):
            tokens = calculate_tokens(dimensions, model).tokens
            assert 0 <= tokens <= MAX_PATCHES * multiplier + 1e-9

    def test_nano_multiplier(self):
        """gpt-4.1-nano applies its 2.46 multiplier."""
        result = calculate_tokens(ImageDimensions(32, 32), "gpt-4.1-nano")
        # ceil(63/32) = 2 per axis
        assert result.tokens == pytest.approx(4 * 2.46)


class TestMonotonicity:
    """Larger images never cost fewer tokens."""

    @pytest.mark.parametrize("model", ["gpt-4.1", "o1", "gpt-4.1-mini"])
    def test_growing_square_images(self, model):
        """Token counts do not decrease as a square image grows."""
        sizes = [64, 256, 512, 700, 1024, 1500]
        tokens = [calculate_tokens(ImageDimensions(s, s), model).tokens for s in sizes]
        assert tokens == sorted(tokens)


class TestTokenBreakdown:
    """Test base/tile split of token totals."""

    def test_high_detail_split(self):
        """High detail splits into base and tile shares."""
        breakdown = token_breakdown(ImageDimensions(1024, 1024), "gpt-4.1")
        assert breakdown.base == 85
        assert breakdown.tile == 680
        assert breakdown.total == 765

    def test_low_detail_split(self):
        """Low detail is all base."""
        breakdown = token_breakdown(ImageDimensions(1024, 1024), "gpt-4.1", "low")
        assert breakdown.base == 85
        assert breakdown.tile == 0
        assert breakdown.total == 85

    def test_multiplier_split(self):
        """Multiplier models are all tile."""
        breakdown = token_breakdown(ImageDimensions(512, 512), "gpt-4.1-mini")
        assert breakdown.base == 0
        assert breakdown.tile == pytest.approx(468.18)
        assert breakdown.total == breakdown.tile

    def test_split_existing_result(self):
        """A computed result splits the same way as a fresh breakdown."""
        dims = ImageDimensions(4096, 2048)
        result = calculate_tokens(dims, "gpt-4.1")
        breakdown = split_tokens(result, "gpt-4.1")
        assert breakdown == token_breakdown(dims, "gpt-4.1")
        assert breakdown.base == 85
        assert breakdown.tile == 1020


class TestInvalidInput:
    """Test out-of-contract input."""

    def test_unknown_model_raises(self):
        """Unknown models are rejected by the catalog."""
        with pytest.raises(ValueError):
            calculate_tokens(ImageDimensions(100, 100), "gpt-5")

    def test_unknown_detail_raises(self):
        """Unknown detail levels are rejected."""
        with pytest.raises(ValueError):
            calculate_tokens(ImageDimensions(100, 100), "gpt-4.1", "medium")
