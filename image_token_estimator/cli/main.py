"""
CLI interface for Image Token Estimator.

Provides command-line access to token estimation and cost lookup.
"""

import asyncio
import logging
import math
import sys
from typing import List, Optional

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from image_token_estimator.config.loader import PricingConfig, load_pricing_config
from image_token_estimator.core.estimator import calculate_tokens, split_tokens
from image_token_estimator.core.models import (
    DISPLAY_NAMES,
    MODEL_CATALOG,
    DetailLevel,
    ImageDimensions,
    ModelIdentifier,
    MultiplierModel,
)
from image_token_estimator.core.pricing import PricingLookup
from image_token_estimator.core.summary import estimate_images, summarize

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """Image Token Estimator CLI."""
    if ctx.invoked_subcommand is None:
        console.print("Image Token Estimator - Use --help to see available commands")


@app.command()
def models():
    """List supported models and their token parameters."""
    table = Table(title="Supported Models")
    table.add_column("Model")
    table.add_column("Name")
    table.add_column("Base Tokens", justify="right")
    table.add_column("Tile Tokens", justify="right")
    table.add_column("Multiplier", justify="right")

    for model, config in MODEL_CATALOG.items():
        multiplier = str(config.multiplier) if isinstance(config, MultiplierModel) else "-"
        table.add_row(
            model.value,
            DISPLAY_NAMES[model],
            str(config.base_tokens),
            str(config.tile_tokens),
            multiplier,
        )

    console.print(table)


@app.command()
def estimate(
    width: int = typer.Argument(..., help="Image width in pixels"),
    height: int = typer.Argument(..., help="Image height in pixels"),
    model: ModelIdentifier = typer.Option(ModelIdentifier.GPT_4_1, "--model", "-m", help="Model to estimate for"),
    detail: DetailLevel = typer.Option(DetailLevel.HIGH, "--detail", "-d", help="Image detail level"),
    cost: bool = typer.Option(False, "--cost", help="Look up the cost of the estimated tokens"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Pricing configuration YAML file"),
    pricing_file: Optional[str] = typer.Option(None, "--pricing-file", "-p", help="Local JSON price table"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Estimate tokens for a single image size."""
    _configure_logging(verbose)
    try:
        dimensions = ImageDimensions(width, height).validate()
        result = calculate_tokens(dimensions, model, detail)
        breakdown = split_tokens(result, model, detail)
        pricing = _load_pricing(config, pricing_file) if cost else None
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)

    console.print(f"\n[bold]{DISPLAY_NAMES[model]}[/bold] ({detail.value} detail)")
    console.print(f"Dimensions: {dimensions}px")
    if result.scaled_dimensions is not None:
        console.print(f"Scaled to: {result.scaled_dimensions}px")
    console.print(f"Base tokens: {_format_tokens(breakdown.base)}")
    console.print(f"Tile tokens: {_format_tokens(breakdown.tile)}")
    console.print(f"Total tokens: {_format_tokens(result.tokens)}")

    if pricing is not None:
        _warn_if_unpriced(pricing)
        console.print(f"Estimated cost: {_format_currency(pricing.cost(model, result.tokens))}")

    sys.exit(EXIT_CODE_PASS)


@app.command("summarize")
def summarize_command(
    sizes: List[str] = typer.Argument(..., help="Image sizes as WIDTHxHEIGHT"),
    model: ModelIdentifier = typer.Option(ModelIdentifier.GPT_4_1, "--model", "-m", help="Model to estimate for"),
    detail: DetailLevel = typer.Option(DetailLevel.HIGH, "--detail", "-d", help="Image detail level"),
    cost: bool = typer.Option(False, "--cost", help="Look up the cost of the estimated tokens"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Pricing configuration YAML file"),
    pricing_file: Optional[str] = typer.Option(None, "--pricing-file", "-p", help="Local JSON price table"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Estimate tokens for several image sizes and show totals."""
    _configure_logging(verbose)
    try:
        dimensions_list = [parse_dimensions(size) for size in sizes]
        pricing = _load_pricing(config, pricing_file) if cost else None
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)

    estimates = estimate_images(dimensions_list, model, detail)
    summary = summarize(estimates)

    table = Table(title="Image Token Estimates")
    table.add_column("Dimensions")
    table.add_column("Scaled")
    table.add_column("Detail Level")
    table.add_column("Base Tokens", justify="right")
    table.add_column("Tile Tokens", justify="right")
    table.add_column("Total Tokens", justify="right")
    for item in estimates:
        scaled = item.result.scaled_dimensions
        table.add_row(
            f"{item.dimensions}px",
            f"{scaled}px" if scaled is not None else "-",
            item.detail.value,
            _format_tokens(item.breakdown.base),
            _format_tokens(item.breakdown.tile),
            _format_tokens(item.breakdown.total),
        )
    console.print(table)

    console.print(f"\nBase Tokens: {math.ceil(summary.base_tokens):,}")
    console.print(f"Tile Tokens: {math.ceil(summary.tile_tokens):,}")
    console.print(f"Total Tokens: {math.ceil(summary.total_tokens):,}")

    if pricing is not None:
        _warn_if_unpriced(pricing)
        console.print(f"Base cost: {_format_currency(pricing.cost(model, summary.base_tokens))}")
        console.print(f"Tile cost: {_format_currency(pricing.cost(model, summary.tile_tokens))}")
        console.print(f"Total cost: {_format_currency(pricing.cost(model, summary.total_tokens))}")

    plural = "s" if summary.image_count > 1 else ""
    console.print(f"\n[dim]{summary.image_count} image{plural} • {model.value}[/]")
    sys.exit(EXIT_CODE_PASS)


def parse_dimensions(text: str) -> ImageDimensions:
    """Parse a WIDTHxHEIGHT string into validated dimensions.

    Raises:
        ValueError: If the text is malformed or a side is not positive
    """
    parts = text.lower().replace("×", "x").split("x")
    if len(parts) != 2:
        raise ValueError(f"Invalid size '{text}', expected WIDTHxHEIGHT")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"Invalid size '{text}', width and height must be integers")
    return ImageDimensions(width, height).validate()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


def _load_pricing(config_path: Optional[str], pricing_file: Optional[str]) -> PricingLookup:
    """Build a pricing lookup and load its price table."""
    config = load_pricing_config(config_path) if config_path else PricingConfig()
    pricing = PricingLookup.from_config(config)
    if pricing_file:
        pricing.load_file(pricing_file)
    else:
        asyncio.run(pricing.initialize())
    return pricing


def _warn_if_unpriced(pricing: PricingLookup) -> None:
    if not pricing.is_loaded:
        console.print("[yellow]Pricing data unavailable, costs are shown as zero[/]")


def _format_tokens(tokens: float) -> str:
    """Format token counts, keeping decimals only for fractional values."""
    if float(tokens).is_integer():
        return f"{int(tokens):,}"
    return f"{tokens:,.2f}"


def _format_currency(amount: float) -> str:
    return f"${amount:,.6f}"


if __name__ == "__main__":
    app()
