# fitlowprice/cli/runner.py

"""Headless CLI runner: keyword search, URL lookup and price computation."""

import json
import logging
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from fitlowprice.config.settings import Settings
from fitlowprice.errors import ComputationFailed, InvalidInput
from fitlowprice.models.listing import Listing
from fitlowprice.models.pricing import ComputeResult
from fitlowprice.pricing.price_calculator import PriceCalculator
from fitlowprice.scrapers.fallback import is_fallback
from fitlowprice.services.search_orchestrator import SearchOrchestrator

logger = logging.getLogger("fitlowprice.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID = 2


def _source_labels() -> dict[str, str]:
    return {s["id"]: s["label"] for s in Settings.AVAILABLE_SOURCES}


def _write_json(data: dict[str, Any]) -> None:
    json.dump(data, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


def _print_listings(listings: list[Listing]) -> None:
    """Render the merged, price-sorted listings as a Rich table."""
    labels = _source_labels()
    table = Table(
        title="Search Results",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Product", max_width=50)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Off", justify="right")
    table.add_column("Source", style="magenta")
    table.add_column("Delivery")
    table.add_column("URL", overflow="fold", style="dim")

    for idx, li in enumerate(listings, 1):
        badges = []
        if li.is_rocket_delivery:
            badges.append("로켓")
        if li.is_free_shipping:
            badges.append("무료배송")
        name = li.product_name[:50]
        if is_fallback(li):
            name = f"[yellow]{name}[/yellow]"
        table.add_row(
            str(idx),
            name,
            f"{li.price:,}원",
            f"{li.discount_rate}%" if li.discount_rate else "—",
            labels.get(li.source_id, li.source_id),
            ", ".join(badges) or "—",
            li.product_url,
        )

    Console().print(table)


def _print_prices(result: ComputeResult) -> None:
    """Render ranked final prices as a Rich table."""
    labels = _source_labels()
    table = Table(
        title="Final Prices",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Source", style="magenta")
    table.add_column("Base", justify="right")
    table.add_column("Shipping", justify="right")
    table.add_column("Discounts")
    table.add_column("Final", justify="right", style="green")
    table.add_column("Diff", justify="right")

    for r in result.results:
        discounts = ", ".join(
            f"{d.rule_name} -{round(d.amount):,}"
            for d in r.applied_discounts
        )
        source = labels.get(r.source_id, r.source_id)
        if r.is_cheapest:
            source = f"[bold]{source} ★[/bold]"
        table.add_row(
            source,
            f"{r.base_price:,}",
            f"{r.shipping_fee:,}",
            discounts or "—",
            f"{round(r.final_price):,}원",
            f"+{round(r.price_difference):,}" if r.price_difference else "—",
        )

    Console().print(table)


async def cli_search(keyword: str, output_format: str) -> int:
    """Search every source for *keyword* and print the results."""
    orchestrator = SearchOrchestrator()
    _err.print(f"[bold]Searching:[/bold] {keyword}")

    try:
        outcome = await orchestrator.search_all(keyword)
    except InvalidInput as exc:
        _err.print(f"[red]{exc}[/red]")
        return EXIT_INVALID

    counts = ", ".join(
        f"{src}={len(bucket)}" for src, bucket in outcome.results.items()
    )
    _err.print(
        f"[green]✓ {outcome.total_count} listings[/green] [dim]({counts})[/dim]"
    )

    if output_format == "table":
        if outcome.total_count:
            _print_listings(outcome.merged)
        else:
            _err.print("[yellow]No listings found.[/yellow]")
    else:
        _write_json(outcome.to_dict())
    return EXIT_OK


async def cli_lookup(url: str) -> int:
    """Scrape a single product URL and print its detail and price quote."""
    orchestrator = SearchOrchestrator()
    try:
        result = await orchestrator.lookup_url(url)
    except InvalidInput as exc:
        _err.print(f"[red]{exc}[/red]")
        return EXIT_INVALID

    if not result.success or result.detail is None:
        _err.print(f"[red]Lookup failed: {result.error}[/red]")
        return EXIT_FAILED

    detail = result.detail
    _write_json(
        {
            "name": detail.name,
            "imageUrl": detail.image_url,
            "quote": detail.to_quote().to_dict(),
        }
    )
    return EXIT_OK


def cli_compute(request_path: str, output_format: str) -> int:
    """Compute final prices from a JSON request file.

    The file holds ``{"basePrices": {source: {basePrice, shippingFee}},
    "selectedRuleIds": {source: [ruleId, ...]}}``.
    """
    try:
        with open(Path(request_path), encoding="utf-8") as f:
            request: dict[str, Any] = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        _err.print(f"[red]Cannot read request: {exc}[/red]")
        return EXIT_INVALID

    calculator = PriceCalculator()
    try:
        result = calculator.compute_all(
            request.get("basePrices", {}),
            request.get("selectedRuleIds", {}),
        )
    except ComputationFailed as exc:
        _err.print(f"[red]{exc}[/red]")
        return EXIT_FAILED

    if output_format == "table":
        _print_prices(result)
    else:
        _write_json(result.to_dict())
    return EXIT_OK
