# product_tracker/cli/runner.py

"""Headless CLI runner around the tracker service."""

import json
import logging
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from product_tracker.models.listing import Listing, Platform
from product_tracker.models.tracker import TrackerResponse
from product_tracker.services.tracker_service import (
    InvalidInputError,
    parse_tracker_input,
    run_tracker,
)

logger = logging.getLogger("product_tracker.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

_PLATFORM_LABELS: dict[Platform, str] = {
    Platform.AMAZON: "Amazon",
    Platform.ALIEXPRESS: "AliExpress",
    Platform.SHOPIFY: "Shopify",
}


def build_payload(
    query: str | None,
    source_url: str | None,
    max_results: int | None,
    input_path: str | None,
) -> dict[str, Any]:
    """Merge an optional JSON input file with command-line values.

    Command-line values win over the file's keys.
    """
    payload: dict[str, Any] = {}
    if input_path is not None:
        with open(Path(input_path), encoding="utf-8") as f:
            loaded = json.load(f)
        if not isinstance(loaded, dict):
            msg = f"{input_path} must contain a JSON object"
            raise InvalidInputError(msg)
        payload.update(loaded)

    if query is not None:
        payload["productQuery"] = query
    if source_url is not None:
        payload["sourceUrl"] = source_url
    if max_results is not None:
        payload["maxResultsPerPlatform"] = max_results
    return payload


def _format_price(listing: Listing) -> str:
    if listing.price is None:
        return "N/A"
    currency = listing.currency or ""
    return f"{currency} {listing.price:,.2f}".strip()


def _print_tables(response: TrackerResponse) -> None:
    """Render one Rich table per platform to stdout."""
    console = Console()
    for platform in Platform:
        listings = response.matches.get(platform, [])
        table = Table(
            title=f"{_PLATFORM_LABELS[platform]} ({len(listings)})",
            show_lines=True,
            title_style="bold cyan",
        )
        table.add_column("#", style="dim", width=4)
        table.add_column("Title", max_width=60)
        table.add_column("Price", justify="right", style="green")
        table.add_column("URL", overflow="fold", style="dim")

        for idx, listing in enumerate(listings, 1):
            table.add_row(
                str(idx),
                listing.title[:60],
                _format_price(listing),
                listing.url,
            )
        console.print(table)


async def cli_track(
    query: str | None,
    source_url: str | None,
    max_results: int | None,
    output_format: str,
    input_path: str | None = None,
) -> int:
    """Run one tracker invocation and return an exit code (0=ok, 1=fail)."""
    try:
        payload = build_payload(query, source_url, max_results, input_path)
        tracker_input = parse_tracker_input(payload)
    except (InvalidInputError, OSError, json.JSONDecodeError) as exc:
        logger.error("Invalid input: %s", exc)
        _err.print(f"[red]Invalid input: {exc}[/red]")
        return 1

    _err.print(f"[bold]Tracking:[/bold] {tracker_input.product_query}")
    if tracker_input.source_url:
        _err.print(f"[dim]Source: {tracker_input.source_url}[/dim]")

    response = await run_tracker(tracker_input)

    counts = ", ".join(
        f"{p.value}={len(response.matches[p])}" for p in Platform
    )
    total = sum(len(v) for v in response.matches.values())
    if total:
        _err.print(f"[green]✓ {total} listings ({counts})[/green]")
    else:
        _err.print("[yellow]No listings found on any platform.[/yellow]")

    if output_format == "table":
        _print_tables(response)
    else:
        json.dump(
            {"status": "ok", "data": response.to_dict()},
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    return 0 if total else 1
