# baro/cli/runner.py

"""Headless CLI commands built on the price lookup engine."""

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from baro.config.settings import Settings
from baro.models.product import PriceComparisonResult, ScanKind
from baro.parsers.text_extractor import ProductTextExtractor
from baro.services.connectivity import (
    ConnectivityOracle,
    HttpConnectivityProbe,
    StaticConnectivity,
)
from baro.services.price_lookup import PriceLookupEngine
from baro.services.price_source import HttpPriceSource
from baro.storage.sqlite_cache_store import SqliteCacheStore

logger = logging.getLogger("baro.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

_AVAILABILITY_LABELS: dict[str, str] = {
    "in_stock": "재고 있음",
    "limited": "재고 부족",
    "out_of_stock": "품절",
}


def build_engine(
    offline: bool = False,
    db_path: Path | None = None,
) -> PriceLookupEngine:
    """Wire the engine with the SQLite store and live collaborators."""
    connectivity: ConnectivityOracle = (
        StaticConnectivity(False) if offline else HttpConnectivityProbe()
    )
    return PriceLookupEngine(
        cache_store=SqliteCacheStore(db_path),
        connectivity=connectivity,
        price_source=HttpPriceSource(),
    )


def result_to_dict(result: PriceComparisonResult) -> dict[str, Any]:
    """Serialise a lookup result for JSON output."""
    return {
        **result.payload(),
        "responseTime": result.response_time,
        "fromCache": result.from_cache,
        "fallback": result.is_fallback,
    }


def _print_result_table(result: PriceComparisonResult) -> None:
    """Render a Rich table of quotes, cheapest first."""
    origin = (
        "cache" if result.from_cache
        else "fallback" if result.is_fallback
        else "live"
    )
    table = Table(
        title=f"{result.product.name}  [dim]({origin}, {result.response_time}ms)[/dim]",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Store", style="magenta")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Stock", justify="center")
    table.add_column("Distance", justify="right")

    for idx, quote in enumerate(result.prices, 1):
        table.add_row(
            str(idx),
            quote.store,
            f"{quote.price:,} {quote.currency}",
            _AVAILABILITY_LABELS.get(quote.availability.value, "확인 필요"),
            f"{quote.distance:g} km" if quote.distance is not None else "—",
        )

    Console().print(table)


async def run_lookup(
    identifier: str,
    kind: str,
    offline: bool,
    output_format: str,
    db_path: Path | None = None,
) -> int:
    """Look up one identifier and print the comparison."""
    try:
        scan_kind = ScanKind(kind)
    except ValueError:
        _err.print(f"[red]Unknown scan kind: {kind}[/red]")
        return 1

    engine = build_engine(offline=offline, db_path=db_path)
    try:
        result = await engine.lookup(identifier, scan_kind)
    finally:
        engine.close()

    if output_format == "table":
        _print_result_table(result)
    else:
        print(json.dumps(result_to_dict(result), ensure_ascii=False, indent=2))
    if result.is_fallback:
        _err.print("[yellow]Live prices unavailable, showing fallback data[/yellow]")
    return 0


def run_extract(path: str, output_format: str) -> int:
    """Extract product fields from a text file of OCR lines."""
    try:
        raw_text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Cannot read %s: %s", path, exc)
        _err.print(f"[red]Cannot read {path}: {exc}[/red]")
        return 1

    info = ProductTextExtractor.extract(raw_text, raw_text.splitlines())
    keywords = ProductTextExtractor.extract_search_keywords(info)

    if output_format == "table":
        summary = ProductTextExtractor.format_product_info(info)
        Console().print(summary or "[dim]No product fields recognised[/dim]")
        if keywords:
            Console().print(f"[bold]Keywords:[/bold] {', '.join(keywords)}")
    else:
        document = dataclasses.asdict(info)
        document["keywords"] = keywords
        print(json.dumps(document, ensure_ascii=False, indent=2))
    return 0


def run_cache_command(
    action: str,
    db_path: Path | None = None,
) -> int:
    """``stats``, ``sweep`` or ``clear`` on the persistent cache."""
    if action not in ("stats", "sweep", "clear"):
        _err.print(f"[red]Unknown cache action: {action}[/red]")
        return 1

    engine = build_engine(offline=True, db_path=db_path)
    try:
        if action == "stats":
            stats = engine.cache_stats()
            print(json.dumps(dataclasses.asdict(stats), indent=2))
        elif action == "sweep":
            removed = engine.sweep_expired()
            _err.print(f"[dim]Removed {removed} expired entries[/dim]")
        else:
            removed = engine.cache.clear()
            _err.print(f"[dim]Removed {removed} entries[/dim]")
    finally:
        engine.close()
    logger.info("Cache %s done (db=%s)", action, db_path or Settings.CACHE_DB_PATH)
    return 0
