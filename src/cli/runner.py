# src/cli/runner.py

"""Headless CLI commands for tracking products and running checks."""

import json
import logging
import sys
from dataclasses import asdict

from rich.console import Console
from rich.table import Table

from src.models.product import TrackedProduct
from src.models.scrape_result import ScrapeResult
from src.scrapers.base_scraper import BaseScraper
from src.scrapers.browser_scraper import BrowserScraper
from src.scrapers.errors import ScrapeError
from src.scrapers.static_scraper import StaticScraper
from src.services.notifier import build_notifier
from src.services.price_checker import CheckSummary, PriceChecker
from src.storage.price_history_db import PriceHistoryDB

logger = logging.getLogger("price_watch.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def make_scraper(static: bool) -> BaseScraper:
    """Browser rendering by default; plain HTTP with ``--static``."""
    return StaticScraper() if static else BrowserScraper()


def _money(value: float | None) -> str:
    return f"${value:,.2f}" if value is not None else "N/A"


def _result_to_dict(result: ScrapeResult) -> dict[str, object]:
    """Serialise a scrape result to plain values for JSON output."""
    return {
        "url": result.url,
        "price": result.price,
        "strategy": result.strategy.value,
        "scraped_at": result.scraped_at.isoformat(),
        "metadata": asdict(result.metadata),
    }


def _print_result_table(result: ScrapeResult) -> None:
    table = Table(
        title="Extraction Result",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Field", style="bold")
    table.add_column("Value", overflow="fold")
    meta = result.metadata
    rows: list[tuple[str, str]] = [
        ("Price", _money(result.price)),
        ("Strategy", result.strategy.value),
        ("Title", meta.title),
        ("Vendor", meta.vendor),
        ("In stock", "yes" if meta.in_stock else "no"),
        ("Brand", meta.brand or "—"),
        ("Color", meta.color or "—"),
        ("Capacity", meta.capacity or "—"),
        ("Size", meta.size or "—"),
        ("Image", meta.image_url or "—"),
        ("URL", meta.url),
    ]
    for name, value in rows:
        table.add_row(name, value)
    Console().print(table)


def _print_summary(summary: CheckSummary) -> None:
    table = Table(
        title="Price Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("ID", style="dim", width=5)
    table.add_column("Title", max_width=50)
    table.add_column("Old", justify="right")
    table.add_column("New", justify="right", style="green")
    table.add_column("Target", justify="right")
    table.add_column("Via", style="magenta")

    for r in summary.results:
        new = _money(r.price)
        if r.price_dropped:
            new = f"[bold green]{new} ▼[/bold green]"
        table.add_row(
            str(r.product_id),
            r.metadata.title[:50],
            _money(r.old_price),
            new,
            _money(r.target_price),
            r.strategy.value,
        )
    Console().print(table)

    for product_id, message in summary.failures.items():
        _err.print(f"[red]✗ Product {product_id}: {message}[/red]")
    _err.print(
        f"[bold]{summary.succeeded}/{summary.total} succeeded, "
        f"{summary.alerts_sent} alerts sent[/bold]"
    )


async def run_check(static: bool = False) -> int:
    """Check every tracked product (0=all ok, 1=any failure)."""
    db = PriceHistoryDB()
    try:
        products = db.get_tracked_products()
        if not products:
            _err.print("[yellow]No tracked products.[/yellow]")
            return 0
        _err.print(f"[bold]Checking {len(products)} products...[/bold]")
        async with make_scraper(static) as scraper:
            checker = PriceChecker(scraper, db, build_notifier())
            summary = await checker.check_all(products)
    finally:
        db.close()
    _print_summary(summary)
    return 1 if summary.failures else 0


async def run_extract(
    url: str, output_format: str = "json", static: bool = False,
) -> int:
    """One-off extraction of an untracked URL."""
    try:
        product = TrackedProduct(id=0, url=url)
    except ValueError as exc:
        _err.print(f"[red]{exc}[/red]")
        return 2
    _err.print(f"[bold]Extracting:[/bold] {url}")
    try:
        async with make_scraper(static) as scraper:
            result = await scraper.scrape(product)
    except ScrapeError as exc:
        logger.error("Extraction failed for %s: %s", url, exc.message)
        _err.print(f"[red]{exc.message}[/red]")
        return 1

    if output_format == "table":
        _print_result_table(result)
    else:
        json.dump(
            _result_to_dict(result),
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")
    return 0


def run_track(
    url: str, target: float | None, recipient: str | None,
) -> int:
    db = PriceHistoryDB()
    try:
        product = db.add_product(url, target, recipient)
    except ValueError as exc:
        _err.print(f"[red]{exc}[/red]")
        return 2
    finally:
        db.close()
    _err.print(
        f"[green]✓ Tracking #{product.id}[/green] {product.url} "
        f"[dim]target={_money(product.target_price)}[/dim]"
    )
    return 0


def run_untrack(product_id: int) -> int:
    db = PriceHistoryDB()
    try:
        removed = db.remove_product(product_id)
    finally:
        db.close()
    if not removed:
        _err.print(f"[red]No tracked product #{product_id}[/red]")
        return 1
    _err.print(f"[green]✓ Removed #{product_id}[/green]")
    return 0


def run_list() -> int:
    """Render all tracked products with their last check status."""
    db = PriceHistoryDB()
    try:
        products = db.get_tracked_products()
        statuses = {p.id: db.get_status(p.id) or {} for p in products}
    finally:
        db.close()

    table = Table(
        title="Tracked Products",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("ID", style="dim", width=5)
    table.add_column("Title", max_width=50)
    table.add_column("Vendor", style="magenta")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Target", justify="right")
    table.add_column("Last check", style="dim")
    table.add_column("Last error", style="red", overflow="fold")

    for p in products:
        status = statuses[p.id]
        table.add_row(
            str(p.id),
            (p.title or p.url)[:50],
            p.vendor or "—",
            _money(p.current_price),
            _money(p.target_price),
            str(status.get("last_checked") or "never"),
            str(status.get("last_error") or ""),
        )
    Console().print(table)
    return 0


def run_history(product_id: int) -> int:
    db = PriceHistoryDB()
    try:
        product = db.get_product(product_id)
        history = db.get_price_history(product_id)
        summary = db.get_trend_summary(product_id)
    finally:
        db.close()
    if product is None:
        _err.print(f"[red]No tracked product #{product_id}[/red]")
        return 1

    table = Table(
        title=f"Price History: {product.title or product.url}",
        title_style="bold cyan",
    )
    table.add_column("Recorded", style="dim")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Stock", justify="center")
    for record in history:
        table.add_row(
            record.recorded_at.strftime("%Y-%m-%d %H:%M"),
            _money(record.price),
            "✓" if record.in_stock else "✗",
        )
    Console().print(table)

    if summary:
        _err.print(
            f"[dim]min {_money(summary['min'])}  "
            f"max {_money(summary['max'])}  "
            f"avg {_money(summary['avg'])}  "
            f"n={int(summary['count'])}[/dim]"
        )
    return 0


def run_reset_alerts() -> int:
    db = PriceHistoryDB()
    try:
        cleared = db.reset_alerts()
    finally:
        db.close()
    _err.print(f"[green]✓ Re-armed {cleared} alerts[/green]")
    return 0
