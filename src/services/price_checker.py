# src/services/price_checker.py

"""Runs one price-check cycle over every tracked product."""

import asyncio
import logging
from dataclasses import dataclass, field

from src.config.settings import Settings
from src.models.price_record import PriceRecord
from src.models.product import TrackedProduct
from src.models.scrape_result import ScrapeResult
from src.scrapers.base_scraper import BaseScraper
from src.scrapers.errors import (
    PageAcquisitionError,
    PageTimeoutError,
    ScrapeError,
)
from src.services.notifier import LogNotifier, Notifier
from src.storage.price_history_db import PriceHistoryDB

logger = logging.getLogger("price_watch.checker")

# Retried; a plain ExtractionError is a content problem and is not
_RETRYABLE: tuple[type[ScrapeError], ...] = (
    PageAcquisitionError,
    PageTimeoutError,
)


@dataclass
class ProductCheck:
    """Outcome of checking a single product."""

    product_id: int
    result: ScrapeResult | None = None
    alerted: bool = False
    error: str | None = None


@dataclass
class CheckSummary:
    """Outcome of a check cycle across all tracked products."""

    results: list[ScrapeResult] = field(
        default_factory=lambda: list[ScrapeResult]()
    )
    failures: dict[int, str] = field(
        default_factory=lambda: dict[int, str]()
    )
    alerts_sent: int = 0
    total: int = 0

    @property
    def succeeded(self) -> int:
        return len(self.results)


class PriceChecker:
    """Scrapes, persists and alerts, one product at a time."""

    def __init__(
        self,
        scraper: BaseScraper,
        db: PriceHistoryDB,
        notifier: Notifier | None = None,
        max_retries: int = Settings.MAX_RETRIES,
        retry_backoff: float = Settings.RETRY_BACKOFF,
        inter_product_delay: float = Settings.INTER_PRODUCT_DELAY,
    ) -> None:
        self.scraper = scraper
        self.db = db
        self.notifier = notifier or LogNotifier()
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.inter_product_delay = inter_product_delay

    # ── Private helpers ──────────────────────────────────

    async def _scrape_with_retry(
        self,
        product: TrackedProduct,
    ) -> ScrapeResult:
        attempt = 0
        while True:
            try:
                return await self.scraper.scrape(product)
            except _RETRYABLE as exc:
                if attempt >= self.max_retries:
                    raise
                attempt += 1
                logger.warning(
                    "Product %d attempt %d failed (%s), retrying in %.0fs",
                    product.id,
                    attempt,
                    exc.message,
                    self.retry_backoff,
                )
                await asyncio.sleep(self.retry_backoff)

    async def _persist(self, result: ScrapeResult) -> None:
        record = PriceRecord(
            product_id=result.product_id,
            price=result.price,
            in_stock=result.metadata.in_stock,
            recorded_at=result.scraped_at,
        )
        await asyncio.to_thread(self.db.record_price, record)
        await asyncio.to_thread(
            self.db.update_after_scrape,
            result.product_id,
            result.price,
            result.metadata,
            result.scraped_at,
        )

    async def _maybe_alert(
        self,
        product: TrackedProduct,
        result: ScrapeResult,
    ) -> bool:
        """Notify once per downward crossing of the target price."""
        if product.target_price is None:
            return False
        triggered = await asyncio.to_thread(
            self.db.is_alert_triggered,
            product.id,
        )
        if not result.price_dropped:
            if triggered:
                logger.info(
                    "Product %d back above target, alert re-armed",
                    product.id,
                )
                await asyncio.to_thread(
                    self.db.set_alert_triggered,
                    product.id,
                    False,
                )
            return False
        if triggered:
            return False
        try:
            await self.notifier.notify(
                product.recipient,
                result.metadata.title,
                result.price,
                product.url,
            )
        except Exception as exc:
            logger.error(
                "Notifier failed for product %d: %s",
                product.id,
                exc,
                exc_info=True,
            )
            return False
        await asyncio.to_thread(self.db.set_alert_triggered, product.id)
        return True

    # ── Public API ───────────────────────────────────────

    async def check_product(
        self,
        product: TrackedProduct,
    ) -> ProductCheck:
        """Scrape, persist and alert for one product without raising."""
        try:
            result = await self._scrape_with_retry(product)
        except ScrapeError as exc:
            logger.error(
                "Product %d failed: %s",
                product.id,
                exc.message,
            )
            await asyncio.to_thread(
                self.db.record_failure,
                product.id,
                exc.message,
            )
            return ProductCheck(product.id, error=exc.message)
        except Exception as exc:
            logger.error(
                "Product %d crashed the scraper: %s",
                product.id,
                exc,
                exc_info=True,
            )
            await asyncio.to_thread(
                self.db.record_failure,
                product.id,
                str(exc),
            )
            return ProductCheck(product.id, error=str(exc))

        await self._persist(result)
        logger.info(
            "Product %d: $%.2f via %s (was %s)",
            product.id,
            result.price,
            result.strategy.value,
            f"${result.old_price:.2f}" if result.old_price else "unknown",
        )
        alerted = await self._maybe_alert(product, result)
        return ProductCheck(product.id, result=result, alerted=alerted)

    async def check_all(
        self,
        products: list[TrackedProduct] | None = None,
    ) -> CheckSummary:
        """Check every tracked product sequentially."""
        if products is None:
            products = await asyncio.to_thread(
                self.db.get_tracked_products,
            )
        summary = CheckSummary(total=len(products))
        for index, product in enumerate(products):
            if index and self.inter_product_delay:
                await asyncio.sleep(self.inter_product_delay)
            check = await self.check_product(product)
            if check.result is None:
                summary.failures[product.id] = check.error or "unknown error"
                continue
            summary.results.append(check.result)
            summary.alerts_sent += int(check.alerted)
        logger.info(
            "Check complete: %d/%d succeeded, %d alerts",
            summary.succeeded,
            summary.total,
            summary.alerts_sent,
        )
        return summary
