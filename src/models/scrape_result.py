# src/models/scrape_result.py

"""Outcome of scraping one tracked product."""

from dataclasses import dataclass, field
from datetime import datetime

from src.models.extraction import Strategy
from src.models.product import ProductMetadata


@dataclass
class ScrapeResult:
    """Price, strategy and metadata read for a product in one check."""

    product_id: int
    url: str
    price: float
    strategy: Strategy
    metadata: ProductMetadata
    old_price: float | None = None
    target_price: float | None = None
    scraped_at: datetime = field(default_factory=datetime.now)

    @property
    def price_dropped(self) -> bool:
        """True when a target is set and the price is at or below it."""
        return (
            self.target_price is not None
            and self.price <= self.target_price
        )
