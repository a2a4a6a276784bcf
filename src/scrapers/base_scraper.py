# src/scrapers/base_scraper.py

"""Abstract base class for page-acquisition backends."""

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from types import TracebackType

from src.extractors.metadata_extractor import MetadataExtractor
from src.extractors.price_extractor import PriceExtractor
from src.models.extraction import ExtractionFailure
from src.models.product import TrackedProduct
from src.models.scrape_result import ScrapeResult
from src.scrapers.document import DocumentHandle
from src.scrapers.errors import error_for


class BaseScraper(ABC):
    """Opens a product page and runs price and metadata extraction.

    Subclasses only decide how a URL becomes a :class:`DocumentHandle`;
    the document is always torn down before :meth:`scrape` returns or
    raises.
    """

    def __init__(
        self,
        source_name: str,
        price_extractor: PriceExtractor | None = None,
        metadata_extractor: MetadataExtractor | None = None,
    ) -> None:
        self.source_name = source_name
        self.logger = logging.getLogger(f"price_watch.{source_name}")
        self.price_extractor = price_extractor or PriceExtractor()
        self.metadata_extractor = metadata_extractor or MetadataExtractor()

    async def __aenter__(self) -> "BaseScraper":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Release backend resources; a no-op by default."""

    @abstractmethod
    def _open_document(
        self, url: str,
    ) -> AbstractAsyncContextManager[DocumentHandle]:
        """Load *url* and yield a document; release it on exit."""
        ...

    async def scrape(self, product: TrackedProduct) -> ScrapeResult:
        """Scrape one tracked product.

        Raises:
            PageAcquisitionError: The page could not be loaded.
            ExtractionError: The page loaded but held no usable price
                (``PageTimeoutError`` when the body never appeared).
        """
        self.logger.info(
            "[%s] Scraping product %d: %s",
            self.source_name, product.id, product.url,
        )
        async with self._open_document(product.url) as document:
            outcome, metadata = await asyncio.gather(
                self.price_extractor.extract(document),
                self.metadata_extractor.extract(document),
            )
        if isinstance(outcome, ExtractionFailure):
            raise error_for(outcome)
        return ScrapeResult(
            product_id=product.id,
            url=product.url,
            price=outcome.price,
            strategy=outcome.strategy,
            metadata=metadata,
            old_price=product.current_price,
            target_price=product.target_price,
            scraped_at=datetime.now(),
        )
