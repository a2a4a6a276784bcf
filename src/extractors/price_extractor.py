# src/extractors/price_extractor.py

"""Runs the price strategies in priority order against one document."""

import logging
from collections.abc import Awaitable, Callable

from src.config.selector_catalog import SelectorCatalog, load_selector_catalog
from src.config.settings import Settings
from src.extractors.likelihood_scorer import LikelihoodScorer, ScoringConfig
from src.extractors.price_text import normalize_price, within_bounds
from src.extractors.selector_extractor import SelectorExtractor
from src.extractors.structured_data import StructuredDataReader
from src.models.extraction import (
    ExtractionFailure,
    ExtractionResult,
    ExtractionSuccess,
    FailureReason,
    Strategy,
)
from src.scrapers.document import DocumentHandle

logger = logging.getLogger("price_watch.extraction")

StrategyFn = Callable[[DocumentHandle], Awaitable[float | None]]


class PriceExtractor:
    """Structured data, then selectors, then likelihood scoring.

    The first strategy to produce an in-bounds price ends the run.  A
    strategy that raises is logged and treated as having found nothing.
    Extraction never raises for content problems; it returns an
    :class:`ExtractionFailure` instead.
    """

    def __init__(
        self,
        catalog: SelectorCatalog | None = None,
        scoring: ScoringConfig | None = None,
        ceiling: float = Settings.PRICE_CEILING,
        root_timeout: float = Settings.ROOT_WAIT_TIMEOUT,
    ) -> None:
        self.ceiling = ceiling
        self.root_timeout = root_timeout
        self.structured_data = StructuredDataReader()
        self.selectors = SelectorExtractor(
            catalog or load_selector_catalog(), ceiling=ceiling,
        )
        self.scorer = LikelihoodScorer(scoring)
        self.strategies: list[tuple[Strategy, StrategyFn]] = [
            (Strategy.STRUCTURED_DATA, self.structured_data.extract),
            (Strategy.SELECTOR_MATCH, self.selectors.extract),
            (Strategy.SCORING, self.scorer.extract),
        ]

    async def extract(self, document: DocumentHandle) -> ExtractionResult:
        url = document.url
        try:
            await document.wait_for_selector("body", self.root_timeout)
        except TimeoutError:
            logger.warning(
                "[extraction] <body> not attached after %.0fs: %s",
                self.root_timeout, url,
            )
            return ExtractionFailure(FailureReason.PAGE_TIMEOUT, url)

        attempted: list[Strategy] = []
        for strategy, run in self.strategies:
            attempted.append(strategy)
            try:
                value = await run(document)
            except Exception as exc:
                logger.warning(
                    "[extraction] %s raised on %s: %s",
                    strategy.value, url, exc,
                    exc_info=True,
                )
                value = None
            if value is None:
                logger.debug(
                    "[extraction] %s found nothing on %s",
                    strategy.value, url,
                )
                continue
            price = normalize_price(value)
            if not within_bounds(price, self.ceiling):
                logger.info(
                    "[extraction] %s value %.2f out of bounds on %s",
                    strategy.value, price, url,
                )
                continue
            logger.info(
                "[extraction] %.2f via %s on %s",
                price, strategy.value, url,
            )
            return ExtractionSuccess(price, strategy)

        logger.warning("[extraction] No price found on %s", url)
        return ExtractionFailure(
            FailureReason.NO_PRICE_FOUND, url, tuple(attempted),
        )
