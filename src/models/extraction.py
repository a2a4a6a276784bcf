# src/models/extraction.py

"""Value objects produced by the price extraction engine."""

from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias


class Strategy(str, Enum):
    """The three price-finding strategies, in priority order."""

    STRUCTURED_DATA = "structured_data"
    SELECTOR_MATCH = "selector_match"
    SCORING = "scoring"


class FailureReason(str, Enum):
    """Why no price could be determined."""

    PAGE_TIMEOUT = "page_timeout"
    NO_PRICE_FOUND = "no_price_found"


@dataclass(frozen=True)
class ExtractionSuccess:
    """A validated price and the strategy that produced it."""

    price: float
    strategy: Strategy

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class ExtractionFailure:
    """Extraction gave up on a page."""

    reason: FailureReason
    url: str
    attempted: tuple[Strategy, ...] = ()

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        """Human-readable summary naming the page and strategies tried."""
        if self.reason is FailureReason.PAGE_TIMEOUT:
            return f"Page body never loaded: {self.url}"
        tried = ", ".join(s.value for s in self.attempted) or "none"
        return f"Could not extract price from {self.url} (tried: {tried})"


ExtractionResult: TypeAlias = ExtractionSuccess | ExtractionFailure


@dataclass
class PriceCandidate:
    """An element considered during one likelihood-scoring pass."""

    handle: int
    text: str
    price: float | None
    score: int = 0
