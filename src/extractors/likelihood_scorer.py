# src/extractors/likelihood_scorer.py

"""Last-resort price guess: score every short price-looking element."""

import logging
import re
from dataclasses import dataclass, field

from src.config.settings import Settings
from src.extractors.price_text import (
    has_currency_hint,
    is_clean_price,
    parse_price,
)
from src.models.extraction import PriceCandidate
from src.scrapers.document import DocumentHandle, ElementSnapshot

logger = logging.getLogger("price_watch.scoring")

CANDIDATE_SELECTOR = "body *"
_SKIPPED_TAGS: frozenset[str] = frozenset(
    {"script", "style", "noscript", "template"}
)
_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


@dataclass
class ScoringConfig:
    """Tunable weights for :class:`LikelihoodScorer`."""

    positive_weights: dict[str, int] = field(
        default_factory=lambda: dict(Settings.SCORING_POSITIVE_WEIGHTS)
    )
    negative_weights: dict[str, int] = field(
        default_factory=lambda: dict(Settings.SCORING_NEGATIVE_WEIGHTS)
    )
    clean_format_bonus: int = Settings.CLEAN_FORMAT_BONUS
    short_text_threshold: int = Settings.SHORT_TEXT_THRESHOLD

    def weights(self) -> dict[str, int]:
        return {**self.positive_weights, **self.negative_weights}


class LikelihoodScorer:
    """Ranks candidates by class/id keyword signals."""

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()
        self._patterns: list[tuple[re.Pattern[str], int]] = [
            (re.compile(rf"(?<![a-z0-9]){re.escape(kw)}(?![a-z0-9])"), w)
            for kw, w in self.config.weights().items()
        ]

    def score(self, element: ElementSnapshot) -> int:
        """Keyword weights over class and id, plus the clean-format bonus.

        Keywords are word-bounded, so ``now`` does not fire on
        ``known``; ``-``, ``_`` and camelCase humps act as separators.
        """
        signals = f"{element.class_name} {element.element_id}"
        signals = _CAMEL_BOUNDARY_RE.sub(" ", signals).lower()
        total = sum(w for pattern, w in self._patterns if pattern.search(signals))
        if is_clean_price(element.text):
            total += self.config.clean_format_bonus
        return total

    def is_candidate(self, element: ElementSnapshot) -> bool:
        return (
            element.tag not in _SKIPPED_TAGS
            and element.text_length < self.config.short_text_threshold
            and has_currency_hint(element.text)
        )

    def rank(self, elements: list[ElementSnapshot]) -> list[PriceCandidate]:
        """Candidates best-first; equal scores keep document order."""
        candidates = [
            PriceCandidate(
                handle=e.handle,
                text=e.text,
                price=parse_price(e.text),
                score=self.score(e),
            )
            for e in elements
            if self.is_candidate(e)
        ]
        return sorted(candidates, key=lambda c: c.score, reverse=True)

    async def extract(self, document: DocumentHandle) -> float | None:
        ranked = self.rank(
            await document.query_selector_all(CANDIDATE_SELECTOR)
        )
        if not ranked:
            return None
        top = ranked[0]
        logger.debug(
            "[scoring] %d candidates on %s, top %r scored %d",
            len(ranked),
            document.url,
            top.text,
            top.score,
        )
        if len(ranked) > 1:
            logger.debug(
                "[scoring] Runner-up %r scored %d and is not considered",
                ranked[1].text,
                ranked[1].score,
            )
        if top.price is not None and top.price > 0:
            return top.price
        return None
