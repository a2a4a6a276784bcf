# src/extractors/selector_extractor.py

"""Price lookup driven by the ordered selector catalog."""

import logging

from src.config.selector_catalog import SelectorCatalog
from src.config.settings import Settings
from src.extractors.price_text import (
    has_currency_hint,
    parse_price,
    within_bounds,
)
from src.scrapers.document import DocumentHandle, ElementSnapshot

logger = logging.getLogger("price_watch.selectors")

# Machine-readable attributes may carry a bare number ("49.99")
_VALUE_ATTRIBUTES: tuple[str, ...] = ("content", "data-price")


class SelectorExtractor:
    """Walks include selectors in catalog order; first accepted value wins.

    Exclusion applies regardless of which selector matched: an element
    is rejected if any exclude selector also matches it, or if its class
    or text contains an exclude keyword.
    """

    def __init__(
        self,
        catalog: SelectorCatalog,
        ceiling: float = Settings.PRICE_CEILING,
    ) -> None:
        self.catalog = catalog
        self.ceiling = ceiling

    async def _excluded_handles(self, document: DocumentHandle) -> set[int]:
        handles: set[int] = set()
        for rule in self.catalog.exclude:
            try:
                matches = await document.query_selector_all(rule.pattern)
            except Exception as exc:
                logger.debug(
                    "[selectors] Exclude rule %r failed: %s",
                    rule.pattern, exc,
                )
                continue
            handles.update(m.handle for m in matches)
        return handles

    def _has_excluded_keyword(self, element: ElementSnapshot) -> bool:
        haystack = f"{element.class_name} {element.text}".lower()
        return any(kw in haystack for kw in self.catalog.exclude_keywords)

    def _value_of(self, element: ElementSnapshot) -> float | None:
        """Price carried by *element*, or None if it is not usable."""
        if has_currency_hint(element.text):
            return parse_price(element.text)
        for name in _VALUE_ATTRIBUTES:
            value = parse_price(element.attr(name))
            if value is not None:
                return value
        return None

    def accept(
        self, element: ElementSnapshot, excluded: set[int],
    ) -> float | None:
        """Return the element's price if it passes every rejection rule."""
        if element.handle in excluded or self._has_excluded_keyword(element):
            return None
        value = self._value_of(element)
        return value if within_bounds(value, self.ceiling) else None

    async def extract(self, document: DocumentHandle) -> float | None:
        excluded = await self._excluded_handles(document)
        for rule in self.catalog.include_rules_for(document.url):
            try:
                elements = await document.query_selector_all(rule.pattern)
            except Exception as exc:
                logger.debug(
                    "[selectors] Include rule %r failed: %s",
                    rule.pattern, exc,
                )
                continue
            for element in elements:
                value = self.accept(element, excluded)
                if value is not None:
                    logger.debug(
                        "[selectors] %r matched %.2f on %s",
                        rule.pattern, value, document.url,
                    )
                    return value
        return None
