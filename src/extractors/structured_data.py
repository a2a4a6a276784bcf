# src/extractors/structured_data.py

"""schema.org Product markup embedded as JSON-LD."""

import json
import logging
import math
from typing import Any

from src.scrapers.document import DocumentHandle

logger = logging.getLogger("price_watch.structured_data")

JSON_LD_SELECTOR = 'script[type="application/ld+json"]'

_PRODUCT_TYPES: frozenset[str] = frozenset({
    "product",
    "http://schema.org/product",
    "https://schema.org/product",
    "schema:product",
})


def _flatten(data: Any) -> list[dict[str, Any]]:
    """Top-level items of a JSON-LD block, expanding ``@graph``."""
    items: list[Any] = data if isinstance(data, list) else [data]
    flat: list[dict[str, Any]] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        flat.append(item)
        graph = item.get("@graph")
        if isinstance(graph, list):
            flat.extend(g for g in graph if isinstance(g, dict))
        elif isinstance(graph, dict):
            flat.append(graph)
    return flat


def is_product(item: dict[str, Any]) -> bool:
    types = item.get("@type")
    if isinstance(types, str):
        types = [types]
    if not isinstance(types, list):
        return False
    return any(
        isinstance(t, str) and t.strip().lower() in _PRODUCT_TYPES
        for t in types
    )


def offers_of(item: dict[str, Any]) -> list[dict[str, Any]]:
    offers = item.get("offers")
    if isinstance(offers, dict):
        return [offers]
    if isinstance(offers, list):
        return [o for o in offers if isinstance(o, dict)]
    return []


def _as_price(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        price = float(value)
    elif isinstance(value, str):
        try:
            price = float(value.replace(",", "").strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(price) or price <= 0:
        return None
    return price


def price_of(item: dict[str, Any]) -> float | None:
    """The item's price: the best offer, else its own ``price``."""
    offer_prices = [
        p for p in (_as_price(o.get("price")) for o in offers_of(item))
        if p is not None
    ]
    if offer_prices:
        # Highest offer wins: the base product over add-ons and shipping
        return max(offer_prices)
    return _as_price(item.get("price"))


class StructuredDataReader:
    """Reads Product prices from ``application/ld+json`` blocks."""

    async def product_items(
        self, document: DocumentHandle,
    ) -> list[dict[str, Any]]:
        """Every Product item across all JSON-LD blocks, in page order."""
        products: list[dict[str, Any]] = []
        for block in await document.query_selector_all(
            JSON_LD_SELECTOR, full_text=True,
        ):
            try:
                data = json.loads(block.text, strict=False)
            except (json.JSONDecodeError, ValueError):
                logger.debug(
                    "[structured_data] Skipping unparsable JSON-LD on %s",
                    document.url,
                )
                continue
            products.extend(i for i in _flatten(data) if is_product(i))
        return products

    async def extract(self, document: DocumentHandle) -> float | None:
        """Price of the first Product item that carries one."""
        for item in await self.product_items(document):
            price = price_of(item)
            if price is not None:
                return price
        return None
