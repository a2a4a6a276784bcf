# src/extractors/metadata_extractor.py

"""Title, image, canonical URL, vendor and variant attributes.

Every field has its own ordered candidate list; the first candidate that
passes validation wins.  Failures of individual candidates are logged at
DEBUG and skipped, so :meth:`MetadataExtractor.extract` always returns a
:class:`ProductMetadata`, falling back to defaults field by field.
"""

import asyncio
import logging
import re
from typing import Any
from urllib.parse import urljoin, urlparse

from src.config.settings import Settings
from src.extractors.structured_data import StructuredDataReader, offers_of
from src.models.product import (
    UNKNOWN_TITLE,
    UNKNOWN_VENDOR,
    ProductMetadata,
    is_absolute_http_url,
)
from src.scrapers.document import DocumentHandle, DomQuery, ElementSnapshot

logger = logging.getLogger("price_watch.metadata")

# (selector, attribute); None reads the element's text
Candidate = tuple[str, str | None]

TITLE_CANDIDATES: tuple[Candidate, ...] = (
    ('meta[property="og:title"]', "content"),
    ('meta[name="twitter:title"]', "content"),
    ("h1", None),
    ('[itemprop="name"]', None),
    ('[class*="product-title"]', None),
    ('[class*="productTitle"]', None),
    ('[id*="product-title"]', None),
    ('[id*="productTitle"]', None),
)

IMAGE_CANDIDATES: tuple[Candidate, ...] = (
    ('meta[property="og:image"]', "content"),
    ('meta[property="og:image:secure_url"]', "content"),
    ('meta[name="twitter:image"]', "content"),
    ('[itemprop="image"]', "src"),
    ('[itemprop="image"]', "content"),
    ('[itemprop="image"]', "href"),
    ('img[class*="product"]', "src"),
    ('img[class*="main"]', "src"),
    ('img[id*="product"]', "src"),
    ('img[id*="main"]', "src"),
)

CANONICAL_CANDIDATES: tuple[Candidate, ...] = (
    ('link[rel="canonical"]', "href"),
    ('meta[property="og:url"]', "content"),
)

BRAND_CANDIDATES: tuple[Candidate, ...] = (
    ('[itemprop="brand"] [itemprop="name"]', None),
    ('[itemprop="brand"]', "content"),
    ('[itemprop="brand"]', None),
    ('meta[property="product:brand"]', "content"),
    ("#bylineInfo", None),
)

COLOR_CANDIDATES: tuple[Candidate, ...] = (
    ('[itemprop="color"]', "content"),
    ('[itemprop="color"]', None),
    ('meta[property="product:color"]', "content"),
    ("#variation_color_name .selection", None),
)

SIZE_CANDIDATES: tuple[Candidate, ...] = (
    ('[itemprop="size"]', "content"),
    ('[itemprop="size"]', None),
    ('meta[property="product:size"]', "content"),
    ("#variation_size_name .selection", None),
)

AVAILABILITY_CANDIDATES: tuple[Candidate, ...] = (
    ('[itemprop="availability"]', "href"),
    ('[itemprop="availability"]', "content"),
    ('meta[property="product:availability"]', "content"),
    ('meta[property="og:availability"]', "content"),
)

OUT_OF_STOCK_MARKERS: tuple[str, ...] = (
    "#availability",
    "#outOfStock",
    '[class*="out-of-stock"]',
    '[class*="outOfStock"]',
    '[class*="sold-out"]',
    '[class*="soldOut"]',
    '[data-testid*="out-of-stock"]',
)

OUT_OF_STOCK_PHRASES: tuple[str, ...] = (
    "out of stock",
    "sold out",
    "currently unavailable",
    "no longer available",
)

# schema.org ItemAvailability values, compared without the IRI prefix
_UNAVAILABLE_TOKENS: tuple[str, ...] = (
    "outofstock", "soldout", "discontinued", "oos", "out of stock",
)

CAPACITY_RE = re.compile(r"(\d+)\s*(GB|TB|MB)\b", re.IGNORECASE)
_STORE_BYLINE_RE = re.compile(
    r"^(?:visit the\s+)?(.+?)(?:\s+store)?$", re.IGNORECASE
)
_BRAND_PREFIX_RE = re.compile(r"^brand:\s*", re.IGNORECASE)


def vendor_from_url(url: str) -> str:
    """``https://www.bestbuy.com/x`` -> ``Bestbuy``."""
    host = (urlparse(url).hostname or "").lower()
    host = host.removeprefix("www.")
    label = host.split(".")[0]
    if not label:
        return UNKNOWN_VENDOR
    return label[0].upper() + label[1:]


def normalize_capacity(text: str | None) -> str | None:
    """``"256 gb"`` -> ``"256GB"``; None when no capacity is present."""
    if not text:
        return None
    match = CAPACITY_RE.search(text)
    if not match:
        return None
    return f"{match.group(1)}{match.group(2).upper()}"


def clean_byline(text: str) -> str:
    """Strip Amazon's "Visit the X Store" / "Brand: X" decoration."""
    text = _BRAND_PREFIX_RE.sub("", text.strip())
    match = _STORE_BYLINE_RE.match(text)
    return match.group(1).strip() if match else text


def _named(value: Any) -> str | None:
    """JSON-LD value as a string, accepting ``{"name": ...}`` objects."""
    if isinstance(value, dict):
        value = value.get("name")
    if isinstance(value, list) and value:
        return _named(value[0])
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        text = str(value).strip()
        return text or None
    return None


class MetadataExtractor:
    """Reads descriptive product metadata; never raises."""

    def __init__(
        self,
        structured_data: StructuredDataReader | None = None,
        title_max_length: int = Settings.TITLE_MAX_LENGTH,
        min_image_size: int = Settings.MIN_IMAGE_SIZE,
    ) -> None:
        self.structured_data = structured_data or StructuredDataReader()
        self.title_max_length = title_max_length
        self.min_image_size = min_image_size

    # -- candidate helpers -------------------------------------------------

    async def _element(
        self, document: DocumentHandle, selector: str,
    ) -> ElementSnapshot | None:
        try:
            return await document.query_selector(selector)
        except Exception as exc:
            logger.debug("[metadata] %r failed: %s", selector, exc)
            return None

    async def _values(
        self, document: DocumentHandle, candidates: tuple[Candidate, ...],
    ) -> list[str]:
        """Non-empty candidate values, in priority order."""
        values: list[str] = []
        for selector, attribute in candidates:
            element = await self._element(document, selector)
            if element is None:
                continue
            raw = element.attr(attribute) if attribute else element.text
            if raw and raw.strip():
                values.append(raw.strip())
        return values

    async def _evaluate(self, document: DocumentHandle, query: DomQuery) -> Any:
        try:
            return await document.evaluate(query)
        except Exception as exc:
            logger.debug("[metadata] %s failed: %s", query.value, exc)
            return None

    async def _base_url(self, document: DocumentHandle) -> str:
        base = await self._evaluate(document, DomQuery.BASE_URL)
        return base if isinstance(base, str) and base else document.url

    # -- fields ------------------------------------------------------------

    async def title(self, document: DocumentHandle) -> str:
        values = await self._values(document, TITLE_CANDIDATES)
        document_title = await self._evaluate(document, DomQuery.DOCUMENT_TITLE)
        if isinstance(document_title, str) and document_title.strip():
            values.append(document_title.strip())
        for value in values:
            if len(value) <= self.title_max_length:
                return value
        return UNKNOWN_TITLE

    async def image_url(self, document: DocumentHandle) -> str | None:
        base = await self._base_url(document)
        values = await self._values(document, IMAGE_CANDIDATES)
        rendered = await self._evaluate(document, DomQuery.RENDERED_IMAGES)
        for image in rendered or []:
            if (
                image.get("src")
                and (image.get("width") or 0) > self.min_image_size
                and (image.get("height") or 0) > self.min_image_size
            ):
                values.append(str(image["src"]))
                break
        for value in values:
            absolute = urljoin(base, value)
            if is_absolute_http_url(absolute):
                return absolute
        return None

    async def canonical_url(self, document: DocumentHandle) -> str:
        base = await self._base_url(document)
        for value in await self._values(document, CANONICAL_CANDIDATES):
            absolute = urljoin(base, value)
            if is_absolute_http_url(absolute):
                return absolute
        return document.url

    async def _first(
        self, document: DocumentHandle, candidates: tuple[Candidate, ...],
    ) -> str | None:
        values = await self._values(document, candidates)
        return values[0] if values else None

    async def variants(
        self,
        document: DocumentHandle,
        products: list[dict[str, Any]],
        title: str,
    ) -> dict[str, str | None]:
        """Brand, color, size and capacity; structured data first."""
        found: dict[str, str | None] = {
            "brand": None, "color": None, "size": None, "capacity": None,
        }
        for item in products:
            found["brand"] = found["brand"] or _named(item.get("brand"))
            found["color"] = found["color"] or _named(item.get("color"))
            found["size"] = found["size"] or _named(item.get("size"))
            found["capacity"] = found["capacity"] or self._ld_capacity(item)

        if found["brand"] is None:
            brand = await self._first(document, BRAND_CANDIDATES)
            found["brand"] = clean_byline(brand) if brand else None
        if found["color"] is None:
            found["color"] = await self._first(document, COLOR_CANDIDATES)
        if found["size"] is None:
            found["size"] = await self._first(document, SIZE_CANDIDATES)
        if found["capacity"] is None and title != UNKNOWN_TITLE:
            found["capacity"] = normalize_capacity(title)
        return found

    @staticmethod
    def _ld_capacity(item: dict[str, Any]) -> str | None:
        properties = item.get("additionalProperty")
        if isinstance(properties, dict):
            properties = [properties]
        if not isinstance(properties, list):
            return None
        for prop in properties:
            if not isinstance(prop, dict):
                continue
            name = str(prop.get("name", "")).lower()
            if "capacity" in name or "storage" in name:
                value = _named(prop.get("value"))
                return normalize_capacity(value) or value
        return None

    async def in_stock(
        self, document: DocumentHandle, products: list[dict[str, Any]],
    ) -> bool:
        """False only on an explicit out-of-stock signal."""
        statuses = [
            str(offer.get("availability", "")).lower()
            for item in products
            for offer in offers_of(item)
            if offer.get("availability")
        ]
        if statuses:
            return not all(
                any(token in status for token in _UNAVAILABLE_TOKENS)
                for status in statuses
            )

        values = await self._values(document, AVAILABILITY_CANDIDATES)
        if values:
            value = values[0].lower().replace("_", "")
            return not any(token in value for token in _UNAVAILABLE_TOKENS)

        for selector in OUT_OF_STOCK_MARKERS:
            element = await self._element(document, selector)
            if element is None:
                continue
            text = element.text.lower()
            if any(phrase in text for phrase in OUT_OF_STOCK_PHRASES):
                return False
        return True

    async def _products(
        self, document: DocumentHandle,
    ) -> list[dict[str, Any]]:
        try:
            return await self.structured_data.product_items(document)
        except Exception as exc:
            logger.debug("[metadata] JSON-LD read failed: %s", exc)
            return []

    async def extract(self, document: DocumentHandle) -> ProductMetadata:
        title, image_url, canonical, products = await asyncio.gather(
            self.title(document),
            self.image_url(document),
            self.canonical_url(document),
            self._products(document),
        )
        variants, in_stock = await asyncio.gather(
            self.variants(document, products, title),
            self.in_stock(document, products),
        )
        metadata = ProductMetadata(
            url=canonical,
            title=title,
            image_url=image_url,
            vendor=vendor_from_url(canonical),
            brand=variants["brand"],
            color=variants["color"],
            capacity=variants["capacity"],
            size=variants["size"],
            in_stock=in_stock,
        )
        logger.debug(
            "[metadata] %s: title=%r vendor=%s in_stock=%s",
            document.url, metadata.title, metadata.vendor, metadata.in_stock,
        )
        return metadata
