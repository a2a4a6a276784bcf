# src/models/product.py

"""Tracked product and scraped metadata models."""

from dataclasses import dataclass
from urllib.parse import urlparse

UNKNOWN_TITLE = "Unknown Product"
UNKNOWN_VENDOR = "Unknown"


def is_absolute_http_url(url: str) -> bool:
    """Return True for an absolute ``http``/``https`` URL with a host."""
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass
class TrackedProduct:
    """A product whose price is checked on every run."""

    id: int
    url: str
    current_price: float | None = None
    target_price: float | None = None
    vendor: str = ""
    title: str = ""
    recipient: str | None = None

    def __post_init__(self) -> None:
        if not is_absolute_http_url(self.url):
            msg = f"Tracked product URL must be absolute http(s): {self.url!r}"
            raise ValueError(msg)


@dataclass
class ProductMetadata:
    """Title, image, vendor and variant attributes read from a page."""

    url: str
    title: str = UNKNOWN_TITLE
    image_url: str | None = None
    vendor: str = UNKNOWN_VENDOR
    brand: str | None = None
    color: str | None = None
    capacity: str | None = None
    size: str | None = None
    in_stock: bool = True
