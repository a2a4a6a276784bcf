# src/scrapers/soup_document.py

"""DocumentHandle over static HTML parsed with BeautifulSoup."""

from typing import Any
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from src.scrapers.document import (
    SNAPSHOT_TEXT_LIMIT,
    DomQuery,
    ElementSnapshot,
)


def _attribute_value(value: Any) -> str:
    # bs4 returns multi-valued attributes (class, rel) as lists
    if isinstance(value, list):
        return " ".join(str(v) for v in value)
    return str(value)


class SoupDocument:
    """Static snapshot of a page; nothing renders, so nothing waits."""

    def __init__(self, soup: BeautifulSoup, url: str) -> None:
        self._soup = soup
        self._url = url
        self._order: dict[int, int] = {
            id(tag): index
            for index, tag in enumerate(soup.find_all(True))
        }

    @classmethod
    def from_html(cls, html: str, url: str) -> "SoupDocument":
        return cls(BeautifulSoup(html, "lxml"), url)

    @property
    def url(self) -> str:
        return self._url

    def _snapshot(
        self, tag: Tag, limit: int | None = SNAPSHOT_TEXT_LIMIT,
    ) -> ElementSnapshot:
        text = " ".join(tag.get_text().split())
        return ElementSnapshot(
            handle=self._order.get(id(tag), -1),
            tag=tag.name,
            text=text[:limit],
            text_length=len(text),
            attributes={
                name: _attribute_value(value)
                for name, value in tag.attrs.items()
            },
        )

    async def wait_for_selector(
        self, selector: str, timeout: float,
    ) -> None:
        if self._soup.select_one(selector) is None:
            msg = f"{selector!r} not present in static document {self._url}"
            raise TimeoutError(msg)

    async def query_selector(
        self, selector: str,
    ) -> ElementSnapshot | None:
        tag = self._soup.select_one(selector)
        return self._snapshot(tag) if tag is not None else None

    async def query_selector_all(
        self, selector: str, full_text: bool = False,
    ) -> list[ElementSnapshot]:
        limit = None if full_text else SNAPSHOT_TEXT_LIMIT
        return [
            self._snapshot(tag, limit)
            for tag in self._soup.select(selector)
        ]

    async def evaluate(self, query: DomQuery) -> Any:
        if query is DomQuery.DOCUMENT_TITLE:
            title = self._soup.title
            return title.get_text(strip=True) if title else ""
        if query is DomQuery.BASE_URL:
            base = self._soup.find("base", href=True)
            if isinstance(base, Tag):
                return urljoin(self._url, str(base["href"]))
            return self._url
        if query is DomQuery.RENDERED_IMAGES:
            return [
                {
                    "src": str(img.get("src", "")),
                    "width": _dimension(img.get("width")),
                    "height": _dimension(img.get("height")),
                }
                for img in self._soup.find_all("img", src=True)
            ]
        raise ValueError(f"Unsupported query: {query!r}")


def _dimension(value: Any) -> int:
    """Declared img width/height; static HTML has no layout to measure."""
    try:
        return int(str(value).strip().removesuffix("px"))
    except (TypeError, ValueError):
        return 0
