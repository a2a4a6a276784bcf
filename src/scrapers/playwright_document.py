# src/scrapers/playwright_document.py

"""DocumentHandle backed by a live Playwright page."""

from typing import Any

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.scrapers.document import (
    SNAPSHOT_TEXT_LIMIT,
    DomQuery,
    ElementSnapshot,
)

# One round trip per query: index every element in document order,
# run the selector, and serialise the matches.
_SNAPSHOT_JS = """
([selector, all, limit]) => {
    const order = new Map();
    const every = document.getElementsByTagName('*');
    for (let i = 0; i < every.length; i++) order.set(every[i], i);
    const nodes = all
        ? Array.from(document.querySelectorAll(selector))
        : [document.querySelector(selector)].filter(Boolean);
    return nodes.map((el) => {
        const text = (el.textContent || '').replace(/\\s+/g, ' ').trim();
        const attributes = {};
        for (const a of el.attributes) attributes[a.name] = a.value;
        return {
            handle: order.get(el),
            tag: el.tagName.toLowerCase(),
            text: limit === null ? text : text.slice(0, limit),
            text_length: text.length,
            attributes,
        };
    });
}
"""

_QUERY_JS: dict[DomQuery, str] = {
    DomQuery.DOCUMENT_TITLE: "() => document.title || ''",
    DomQuery.BASE_URL: "() => document.baseURI",
    DomQuery.RENDERED_IMAGES: """
        () => Array.from(document.images).map((img) => ({
            src: img.currentSrc || img.src,
            width: img.naturalWidth || img.width,
            height: img.naturalHeight || img.height,
        }))
    """,
}


class PlaywrightDocument:
    """Wraps a loaded :class:`playwright.async_api.Page`."""

    def __init__(self, page: Page) -> None:
        self._page = page

    @property
    def url(self) -> str:
        return self._page.url

    async def wait_for_selector(
        self, selector: str, timeout: float,
    ) -> None:
        try:
            await self._page.wait_for_selector(
                selector, state="attached", timeout=timeout * 1000,
            )
        except PlaywrightTimeoutError as exc:
            msg = f"{selector!r} not attached within {timeout}s"
            raise TimeoutError(msg) from exc

    async def _snapshots(
        self, selector: str, all_matches: bool, limit: int | None,
    ) -> list[ElementSnapshot]:
        raw: list[dict[str, Any]] = await self._page.evaluate(
            _SNAPSHOT_JS, [selector, all_matches, limit],
        )
        return [
            ElementSnapshot(
                handle=int(item["handle"]),
                tag=str(item["tag"]),
                text=str(item["text"]),
                text_length=int(item["text_length"]),
                attributes=dict(item["attributes"]),
            )
            for item in raw
        ]

    async def query_selector(
        self, selector: str,
    ) -> ElementSnapshot | None:
        found = await self._snapshots(
            selector, all_matches=False, limit=SNAPSHOT_TEXT_LIMIT,
        )
        return found[0] if found else None

    async def query_selector_all(
        self, selector: str, full_text: bool = False,
    ) -> list[ElementSnapshot]:
        limit = None if full_text else SNAPSHOT_TEXT_LIMIT
        return await self._snapshots(
            selector, all_matches=True, limit=limit,
        )

    async def evaluate(self, query: DomQuery) -> Any:
        return await self._page.evaluate(_QUERY_JS[query])
