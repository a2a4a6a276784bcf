# src/scrapers/document.py

"""Backend-neutral view of a loaded product page.

Extractors only ever talk to a :class:`DocumentHandle`.  Element
queries return :class:`ElementSnapshot` values rather than live nodes,
so results can be compared and cached without holding a browser
reference.  ``handle`` is the element's index in document order over
every element, which makes snapshots from different queries against the
same document directly comparable.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

# Long containers are truncated; ``text_length`` keeps the real size
SNAPSHOT_TEXT_LIMIT = 1000


class DomQuery(str, Enum):
    """Fixed page-level facts a document can report."""

    DOCUMENT_TITLE = "document_title"
    BASE_URL = "base_url"
    RENDERED_IMAGES = "rendered_images"


@dataclass(frozen=True)
class ElementSnapshot:
    """Immutable copy of one element's tag, text and attributes."""

    handle: int
    tag: str
    text: str
    text_length: int
    attributes: dict[str, str] = field(default_factory=dict, hash=False)

    @property
    def class_name(self) -> str:
        return self.attributes.get("class", "")

    @property
    def element_id(self) -> str:
        return self.attributes.get("id", "")

    def attr(self, name: str) -> str | None:
        return self.attributes.get(name)


@runtime_checkable
class DocumentHandle(Protocol):
    """Read-only, asynchronous access to a loaded page."""

    @property
    def url(self) -> str: ...

    async def wait_for_selector(
        self, selector: str, timeout: float,
    ) -> None:
        """Block until *selector* matches; raise ``TimeoutError`` if not."""
        ...

    async def query_selector(
        self, selector: str,
    ) -> ElementSnapshot | None: ...

    async def query_selector_all(
        self, selector: str, full_text: bool = False,
    ) -> list[ElementSnapshot]:
        """All matches in document order; *full_text* skips truncation."""
        ...

    async def evaluate(self, query: DomQuery) -> Any: ...
