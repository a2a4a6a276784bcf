# src/config/selector_catalog.py

"""Immutable selector catalog loaded from ``selectors.json``.

The catalog is read once per process and handed to extractors at
construction time; nothing mutates it afterwards, so concurrent scrapes
can share one instance.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from functools import cache
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from src.config.settings import Settings

logger = logging.getLogger("price_watch.selectors")


class Polarity(str, Enum):
    """Whether a selector marks likely-price or likely-not-price elements."""

    INCLUDE = "include"
    EXCLUDE = "exclude"


@dataclass(frozen=True)
class SelectorRule:
    """A single CSS pattern with its polarity."""

    pattern: str
    polarity: Polarity


@dataclass(frozen=True)
class VendorRules:
    """Selectors biased towards one marketplace's DOM conventions."""

    name: str
    hosts: tuple[str, ...]
    rules: tuple[SelectorRule, ...]

    def matches_host(self, host: str) -> bool:
        """Return True if *host* contains any of this vendor's fragments."""
        host = host.lower()
        return any(fragment in host for fragment in self.hosts)


@dataclass(frozen=True)
class SelectorCatalog:
    """Ordered include/exclude selectors plus vendor-biased lists."""

    include: tuple[SelectorRule, ...]
    exclude: tuple[SelectorRule, ...]
    exclude_keywords: tuple[str, ...]
    vendors: tuple[VendorRules, ...] = ()

    def vendor_rules_for(self, url: str) -> tuple[SelectorRule, ...]:
        """Return the vendor-biased rules whose hosts match *url*."""
        host = urlparse(url).hostname or ""
        if not host:
            return ()
        rules: list[SelectorRule] = []
        for vendor in self.vendors:
            if vendor.matches_host(host):
                rules.extend(vendor.rules)
        return tuple(rules)

    def include_rules_for(self, url: str) -> tuple[SelectorRule, ...]:
        """Vendor-biased rules first, then the generic catalog."""
        return self.vendor_rules_for(url) + self.include


def _rules(
    patterns: list[str], polarity: Polarity,
) -> tuple[SelectorRule, ...]:
    return tuple(
        SelectorRule(pattern=p, polarity=polarity)
        for p in patterns
        if p.strip()
    )


def parse_catalog(raw: dict[str, Any]) -> SelectorCatalog:
    """Build a :class:`SelectorCatalog` from its JSON representation."""
    vendors: list[VendorRules] = []
    vendor_map: dict[str, Any] = raw.get("vendors", {})
    for name, spec in vendor_map.items():
        vendors.append(VendorRules(
            name=name,
            hosts=tuple(h.lower() for h in spec.get("hosts", [])),
            rules=_rules(spec.get("include", []), Polarity.INCLUDE),
        ))
    return SelectorCatalog(
        include=_rules(raw.get("include", []), Polarity.INCLUDE),
        exclude=_rules(raw.get("exclude", []), Polarity.EXCLUDE),
        exclude_keywords=tuple(
            k.lower() for k in raw.get("exclude_keywords", [])
        ),
        vendors=tuple(vendors),
    )


@cache
def load_selector_catalog(path: Path | None = None) -> SelectorCatalog:
    """Load and cache the selector catalog from disk."""
    catalog_path = path or Settings.SELECTORS_PATH
    with open(catalog_path, encoding="utf-8") as f:
        raw: dict[str, Any] = json.load(f)
    catalog = parse_catalog(raw)
    logger.debug(
        "Loaded selector catalog from %s: %d include, %d exclude, "
        "%d vendors",
        catalog_path,
        len(catalog.include),
        len(catalog.exclude),
        len(catalog.vendors),
    )
    return catalog
