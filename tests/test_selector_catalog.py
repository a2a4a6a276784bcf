# tests/test_selector_catalog.py

"""Tests for the selector catalog loader."""

import json
import tempfile
import unittest
from pathlib import Path

from src.config.selector_catalog import (
    Polarity,
    SelectorRule,
    load_selector_catalog,
    parse_catalog,
)

_RAW = {
    "include": ['[itemprop="price"]', "[class*=\"price\"]", "  "],
    "exclude": ["del", '[class*="was"]'],
    "exclude_keywords": ["MSRP", "shipping"],
    "vendors": {
        "amazon": {
            "hosts": ["amazon.", "AMZN."],
            "include": [".a-price .a-offscreen"],
        },
    },
}


class TestParseCatalog(unittest.TestCase):
    """Tests for parse_catalog()."""

    def setUp(self) -> None:
        self.catalog = parse_catalog(_RAW)

    def test_include_order_preserved_and_blanks_dropped(self) -> None:
        self.assertEqual(
            [r.pattern for r in self.catalog.include],
            ['[itemprop="price"]', '[class*="price"]'],
        )

    def test_polarity_assigned(self) -> None:
        self.assertTrue(
            all(r.polarity is Polarity.INCLUDE for r in self.catalog.include)
        )
        self.assertIn(
            SelectorRule("del", Polarity.EXCLUDE), self.catalog.exclude,
        )

    def test_keywords_lowercased(self) -> None:
        self.assertEqual(self.catalog.exclude_keywords, ("msrp", "shipping"))

    def test_vendor_rules_for_matching_host(self) -> None:
        rules = self.catalog.vendor_rules_for(
            "https://www.amazon.com/dp/B0TEST"
        )
        self.assertEqual([r.pattern for r in rules], [".a-price .a-offscreen"])

    def test_vendor_host_match_is_case_insensitive(self) -> None:
        self.assertTrue(self.catalog.vendor_rules_for("https://AMZN.to/x"))

    def test_vendor_rules_gated_by_host(self) -> None:
        """Marketplace selectors never apply to unrelated stores."""
        self.assertEqual(
            self.catalog.vendor_rules_for("https://shop.example.com/p/1"), (),
        )

    def test_include_rules_for_puts_vendor_first(self) -> None:
        rules = self.catalog.include_rules_for("https://amazon.de/dp/X")
        self.assertEqual(rules[0].pattern, ".a-price .a-offscreen")
        self.assertEqual(rules[1:], self.catalog.include)

    def test_catalog_is_immutable(self) -> None:
        with self.assertRaises(AttributeError):
            self.catalog.include = ()  # type: ignore[misc]


class TestLoadSelectorCatalog(unittest.TestCase):
    """Tests for load_selector_catalog()."""

    def test_bundled_catalog_loads(self) -> None:
        catalog = load_selector_catalog()
        self.assertEqual(catalog.include[0].pattern, '[itemprop="price"]')
        self.assertIn("warranty", catalog.exclude_keywords)
        self.assertEqual(
            {v.name for v in catalog.vendors},
            {"amazon", "walmart", "bestbuy", "target", "ebay"},
        )

    def test_bundled_catalog_excludes_strikethrough(self) -> None:
        patterns = {r.pattern for r in load_selector_catalog().exclude}
        for tag in ("del", "s", "strike"):
            with self.subTest(tag=tag):
                self.assertIn(tag, patterns)

    def test_custom_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "selectors.json"
            path.write_text(json.dumps(_RAW), encoding="utf-8")
            catalog = load_selector_catalog(path)
        self.assertEqual(len(catalog.include), 2)


if __name__ == "__main__":
    unittest.main()
