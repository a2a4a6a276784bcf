# tests/test_structured_data.py

"""Tests for the JSON-LD structured data reader."""

import json
import unittest
from typing import Any

from src.extractors.structured_data import StructuredDataReader, is_product
from src.scrapers.soup_document import SoupDocument

URL = "https://shop.example.com/p/1"


def _page(*blocks: Any) -> SoupDocument:
    scripts = "".join(
        '<script type="application/ld+json">%s</script>'
        % (b if isinstance(b, str) else json.dumps(b))
        for b in blocks
    )
    return SoupDocument.from_html(
        f"<html><head>{scripts}</head><body></body></html>", URL,
    )


class TestIsProduct(unittest.TestCase):
    """Tests for is_product()."""

    def test_type_spellings(self) -> None:
        for spelling in (
            "Product",
            "http://schema.org/Product",
            "https://schema.org/Product",
            "schema:Product",
        ):
            with self.subTest(spelling=spelling):
                self.assertTrue(is_product({"@type": spelling}))

    def test_type_list(self) -> None:
        self.assertTrue(is_product({"@type": ["Thing", "Product"]}))

    def test_other_types(self) -> None:
        self.assertFalse(is_product({"@type": "BreadcrumbList"}))
        self.assertFalse(is_product({"name": "no type"}))


class TestStructuredDataReader(unittest.IsolatedAsyncioTestCase):
    """Tests for StructuredDataReader.extract()."""

    def setUp(self) -> None:
        self.reader = StructuredDataReader()

    async def test_offer_price_string(self) -> None:
        doc = _page({"@type": "Product", "offers": {"price": "49.99"}})
        self.assertEqual(await self.reader.extract(doc), 49.99)

    async def test_numeric_price_on_item(self) -> None:
        doc = _page({"@type": "Product", "price": 15})
        self.assertEqual(await self.reader.extract(doc), 15.0)

    async def test_highest_offer_wins(self) -> None:
        doc = _page({
            "@type": "Product",
            "offers": [{"price": "4.99"}, {"price": "129.00"}, {"price": 99}],
        })
        self.assertEqual(await self.reader.extract(doc), 129.0)

    async def test_first_product_block_wins(self) -> None:
        """A related item in a later block does not override the page's."""
        doc = _page(
            {"@type": "Product", "offers": {"price": "49.99"}},
            {"@type": "Product", "offers": {"price": "199.99"}},
        )
        self.assertEqual(await self.reader.extract(doc), 49.99)

    async def test_product_without_price_skipped(self) -> None:
        doc = _page(
            {"@type": "Product", "name": "Accessory"},
            {"@type": "Product", "offers": {"price": "30.00"}},
        )
        self.assertEqual(await self.reader.extract(doc), 30.0)

    async def test_offers_preferred_over_direct_price(self) -> None:
        doc = _page({
            "@type": "Product",
            "price": "250.00",
            "offers": [{"price": "89.00"}, {"price": "99.00"}],
        })
        self.assertEqual(await self.reader.extract(doc), 99.0)

    async def test_direct_price_when_offers_unusable(self) -> None:
        doc = _page({
            "@type": "Product",
            "price": "250.00",
            "offers": {"price": "call for price"},
        })
        self.assertEqual(await self.reader.extract(doc), 250.0)

    async def test_graph_container(self) -> None:
        doc = _page({
            "@context": "https://schema.org",
            "@graph": [
                {"@type": "WebPage"},
                {"@type": "Product", "offers": {"price": "1,299.00"}},
            ],
        })
        self.assertEqual(await self.reader.extract(doc), 1299.0)

    async def test_array_root(self) -> None:
        doc = _page([
            {"@type": "Organization"},
            {"@type": "Product", "offers": {"price": "12.00"}},
        ])
        self.assertEqual(await self.reader.extract(doc), 12.0)

    async def test_invalid_block_skipped(self) -> None:
        """A broken block does not hide a valid one after it."""
        doc = _page(
            "{not json",
            {"@type": "Product", "offers": {"price": "8.50"}},
        )
        self.assertEqual(await self.reader.extract(doc), 8.5)

    async def test_non_positive_and_junk_prices_ignored(self) -> None:
        doc = _page({
            "@type": "Product",
            "offers": [
                {"price": "0"},
                {"price": "-5"},
                {"price": "free"},
                {"price": True},
                {"price": "NaN"},
            ],
        })
        self.assertIsNone(await self.reader.extract(doc))

    async def test_non_product_ignored(self) -> None:
        doc = _page({"@type": "Offer", "price": "10.00"})
        self.assertIsNone(await self.reader.extract(doc))

    async def test_no_blocks(self) -> None:
        self.assertIsNone(await self.reader.extract(_page()))

    async def test_product_items_exposed(self) -> None:
        doc = _page({"@type": "Product", "brand": {"name": "Acme"}})
        items = await self.reader.product_items(doc)
        self.assertEqual(items[0]["brand"], {"name": "Acme"})


if __name__ == "__main__":
    unittest.main()
