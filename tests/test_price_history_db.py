# tests/test_price_history_db.py

"""Tests for the SQLite price history store."""

import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from src.models.price_record import PriceRecord
from src.models.product import ProductMetadata
from src.storage.price_history_db import (
    PriceHistoryDB,
    normalize_url,
)


class TestNormalizeUrl(unittest.TestCase):
    """Tests for URL normalization logic."""

    def test_strips_tracking_params(self) -> None:
        """Amazon tracking params should be removed."""
        raw = (
            "https://www.amazon.ae/Product/dp/B08ZW875PR"
            "/ref=sr_1_243?dib=abc&qid=123&sr=8-5&keywords=x"
        )
        result = normalize_url(raw)
        self.assertIn("/dp/B08ZW875PR", result)
        self.assertNotIn("ref=", result)
        self.assertNotIn("dib=", result)
        self.assertNotIn("qid=", result)
        self.assertNotIn("sr=", result)
        self.assertNotIn("keywords=", result)

    def test_strips_campaign_params(self) -> None:
        url = "https://shop.example.com/p/1?utm_source=mail&gclid=x&id=5"
        self.assertEqual(
            normalize_url(url), "https://shop.example.com/p/1?id=5",
        )

    def test_preserves_product_path(self) -> None:
        """The core product path should survive normalization."""
        url = "https://www.amazon.ae/Product-Name/dp/B001234"
        self.assertEqual(normalize_url(url), url)

    def test_strips_fragment(self) -> None:
        """URL fragments should be dropped."""
        url = "https://example.com/product#section"
        self.assertNotIn("#", normalize_url(url))

    def test_empty_url(self) -> None:
        """Empty string should normalize cleanly."""
        self.assertEqual(normalize_url(""), "")

    def test_preserves_non_tracking_params(self) -> None:
        """Unknown params should be preserved."""
        url = "https://example.com/product?color=red&size=L"
        result = normalize_url(url)
        self.assertIn("color=red", result)
        self.assertIn("size=L", result)


class TestPriceHistoryDB(unittest.TestCase):
    """Tests for the PriceHistoryDB class."""

    def setUp(self) -> None:
        """Create a fresh temp DB for each test."""
        self.tmp_dir = tempfile.mkdtemp()
        self.db_path = Path(self.tmp_dir) / "test.db"
        self.db = PriceHistoryDB(db_path=self.db_path)

    def tearDown(self) -> None:
        """Close the database."""
        self.db.close()

    def _record(self, product_id: int, price: float, day: int) -> None:
        self.db.record_price(PriceRecord(
            product_id=product_id,
            price=price,
            in_stock=True,
            recorded_at=datetime(2026, 1, day),
        ))

    # ── Tracked products ─────────────────────────────────

    def test_add_product_normalizes_url(self) -> None:
        product = self.db.add_product(
            "https://shop.example.com/p/1?utm_source=x#reviews", 25.0,
        )
        self.assertEqual(product.url, "https://shop.example.com/p/1")
        self.assertEqual(product.target_price, 25.0)
        self.assertIsNone(product.current_price)

    def test_add_product_rejects_relative_url(self) -> None:
        with self.assertRaises(ValueError):
            self.db.add_product("/p/1")
        self.assertEqual(self.db.get_tracked_products(), [])

    def test_add_existing_url_updates_target(self) -> None:
        first = self.db.add_product("https://shop.example.com/p/1", 25.0,
                                    recipient="a@example.com")
        self.db.set_alert_triggered(first.id)
        second = self.db.add_product("https://shop.example.com/p/1", 20.0)
        self.assertEqual(first.id, second.id)
        self.assertEqual(second.target_price, 20.0)
        self.assertEqual(second.recipient, "a@example.com")
        self.assertFalse(self.db.is_alert_triggered(first.id))
        self.assertEqual(len(self.db.get_tracked_products()), 1)

    def test_get_tracked_products_ordered(self) -> None:
        a = self.db.add_product("https://a.example.com/p")
        b = self.db.add_product("https://b.example.com/p")
        ids = [p.id for p in self.db.get_tracked_products()]
        self.assertEqual(ids, [a.id, b.id])

    def test_get_product_missing(self) -> None:
        self.assertIsNone(self.db.get_product(404))
        self.assertIsNone(self.db.get_status(404))

    def test_remove_product_drops_history(self) -> None:
        product = self.db.add_product("https://shop.example.com/p/1")
        self._record(product.id, 10.0, 1)
        self.assertTrue(self.db.remove_product(product.id))
        self.assertFalse(self.db.remove_product(product.id))
        self.assertEqual(self.db.get_price_history(product.id), [])

    # ── Recording ────────────────────────────────────────

    def test_update_after_scrape_stores_metadata(self) -> None:
        product = self.db.add_product("https://shop.example.com/p/1")
        self.db.record_failure(product.id, "blocked")
        metadata = ProductMetadata(
            url=product.url,
            title="Phone X",
            vendor="Shop",
            brand="Acme",
            capacity="256GB",
            in_stock=False,
        )
        self.db.update_after_scrape(
            product.id, 499.0, metadata, datetime(2026, 3, 1, 12, 0),
        )
        stored = self.db.get_product(product.id)
        assert stored is not None
        self.assertEqual(stored.current_price, 499.0)
        self.assertEqual(stored.title, "Phone X")
        self.assertEqual(stored.vendor, "Shop")
        status = self.db.get_status(product.id)
        assert status is not None
        self.assertIsNone(status["last_error"])
        self.assertFalse(status["in_stock"])
        self.assertEqual(status["brand"], "Acme")
        self.assertEqual(status["capacity"], "256GB")
        self.assertEqual(status["last_checked"], "2026-03-01T12:00:00")

    def test_record_failure_keeps_price(self) -> None:
        product = self.db.add_product("https://shop.example.com/p/1")
        self.db.update_after_scrape(
            product.id, 10.0, ProductMetadata(url=product.url),
        )
        self.db.record_failure(product.id, "timeout")
        stored = self.db.get_product(product.id)
        assert stored is not None
        self.assertEqual(stored.current_price, 10.0)
        status = self.db.get_status(product.id)
        assert status is not None
        self.assertEqual(status["last_error"], "timeout")

    def test_price_history_oldest_first(self) -> None:
        product = self.db.add_product("https://shop.example.com/p/1")
        self._record(product.id, 90.0, 2)
        self._record(product.id, 100.0, 1)
        history = self.db.get_price_history(product.id)
        self.assertEqual([r.price for r in history], [100.0, 90.0])
        self.assertEqual(history[0].recorded_at, datetime(2026, 1, 1))

    # ── Alerts ───────────────────────────────────────────

    def test_alert_flag_round_trip(self) -> None:
        product = self.db.add_product("https://shop.example.com/p/1")
        self.assertFalse(self.db.is_alert_triggered(product.id))
        self.db.set_alert_triggered(product.id)
        self.assertTrue(self.db.is_alert_triggered(product.id))
        self.db.set_alert_triggered(product.id, False)
        self.assertFalse(self.db.is_alert_triggered(product.id))

    def test_reset_alerts_counts_cleared(self) -> None:
        a = self.db.add_product("https://a.example.com/p")
        self.db.add_product("https://b.example.com/p")
        self.db.set_alert_triggered(a.id)
        self.assertEqual(self.db.reset_alerts(), 1)
        self.assertFalse(self.db.is_alert_triggered(a.id))

    # ── Trend summary ────────────────────────────────────

    def test_trend_summary(self) -> None:
        product = self.db.add_product("https://shop.example.com/p/1")
        self._record(product.id, 100.0, 1)
        self._record(product.id, 90.0, 2)
        self._record(product.id, 110.0, 3)
        summary = self.db.get_trend_summary(product.id)
        assert summary is not None
        self.assertEqual(summary["min"], 90.0)
        self.assertEqual(summary["max"], 110.0)
        self.assertEqual(summary["avg"], 100.0)
        self.assertEqual(summary["count"], 3)
        self.assertEqual(summary["latest"], 110.0)

    def test_trend_summary_no_history(self) -> None:
        product = self.db.add_product("https://shop.example.com/p/1")
        self.assertIsNone(self.db.get_trend_summary(product.id))


if __name__ == "__main__":
    unittest.main()
