# tests/test_product_model.py

"""Tests for the product, result and extraction models."""

import unittest
from datetime import datetime

from src.models.extraction import (
    ExtractionFailure,
    ExtractionSuccess,
    FailureReason,
    Strategy,
)
from src.models.product import (
    UNKNOWN_TITLE,
    UNKNOWN_VENDOR,
    ProductMetadata,
    TrackedProduct,
    is_absolute_http_url,
)
from src.models.scrape_result import ScrapeResult
from src.scrapers.errors import (
    ExtractionError,
    PageTimeoutError,
    ScrapeError,
    error_for,
)

URL = "https://shop.example.com/p/1"


class TestTrackedProduct(unittest.TestCase):
    """TrackedProduct dataclass unit tests."""

    def test_defaults(self) -> None:
        product = TrackedProduct(id=1, url=URL)
        self.assertIsNone(product.current_price)
        self.assertIsNone(product.target_price)
        self.assertEqual(product.vendor, "")
        self.assertIsNone(product.recipient)

    def test_rejects_relative_url(self) -> None:
        with self.assertRaises(ValueError):
            TrackedProduct(id=1, url="/p/1")

    def test_rejects_non_http_scheme(self) -> None:
        with self.assertRaises(ValueError):
            TrackedProduct(id=1, url="ftp://shop.example.com/p/1")

    def test_is_absolute_http_url(self) -> None:
        self.assertTrue(is_absolute_http_url("http://x.example.com"))
        self.assertFalse(is_absolute_http_url("https://"))
        self.assertFalse(is_absolute_http_url("javascript:void(0)"))


class TestProductMetadata(unittest.TestCase):
    """Defaults for missing metadata."""

    def test_defaults(self) -> None:
        meta = ProductMetadata(url=URL)
        self.assertEqual(meta.title, UNKNOWN_TITLE)
        self.assertEqual(meta.vendor, UNKNOWN_VENDOR)
        self.assertIsNone(meta.image_url)
        self.assertTrue(meta.in_stock)


class TestScrapeResult(unittest.TestCase):
    """Tests for ScrapeResult.price_dropped."""

    def _result(self, price: float, target: float | None) -> ScrapeResult:
        return ScrapeResult(
            product_id=1,
            url=URL,
            price=price,
            strategy=Strategy.SCORING,
            metadata=ProductMetadata(url=URL),
            target_price=target,
            scraped_at=datetime(2026, 1, 1),
        )

    def test_price_at_target_counts_as_drop(self) -> None:
        self.assertTrue(self._result(50.0, 50.0).price_dropped)

    def test_price_above_target(self) -> None:
        self.assertFalse(self._result(50.01, 50.0).price_dropped)

    def test_no_target(self) -> None:
        self.assertFalse(self._result(1.0, None).price_dropped)


class TestExtractionOutcome(unittest.TestCase):
    """Tests for the success/failure value objects and error mapping."""

    def test_success_is_ok(self) -> None:
        outcome = ExtractionSuccess(9.99, Strategy.STRUCTURED_DATA)
        self.assertTrue(outcome.ok)

    def test_failure_message_names_strategies(self) -> None:
        failure = ExtractionFailure(
            FailureReason.NO_PRICE_FOUND,
            URL,
            (Strategy.STRUCTURED_DATA, Strategy.SELECTOR_MATCH),
        )
        self.assertFalse(failure.ok)
        self.assertIn(URL, failure.message)
        self.assertIn("structured_data, selector_match", failure.message)

    def test_timeout_message(self) -> None:
        failure = ExtractionFailure(FailureReason.PAGE_TIMEOUT, URL)
        self.assertEqual(failure.message, f"Page body never loaded: {URL}")

    def test_error_for_timeout(self) -> None:
        error = error_for(ExtractionFailure(FailureReason.PAGE_TIMEOUT, URL))
        self.assertIsInstance(error, PageTimeoutError)
        self.assertEqual(error.reason, FailureReason.PAGE_TIMEOUT)
        self.assertEqual(error.url, URL)

    def test_error_for_no_price(self) -> None:
        attempted = (Strategy.STRUCTURED_DATA,)
        error = error_for(ExtractionFailure(
            FailureReason.NO_PRICE_FOUND, URL, attempted,
        ))
        self.assertIs(type(error), ExtractionError)
        self.assertIsInstance(error, ScrapeError)
        self.assertEqual(error.attempted, attempted)


if __name__ == "__main__":
    unittest.main()
