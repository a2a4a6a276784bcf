# src/scrapers/errors.py

"""Exceptions raised while scraping a tracked product."""

from src.models.extraction import (
    ExtractionFailure,
    FailureReason,
    Strategy,
)


class ScrapeError(Exception):
    """Base class for every failure to scrape one product URL."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url
        self.message = message


class PageAcquisitionError(ScrapeError):
    """Navigation, HTTP fetch or anti-bot challenge failed."""


class ExtractionError(ScrapeError):
    """The page loaded but no price could be determined."""

    def __init__(
        self,
        url: str,
        message: str,
        reason: FailureReason = FailureReason.NO_PRICE_FOUND,
        attempted: tuple[Strategy, ...] = (),
    ) -> None:
        super().__init__(url, message)
        self.reason = reason
        self.attempted = attempted


class PageTimeoutError(ExtractionError):
    """The document root never became available."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(url, message, reason=FailureReason.PAGE_TIMEOUT)


def error_for(failure: ExtractionFailure) -> ExtractionError:
    """Map an :class:`ExtractionFailure` onto the matching exception."""
    if failure.reason is FailureReason.PAGE_TIMEOUT:
        return PageTimeoutError(failure.url, failure.message)
    return ExtractionError(
        failure.url,
        failure.message,
        reason=failure.reason,
        attempted=failure.attempted,
    )
