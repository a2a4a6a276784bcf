# src/scrapers/static_scraper.py

"""Plain HTTP page acquisition for pages that render server-side."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.extractors.metadata_extractor import MetadataExtractor
from src.extractors.price_extractor import PriceExtractor
from src.scrapers.base_scraper import BaseScraper
from src.scrapers.errors import PageAcquisitionError
from src.scrapers.soup_document import SoupDocument


class StaticScraper(BaseScraper):
    """curl_cffi with browser TLS impersonation, cloudscraper fallback."""

    # Cloudflare challenge page markers (checked before keyword scan)
    _CF_CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "just a moment",
        "cf-turnstile",
        "cf_chl_opt",
    ]

    def __init__(
        self,
        request_timeout: int = Settings.REQUEST_TIMEOUT,
        price_extractor: PriceExtractor | None = None,
        metadata_extractor: MetadataExtractor | None = None,
    ) -> None:
        super().__init__("static", price_extractor, metadata_extractor)
        self.request_timeout = request_timeout
        self.session = curl_requests.Session(
            impersonate=Settings.IMPERSONATE_BROWSER
        )

    async def close(self) -> None:
        self.session.close()

    def _validate_response(self, text: str) -> bool:
        """Check for Cloudflare challenge pages and CAPTCHA indicators."""
        lower = text.lower()
        for marker in self._CF_CHALLENGE_MARKERS:
            if marker in lower:
                self.logger.warning(
                    "[%s] Cloudflare challenge detected (marker: '%s')",
                    self.source_name,
                    marker,
                )
                return False

        # Generic CAPTCHA keyword scan, short pages only
        has_body_content = "<body" in lower and len(text) > 5000
        if not has_body_content:
            for keyword in Settings.CAPTCHA_KEYWORDS:
                if keyword in lower:
                    self.logger.warning(
                        "[%s] CAPTCHA keyword '%s' detected",
                        self.source_name,
                        keyword,
                    )
                    return False
        return True

    def _fetch_html(self, url: str) -> str:
        """GET *url*, falling back to cloudscraper on failure."""
        headers: dict[str, str] = dict(Settings.DEFAULT_HEADERS)

        # Primary: curl_cffi (browser-impersonating TLS)
        try:
            resp = self.session.get(
                url,
                headers=headers,
                timeout=self.request_timeout,
            )
            if resp.status_code == 200 and self._validate_response(resp.text):
                return resp.text
            self.logger.warning(
                "[%s] HTTP %d from curl_cffi for %s",
                self.source_name,
                resp.status_code,
                url,
            )
        except Exception as exc:
            self.logger.warning(
                "[%s] curl_cffi request error for %s: %s",
                self.source_name,
                url,
                exc,
                exc_info=True,
            )

        # Fallback: cloudscraper (JS challenge solver)
        self.logger.info(
            "[%s] Falling back to cloudscraper for %s",
            self.source_name,
            url,
        )
        try:
            scraper: Any = cloudscraper.create_scraper()
            fallback_resp: Any = scraper.get(
                url,
                headers=headers,
                timeout=self.request_timeout,
            )
            text = str(fallback_resp.text)
            if fallback_resp.status_code == 200 and self._validate_response(text):
                return text
            message = f"HTTP {fallback_resp.status_code} from cloudscraper"
        except Exception as exc:
            self.logger.error(
                "[%s] cloudscraper fallback also failed: %s",
                self.source_name,
                exc,
                exc_info=True,
            )
            message = f"cloudscraper fallback failed: {exc}"
        raise PageAcquisitionError(url, message)

    @asynccontextmanager
    async def _open_document(self, url: str) -> AsyncIterator[SoupDocument]:
        html = await asyncio.to_thread(self._fetch_html, url)
        yield SoupDocument.from_html(html, url)
