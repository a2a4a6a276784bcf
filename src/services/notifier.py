# src/services/notifier.py

"""Price-drop notification channels."""

import asyncio
import logging
from typing import Protocol

from curl_cffi import requests as curl_requests

from src.config.settings import Settings

logger = logging.getLogger("price_watch.notifier")


class Notifier(Protocol):
    """Anything that can tell a recipient about a price drop."""

    async def notify(
        self,
        recipient: str | None,
        product_title: str,
        new_price: float,
        product_url: str,
    ) -> None: ...


class LogNotifier:
    """Writes price drops to the ``price_watch.notifier`` log."""

    async def notify(
        self,
        recipient: str | None,
        product_title: str,
        new_price: float,
        product_url: str,
    ) -> None:
        logger.warning(
            "PRICE DROP for %s: %s is now $%.2f (%s)",
            recipient or "<no recipient>",
            product_title,
            new_price,
            product_url,
        )


class WebhookNotifier:
    """POSTs a JSON payload to a webhook (Slack/Discord/ntfy style)."""

    def __init__(
        self,
        webhook_url: str,
        timeout: int = Settings.WEBHOOK_TIMEOUT,
    ) -> None:
        self.webhook_url = webhook_url
        self.timeout = timeout

    def _post(self, payload: dict[str, object]) -> None:
        resp = curl_requests.post(
            self.webhook_url, json=payload, timeout=self.timeout,
        )
        if resp.status_code >= 400:
            raise RuntimeError(
                f"Webhook returned HTTP {resp.status_code}"
            )

    async def notify(
        self,
        recipient: str | None,
        product_title: str,
        new_price: float,
        product_url: str,
    ) -> None:
        payload: dict[str, object] = {
            "recipient": recipient,
            "title": product_title,
            "price": new_price,
            "url": product_url,
            "text": (
                f"Price drop: {product_title} is now "
                f"${new_price:.2f} {product_url}"
            ),
        }
        await asyncio.to_thread(self._post, payload)
        logger.info(
            "Webhook notified for %s at $%.2f", product_url, new_price,
        )


def build_notifier(webhook_url: str | None = None) -> Notifier:
    """Webhook notifier when a URL is configured, else the log notifier."""
    url = webhook_url or Settings.WEBHOOK_URL
    if url:
        return WebhookNotifier(url)
    return LogNotifier()
