# src/config/settings.py

"""Central configuration for the price_watch engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the price_watch engine."""

    # --- Extraction ---
    PRICE_CEILING: float = 10_000.0     # Inclusive upper sanity bound
    ROOT_WAIT_TIMEOUT: float = 10.0     # Seconds to wait for <body>
    SHORT_TEXT_THRESHOLD: int = 50      # Scorer ignores longer texts
    SCORING_POSITIVE_WEIGHTS: dict[str, int] = {
        "price": 5,
        "current": 4,
        "now": 4,
        "sale": 3,
        "final": 3,
        "retail": 2,
        "amount": 2,
    }
    SCORING_NEGATIVE_WEIGHTS: dict[str, int] = {
        "strike": -5,
        "was": -5,
        "list": -5,
        "original": -5,
        "msrp": -5,
        "compare": -3,
        "shipping": -3,
        "tax": -3,
    }
    CLEAN_FORMAT_BONUS: int = 3
    TITLE_MAX_LENGTH: int = 200
    MIN_IMAGE_SIZE: int = 200           # px, both dimensions

    # --- Page acquisition (browser) ---
    NAVIGATION_TIMEOUT: float = 30.0    # Seconds for page.goto
    SETTLE_DELAY: float = 2.0           # Seconds for client-side render
    HEADLESS: bool = os.getenv("PRICE_WATCH_HEADLESS", "1") != "0"
    USER_AGENT: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36"
    )
    VIEWPORT: dict[str, int] = {"width": 1366, "height": 900}
    BROWSER_ARGS: list[str] = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-blink-features=AutomationControlled",
    ]

    # --- Page acquisition (static HTTP) ---
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "sec-ch-ua": (
            '"Google Chrome";v="131", '
            '"Chromium";v="131", '
            '"Not_A Brand";v="24"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"macOS"',
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "sec-fetch-user": "?1",
        "Upgrade-Insecure-Requests": "1",
    }
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Price check policy ---
    MAX_RETRIES: int = 2                # Retries after the first attempt
    RETRY_BACKOFF: float = 5.0          # Fixed seconds between retries
    INTER_PRODUCT_DELAY: float = 2.0    # Politeness pause between products

    # --- Notifications ---
    WEBHOOK_URL: str | None = os.getenv("PRICE_WATCH_WEBHOOK_URL") or None
    WEBHOOK_TIMEOUT: int = 10

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = BASE_DIR / "src" / "config" / "selectors.json"
    DATA_DIR: Path = BASE_DIR / "data"
    LOGS_DIR: Path = BASE_DIR / "logs"
    PRICE_DB_PATH: Path = Path(
        os.getenv(
            "PRICE_WATCH_DB_PATH",
            str(BASE_DIR / "data" / "price_history.db"),
        )
    )
