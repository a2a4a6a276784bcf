# src/storage/price_history_db.py

"""SQLite-backed store for tracked products and their price history."""

import logging
import re
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from src.config.settings import Settings
from src.models.price_record import PriceRecord
from src.models.product import ProductMetadata, TrackedProduct

logger = logging.getLogger("price_watch.price_history")

# Marketplace tracking params that vary per session
_TRACKING_PARAMS: frozenset[str] = frozenset({
    "ref", "ref_", "dib", "dib_tag", "qid", "sr", "spc",
    "sp_csd", "xpid", "aref", "sp_cr", "psc",
    "keywords", "pd_rd_i", "pd_rd_r", "pd_rd_w",
    "pd_rd_wg", "pf_rd_i", "pf_rd_m", "pf_rd_p",
    "pf_rd_r", "pf_rd_s", "pf_rd_t", "th",
    "utm_source", "utm_medium", "utm_campaign",
    "utm_term", "utm_content", "gclid", "fbclid",
})

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS tracked_products (
    id                 INTEGER PRIMARY KEY AUTOINCREMENT,
    url                TEXT    NOT NULL UNIQUE,
    title              TEXT    NOT NULL DEFAULT '',
    image_url          TEXT,
    vendor             TEXT    NOT NULL DEFAULT '',
    brand              TEXT,
    color              TEXT,
    capacity           TEXT,
    size               TEXT,
    current_price      REAL,
    target_price       REAL,
    recipient          TEXT,
    in_stock           INTEGER NOT NULL DEFAULT 1,
    alert_triggered_at TEXT,
    last_error         TEXT,
    last_checked       TEXT,
    created_at         TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS price_history (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    product_id  INTEGER NOT NULL
                REFERENCES tracked_products(id) ON DELETE CASCADE,
    price       REAL    NOT NULL,
    in_stock    INTEGER NOT NULL DEFAULT 1,
    recorded_at TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_history_product_date
    ON price_history(product_id, recorded_at);
"""

_PRODUCT_COLUMNS = (
    "id, url, current_price, target_price, vendor, title, recipient"
)


def normalize_url(raw_url: str) -> str:
    """Strip tracking/session query params to get a stable product URL."""
    parsed = urlparse(raw_url)

    # Strip Amazon path-based tracking (e.g. /ref=sr_1_243)
    path = re.sub(r"/ref=[^/]*", "", parsed.path)

    params = parse_qs(parsed.query, keep_blank_values=True)
    cleaned = {
        k: v for k, v in params.items()
        if k.lower() not in _TRACKING_PARAMS
    }
    new_query = urlencode(cleaned, doseq=True) if cleaned else ""
    return urlunparse((
        parsed.scheme,
        parsed.netloc,
        path,
        parsed.params,
        new_query,
        "",  # drop fragment
    ))


def _product_from_row(row: tuple[Any, ...]) -> TrackedProduct:
    return TrackedProduct(
        id=row[0],
        url=row[1],
        current_price=row[2],
        target_price=row[3],
        vendor=row[4] or "",
        title=row[5] or "",
        recipient=row[6],
    )


class PriceHistoryDB:
    """Tracked products, their latest state, and every observed price."""

    def __init__(
        self, db_path: Path | None = None,
    ) -> None:
        path = db_path or Settings.PRICE_DB_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(
            str(path), check_same_thread=False,
        )
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.executescript(_SCHEMA)
        logger.debug(
            "PriceHistoryDB opened at %s", path,
        )

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # ── Tracked products ─────────────────────────────────

    def add_product(
        self,
        url: str,
        target_price: float | None = None,
        recipient: str | None = None,
    ) -> TrackedProduct:
        """Start tracking *url*; an existing row gets the new target."""
        clean_url = normalize_url(url)
        # Validates the URL before anything is written
        TrackedProduct(id=0, url=clean_url)
        now = datetime.now().isoformat()
        self._conn.execute(
            "INSERT INTO tracked_products "
            "(url, target_price, recipient, created_at) "
            "VALUES (?, ?, ?, ?) "
            "ON CONFLICT(url) DO UPDATE SET "
            "target_price=excluded.target_price, "
            "recipient=COALESCE(excluded.recipient, recipient), "
            "alert_triggered_at=NULL",
            (clean_url, target_price, recipient, now),
        )
        self._conn.commit()
        row = self._conn.execute(
            f"SELECT {_PRODUCT_COLUMNS} FROM tracked_products "
            "WHERE url = ?",
            (clean_url,),
        ).fetchone()
        logger.info("Tracking product %d: %s", row[0], clean_url)
        return _product_from_row(row)

    def get_product(self, product_id: int) -> TrackedProduct | None:
        row = self._conn.execute(
            f"SELECT {_PRODUCT_COLUMNS} FROM tracked_products "
            "WHERE id = ?",
            (product_id,),
        ).fetchone()
        return _product_from_row(row) if row else None

    def get_tracked_products(self) -> list[TrackedProduct]:
        """Every tracked product, oldest first."""
        rows = self._conn.execute(
            f"SELECT {_PRODUCT_COLUMNS} FROM tracked_products "
            "ORDER BY id",
        ).fetchall()
        return [_product_from_row(r) for r in rows]

    def remove_product(self, product_id: int) -> bool:
        """Stop tracking a product; its history is deleted with it."""
        cur = self._conn.execute(
            "DELETE FROM tracked_products WHERE id = ?", (product_id,),
        )
        self._conn.commit()
        return cur.rowcount > 0

    def get_status(self, product_id: int) -> dict[str, object] | None:
        """Operator-facing fields: last check, last error, alert state."""
        row = self._conn.execute(
            "SELECT last_checked, last_error, alert_triggered_at, "
            "       in_stock, image_url, brand, color, capacity, size "
            "FROM tracked_products WHERE id = ?",
            (product_id,),
        ).fetchone()
        if row is None:
            return None
        return {
            "last_checked": row[0],
            "last_error": row[1],
            "alert_triggered_at": row[2],
            "in_stock": bool(row[3]),
            "image_url": row[4],
            "brand": row[5],
            "color": row[6],
            "capacity": row[7],
            "size": row[8],
        }

    # ── Recording ────────────────────────────────────────

    def record_price(self, record: PriceRecord) -> None:
        """Append one observation to the product's history."""
        self._conn.execute(
            "INSERT INTO price_history "
            "(product_id, price, in_stock, recorded_at) "
            "VALUES (?, ?, ?, ?)",
            (
                record.product_id,
                record.price,
                int(record.in_stock),
                record.recorded_at.isoformat(),
            ),
        )
        self._conn.commit()

    def update_after_scrape(
        self,
        product_id: int,
        price: float,
        metadata: ProductMetadata,
        checked_at: datetime | None = None,
    ) -> None:
        """Store the new current price and refreshed metadata."""
        ts = (checked_at or datetime.now()).isoformat()
        self._conn.execute(
            "UPDATE tracked_products SET "
            "current_price = ?, title = ?, image_url = ?, vendor = ?, "
            "brand = ?, color = ?, capacity = ?, size = ?, in_stock = ?, "
            "last_error = NULL, last_checked = ? "
            "WHERE id = ?",
            (
                price,
                metadata.title,
                metadata.image_url,
                metadata.vendor,
                metadata.brand,
                metadata.color,
                metadata.capacity,
                metadata.size,
                int(metadata.in_stock),
                ts,
                product_id,
            ),
        )
        self._conn.commit()

    def record_failure(
        self,
        product_id: int,
        message: str,
        checked_at: datetime | None = None,
    ) -> None:
        """Note a failed check; price and metadata stay untouched."""
        ts = (checked_at or datetime.now()).isoformat()
        self._conn.execute(
            "UPDATE tracked_products SET last_error = ?, last_checked = ? "
            "WHERE id = ?",
            (message, ts, product_id),
        )
        self._conn.commit()

    # ── Alerts ───────────────────────────────────────────

    def is_alert_triggered(self, product_id: int) -> bool:
        row = self._conn.execute(
            "SELECT alert_triggered_at FROM tracked_products WHERE id = ?",
            (product_id,),
        ).fetchone()
        return bool(row and row[0])

    def set_alert_triggered(
        self, product_id: int, triggered: bool = True,
    ) -> None:
        """Mark (or clear) the product's price-drop alert."""
        value = datetime.now().isoformat() if triggered else None
        self._conn.execute(
            "UPDATE tracked_products SET alert_triggered_at = ? "
            "WHERE id = ?",
            (value, product_id),
        )
        self._conn.commit()

    def reset_alerts(self) -> int:
        """Re-arm every triggered alert. Returns the number cleared."""
        cur = self._conn.execute(
            "UPDATE tracked_products SET alert_triggered_at = NULL "
            "WHERE alert_triggered_at IS NOT NULL",
        )
        self._conn.commit()
        logger.info("Reset %d triggered alerts", cur.rowcount)
        return cur.rowcount

    # ── Querying ─────────────────────────────────────────

    def get_price_history(self, product_id: int) -> list[PriceRecord]:
        """Return all price records for a product, oldest first."""
        rows = self._conn.execute(
            "SELECT product_id, price, in_stock, recorded_at "
            "FROM price_history WHERE product_id = ? "
            "ORDER BY recorded_at ASC, id ASC",
            (product_id,),
        ).fetchall()
        return [
            PriceRecord(
                product_id=r[0],
                price=r[1],
                in_stock=bool(r[2]),
                recorded_at=datetime.fromisoformat(r[3]),
            )
            for r in rows
        ]

    def get_trend_summary(
        self, product_id: int,
    ) -> dict[str, float] | None:
        """Compute min / max / avg / latest price for a product."""
        row = self._conn.execute(
            "SELECT MIN(price), MAX(price), AVG(price), COUNT(id) "
            "FROM price_history WHERE product_id = ?",
            (product_id,),
        ).fetchone()
        if row is None or row[3] == 0:
            return None
        latest_row = self._conn.execute(
            "SELECT price FROM price_history WHERE product_id = ? "
            "ORDER BY recorded_at DESC, id DESC LIMIT 1",
            (product_id,),
        ).fetchone()
        latest_price: float = (
            latest_row[0] if latest_row else 0.0
        )
        return {
            "min": row[0],
            "max": row[1],
            "avg": round(row[2], 2),
            "count": row[3],
            "latest": latest_price,
        }
