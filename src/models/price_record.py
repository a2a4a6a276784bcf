# src/models/price_record.py

"""Price history row appended after every successful scrape."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class PriceRecord:
    """A single price observation for a tracked product."""

    product_id: int
    price: float
    in_stock: bool
    recorded_at: datetime
