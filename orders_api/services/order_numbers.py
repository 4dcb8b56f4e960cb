"""
Order number generation

Format: ORD + creation timestamp (UTC, YYYYMMDDHHMMSS) + 4 random digits.
Uniqueness is enforced by the unique index on orders.order_number; the
order service regenerates and retries on a collision.
"""
import secrets
from datetime import datetime
from typing import Optional

from orders_api.core.clock import utcnow

PREFIX = "ORD"


def generate_order_number(created_at: Optional[datetime] = None) -> str:
    created_at = created_at or utcnow()
    suffix = 1000 + secrets.randbelow(9000)
    return f"{PREFIX}{created_at.strftime('%Y%m%d%H%M%S')}{suffix}"
