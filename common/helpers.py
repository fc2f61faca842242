"""
Storefront - Shared Helpers
=============================
Pure utility functions with NO database or module dependencies.
"""

from datetime import datetime, timezone
from decimal import Decimal, ROUND_FLOOR
from typing import Optional


def now_utc() -> datetime:
    """Returns current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def safe_int(value) -> Optional[int]:
    """Safely convert a value to int. Returns None on failure."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        return None


def to_decimal(value) -> Decimal:
    """Decimal from int/float/str/Decimal without float noise."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def floor_int(value) -> int:
    """Floor a non-negative amount to a whole unit."""
    return int(to_decimal(value).quantize(Decimal("1"), rounding=ROUND_FLOOR))


def to_minor_units(value) -> int:
    """Major currency amount -> minor units (cents), truncated."""
    return floor_int(to_decimal(value) * 100)


def to_bool(value) -> Optional[bool]:
    """Parse a JSON flag: real booleans or "true"/"false" strings. Returns None otherwise."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return {"true": True, "false": False}.get(value.strip().lower())
    return None
