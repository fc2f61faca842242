"""
Order Module - Pricing
========================
Order total from current catalog offer prices.

    subtotal = Σ offer_price × quantity
    tax      = floor(subtotal × 2%)
    total    = subtotal + tax
"""

from decimal import Decimal
from typing import Iterable, Tuple

from common.helpers import to_decimal, floor_int

TAX_RATE = Decimal("0.02")
TAX_LABEL = "Tax (2%)"


def calculate_order_total(lines: Iterable[Tuple[object, int]], tax_rate: Decimal = TAX_RATE) -> dict:
    """
    Args:
        lines: (unit_offer_price, quantity) pairs, prices taken from the catalog
        tax_rate: fraction added on top of the subtotal

    Returns:
        dict with: subtotal (Decimal), tax (int), total (Decimal)
    """
    subtotal = Decimal("0")
    for unit_price, quantity in lines:
        subtotal += to_decimal(unit_price) * int(quantity)

    tax = floor_int(subtotal * to_decimal(tax_rate)) if subtotal > 0 else 0
    return {
        "subtotal": subtotal,
        "tax": tax,
        "total": subtotal + tax,
    }
