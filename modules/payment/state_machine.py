"""
Payment Module - Confirmation State Machine
=============================================
Pure transition table for online orders, independent of HTTP and storage:

    created ──completed──▶ confirmed   (mark paid, then clear cart)
    created ──expired────▶ expired     (delete order)

Re-delivered notifications land on the same state and do nothing.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from common.exceptions import NotFoundError


class PaymentState(str, enum.Enum):
    CREATED = "created"          # record exists, is_paid=False
    CONFIRMED = "confirmed"      # is_paid=True (terminal)
    EXPIRED = "expired"          # record deleted (terminal)


class NotificationKind(str, enum.Enum):
    COMPLETED = "checkout.session.completed"
    EXPIRED = "checkout.session.expired"
    OTHER = "other"


@dataclass(frozen=True)
class Transition:
    state: PaymentState
    mark_paid: bool = False
    delete_order: bool = False
    clear_cart: bool = False

    @property
    def is_noop(self) -> bool:
        return not (self.mark_paid or self.delete_order or self.clear_cart)


def classify(event_type: str) -> NotificationKind:
    try:
        return NotificationKind(event_type)
    except ValueError:
        return NotificationKind.OTHER


def state_of(order) -> PaymentState:
    """Current payment state of an order row (None = already deleted)."""
    if order is None:
        return PaymentState.EXPIRED
    return PaymentState.CONFIRMED if order.is_paid else PaymentState.CREATED


def transition(current: PaymentState, kind: NotificationKind, order_id: Optional[object] = None) -> Transition:
    """
    Next state for a verified notification.

    Raises NotFoundError when a completion arrives for an order that no longer
    exists; a completion is never allowed to resurrect a record.
    """
    if kind == NotificationKind.COMPLETED:
        if current == PaymentState.CREATED:
            return Transition(PaymentState.CONFIRMED, mark_paid=True, clear_cart=True)
        if current == PaymentState.CONFIRMED:
            return Transition(PaymentState.CONFIRMED)
        raise NotFoundError(f"Order {order_id} not found" if order_id is not None else "Order not found")

    if kind == NotificationKind.EXPIRED:
        if current == PaymentState.CREATED:
            return Transition(PaymentState.EXPIRED, delete_order=True)
        return Transition(current)

    return Transition(current)
