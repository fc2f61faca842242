"""
Payment Gateway Abstraction
=============================
Each gateway implements create_checkout_session() and parse_notification().
The active gateway is built once per app (see main.lifespan) and injected
into handlers through get_gateway().
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from fastapi import Request

logger = logging.getLogger("storefront.gateway")


@dataclass
class CheckoutLineItem:
    """One line on the hosted checkout page."""
    name: str
    unit_amount: int        # minor units (cents)
    quantity: int = 1


@dataclass
class CheckoutSessionRequest:
    """Input for creating a hosted checkout session."""
    line_items: List[CheckoutLineItem]
    success_url: str
    cancel_url: str
    metadata: Dict[str, str] = field(default_factory=dict)
    currency: str = "usd"


@dataclass
class CheckoutSessionResult:
    """Result of create_checkout_session()."""
    success: bool
    redirect_url: Optional[str] = None
    session_id: Optional[str] = None
    error_message: Optional[str] = None
    status: Optional[str] = None            # open | complete | expired
    payment_status: Optional[str] = None    # paid | unpaid | no_payment_required


class BaseGateway:
    """Abstract gateway interface."""
    name: str = ""
    label: str = ""

    def create_checkout_session(self, req: CheckoutSessionRequest) -> CheckoutSessionResult:
        raise NotImplementedError

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSessionResult:
        """Current status of a session; success=False when the gateway could not be asked."""
        raise NotImplementedError

    def parse_notification(self, payload: bytes, signature: Optional[str]):
        """Verify the signature over the raw body and return a WebhookNotification.

        Raises SignatureVerificationError when the notification cannot be trusted.
        """
        raise NotImplementedError


def get_gateway(request: Request) -> BaseGateway:
    """FastAPI dependency: the gateway the running app was built with."""
    return request.app.state.gateway
