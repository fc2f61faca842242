"""
Stripe Gateway
================
Hosted Checkout sessions + signed webhook notifications.
The API key is passed per call; nothing is set on the stripe module globally.
"""

import logging
from typing import Optional

import stripe
from pydantic import ValidationError as PydanticValidationError

from common.exceptions import SignatureVerificationError, MalformedNotificationError
from modules.payment.gateways import (
    BaseGateway, CheckoutSessionRequest, CheckoutSessionResult,
)
from modules.payment.schemas import WebhookNotification

logger = logging.getLogger("storefront.gateway.stripe")

SIGNATURE_TOLERANCE_SECONDS = 300


class StripeGateway(BaseGateway):
    name = "stripe"
    label = "Stripe Checkout"

    def __init__(self, api_key: str, webhook_secret: str, stripe_client=stripe):
        self._api_key = api_key
        self._webhook_secret = webhook_secret
        self._stripe = stripe_client

    def create_checkout_session(self, req: CheckoutSessionRequest) -> CheckoutSessionResult:
        line_items = [
            {
                "price_data": {
                    "currency": req.currency,
                    "product_data": {"name": item.name},
                    "unit_amount": item.unit_amount,
                },
                "quantity": item.quantity,
            }
            for item in req.line_items
        ]
        try:
            session = self._stripe.checkout.Session.create(
                api_key=self._api_key,
                mode="payment",
                line_items=line_items,
                success_url=req.success_url,
                cancel_url=req.cancel_url,
                metadata=req.metadata,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe session create failed [{req.metadata.get('orderId')}]: {e}")
            return CheckoutSessionResult(success=False, error_message=f"Payment gateway error: {e.user_message or e}")

        logger.info(f"Stripe session created [{req.metadata.get('orderId')}]: {session.id}")
        return CheckoutSessionResult(success=True, redirect_url=session.url, session_id=session.id)

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSessionResult:
        try:
            session = self._stripe.checkout.Session.retrieve(session_id, api_key=self._api_key)
        except stripe.StripeError as e:
            logger.error(f"Stripe session retrieve failed [{session_id}]: {e}")
            return CheckoutSessionResult(success=False, session_id=session_id, error_message=str(e))

        return CheckoutSessionResult(
            success=True,
            session_id=session.id,
            status=session.status,
            payment_status=session.payment_status,
        )

    def parse_notification(self, payload: bytes, signature: Optional[str]) -> WebhookNotification:
        if not signature:
            raise SignatureVerificationError("No Stripe signature")
        if not self._webhook_secret:
            raise SignatureVerificationError("Webhook secret is not configured")

        try:
            self._stripe.Webhook.construct_event(
                payload, signature, self._webhook_secret,
                tolerance=SIGNATURE_TOLERANCE_SECONDS,
            )
        except stripe.SignatureVerificationError as e:
            raise SignatureVerificationError(f"Webhook signature verification failed: {e}")
        except ValueError as e:
            # Body is not JSON; Stripe never signs such payloads
            raise SignatureVerificationError(f"Invalid webhook payload: {e}")

        try:
            return WebhookNotification.model_validate_json(payload)
        except PydanticValidationError as e:
            raise MalformedNotificationError(f"Unexpected notification shape: {e.error_count()} error(s)")
