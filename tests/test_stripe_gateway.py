import json
import unittest

import stripe

from common.exceptions import MalformedNotificationError, SignatureVerificationError
from modules.payment.gateways import CheckoutLineItem, CheckoutSessionRequest
from modules.payment.gateways.stripe_checkout import StripeGateway
from tests.support import WEBHOOK_SECRET, FakeStripe, checkout_event, sign


class TestStripeGateway(unittest.TestCase):

    def setUp(self):
        self.stripe = FakeStripe()
        self.gateway = StripeGateway("sk_test_dummy", WEBHOOK_SECRET, stripe_client=self.stripe)

    def session_request(self):
        return CheckoutSessionRequest(
            line_items=[CheckoutLineItem("Apple", 10000, 2), CheckoutLineItem("Tax (2%)", 400)],
            success_url="http://shop.test/loader?next=my-orders",
            cancel_url="http://shop.test/cart",
            metadata={"orderId": "1", "userId": "2"},
            currency="eur",
        )

    # ---------- checkout sessions ----------

    def test_create_checkout_session(self):
        result = self.gateway.create_checkout_session(self.session_request())

        self.assertTrue(result.success)
        self.assertEqual(result.session_id, "cs_test_1")
        self.assertEqual(result.redirect_url, "https://checkout.stripe.test/c/pay/cs_test_1")
        call = self.stripe.sessions.calls[0]
        self.assertEqual(call["line_items"][1], {
            "price_data": {"currency": "eur", "product_data": {"name": "Tax (2%)"}, "unit_amount": 400},
            "quantity": 1,
        })

    def test_create_checkout_session_failure(self):
        self.stripe.sessions.error = stripe.AuthenticationError("Invalid API Key provided")

        result = self.gateway.create_checkout_session(self.session_request())

        self.assertFalse(result.success)
        self.assertIsNone(result.redirect_url)
        self.assertIn("Invalid API Key provided", result.error_message)

    def test_retrieve_checkout_session(self):
        self.stripe.sessions.statuses["cs_test_9"] = "complete"

        result = self.gateway.retrieve_checkout_session("cs_test_9")

        self.assertTrue(result.success)
        self.assertEqual(result.status, "complete")
        self.assertEqual(result.payment_status, "paid")

    def test_retrieve_checkout_session_failure(self):
        self.stripe.sessions.retrieve_error = stripe.APIConnectionError("connection refused")

        result = self.gateway.retrieve_checkout_session("cs_test_9")

        self.assertFalse(result.success)
        self.assertIsNone(result.status)

    # ---------- notifications ----------

    def test_parse_valid_notification(self):
        payload = checkout_event("checkout.session.completed", order_id=5, user_id=9, session_id="cs_live_x")

        notification = self.gateway.parse_notification(payload, sign(payload))

        self.assertEqual(notification.type, "checkout.session.completed")
        self.assertEqual(notification.session.id, "cs_live_x")
        self.assertEqual(notification.metadata.order_id, "5")
        self.assertEqual(notification.metadata.user_id, "9")

    def test_null_metadata(self):
        payload = json.dumps({
            "id": "evt_1", "type": "checkout.session.expired",
            "data": {"object": {"id": "cs_1", "metadata": None}},
        }).encode("utf-8")

        notification = self.gateway.parse_notification(payload, sign(payload))

        self.assertIsNone(notification.metadata.order_id)

    def test_rejects_without_signature(self):
        payload = checkout_event("checkout.session.completed", order_id=5, user_id=9)
        for signature in (None, ""):
            with self.assertRaises(SignatureVerificationError):
                self.gateway.parse_notification(payload, signature)

    def test_rejects_when_secret_missing(self):
        gateway = StripeGateway("sk_test_dummy", "", stripe_client=self.stripe)
        payload = checkout_event("checkout.session.completed", order_id=5, user_id=9)

        with self.assertRaises(SignatureVerificationError):
            gateway.parse_notification(payload, sign(payload))

    def test_rejects_bad_signature(self):
        payload = checkout_event("checkout.session.completed", order_id=5, user_id=9)
        with self.assertRaises(SignatureVerificationError):
            self.gateway.parse_notification(payload, sign(payload, secret="whsec_other"))

    def test_signed_payload_without_type_is_malformed(self):
        payload = json.dumps({"id": "evt_1", "data": {"object": {"id": "cs_1"}}}).encode("utf-8")

        with self.assertRaises(MalformedNotificationError):
            self.gateway.parse_notification(payload, sign(payload))


if __name__ == "__main__":
    unittest.main()
