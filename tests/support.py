import hashlib
import hmac
import json
import os
import tempfile
import time
import unittest
from dataclasses import replace
from decimal import Decimal
from types import SimpleNamespace

import stripe
from fastapi.testclient import TestClient

from config.settings import Settings
from common.security import create_token, hash_password, USER_COOKIE, SELLER_COOKIE
from main import create_app
from modules.cart.service import cart_service
from modules.catalog.models import Product
from modules.customer.address_models import Address
from modules.payment.gateways.stripe_checkout import StripeGateway
from modules.user.models import User

WEBHOOK_SECRET = "whsec_test_secret"

TEST_SETTINGS = Settings(
    DATABASE_URL="sqlite://",
    SECRET_KEY="test-secret-key",
    SELLER_EMAIL="seller@example.com",
    SELLER_PASSWORD="seller-password",
    STRIPE_SECRET_KEY="sk_test_dummy",
    STRIPE_WEBHOOK_SECRET=WEBHOOK_SECRET,
    FRONTEND_URL="http://shop.test",
    ORDER_SWEEP_ENABLED=False,
    LOG_LEVEL="WARNING",
)


class FakeSessions:
    """Stands in for stripe.checkout.Session; records every create() call."""

    def __init__(self):
        self.calls = []
        self.error = None
        self.statuses = {}          # session id -> status; unknown sessions report "expired"
        self.retrieve_error = None

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        n = len(self.calls)
        return SimpleNamespace(id=f"cs_test_{n}", url=f"https://checkout.stripe.test/c/pay/cs_test_{n}")

    def retrieve(self, session_id, **kwargs):
        if self.retrieve_error is not None:
            raise self.retrieve_error
        status = self.statuses.get(session_id, "expired")
        return SimpleNamespace(
            id=session_id,
            status=status,
            payment_status="paid" if status == "complete" else "unpaid",
        )


class FakeStripe:
    """Session creation is faked; webhook verification is the real stripe code."""

    def __init__(self):
        self.sessions = FakeSessions()
        self.checkout = SimpleNamespace(Session=self.sessions)
        self.Webhook = stripe.Webhook


def sign(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int = None) -> str:
    """Build a stripe-signature header the way Stripe does."""
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.".encode("utf-8") + payload
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def checkout_event(event_type: str, order_id=None, user_id=None, session_id: str = "cs_test_1",
                   metadata: dict = None) -> bytes:
    if metadata is None:
        metadata = {}
        if order_id is not None:
            metadata["orderId"] = str(order_id)
        if user_id is not None:
            metadata["userId"] = str(user_id)
    return json.dumps({
        "id": f"evt_{session_id}_{event_type.rsplit('.', 1)[-1]}",
        "object": "event",
        "type": event_type,
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "payment_status": "paid" if event_type.endswith("completed") else "unpaid",
                "metadata": metadata,
            },
        },
    }).encode("utf-8")


class StorefrontTestCase(unittest.TestCase):
    """Fresh app + temp SQLite file per test; the Stripe gateway runs against FakeStripe."""

    settings_overrides = {}

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        db_path = os.path.join(self.temp_dir.name, "test.sqlite")
        self.settings = replace(TEST_SETTINGS, DATABASE_URL=f"sqlite:///{db_path}", **self.settings_overrides)

        self.stripe = FakeStripe()
        self.gateway = StripeGateway(
            api_key=self.settings.STRIPE_SECRET_KEY,
            webhook_secret=self.settings.STRIPE_WEBHOOK_SECRET,
            stripe_client=self.stripe,
        )
        self.app = create_app(self.settings, gateway=self.gateway)
        self.client = TestClient(self.app)
        self.client.__enter__()  # run lifespan: database + gateway
        self.db = self.app.state.database.session()

    def tearDown(self):
        self.db.close()
        self.client.__exit__(None, None, None)
        self.temp_dir.cleanup()

    # ---------- seeding ----------

    def make_user(self, name: str = "Alice", email: str = None, password: str = "password123") -> User:
        user = User(
            name=name,
            email=email or f"{name.lower()}@example.com",
            password_hash=hash_password(password),
        )
        self.db.add(user)
        self.db.commit()
        return user

    def make_product(self, name: str = "Apple", offer_price="100", price=None, in_stock: bool = True) -> Product:
        product = Product(
            name=name,
            description=[f"Fresh {name}"],
            price=Decimal(str(price if price is not None else offer_price)),
            offer_price=Decimal(str(offer_price)),
            category="Fruits",
            images=[f"https://img.test/{name.lower()}.png"],
            in_stock=in_stock,
        )
        self.db.add(product)
        self.db.commit()
        return product

    def make_address(self, user: User) -> Address:
        address = Address(
            user_id=user.id, first_name=user.name, last_name="Doe", email=user.email,
            street="1 Main St", city="Springfield", state="IL", zipcode="62701",
            country="US", phone="5550100",
        )
        self.db.add(address)
        self.db.commit()
        return address

    def fill_cart(self, user: User, items: dict):
        cart_service.replace_cart(self.db, user.id, items)
        self.db.commit()

    def cart_of(self, user: User) -> dict:
        self.db.expire_all()
        cart_map, _ = cart_service.get_cart_map(self.db, user.id)
        return cart_map

    # ---------- auth ----------

    def login_as(self, user: User):
        token = create_token({"sub": str(user.id)}, self.settings.SECRET_KEY, 60)
        self.client.cookies.set(USER_COOKIE, token)

    def login_as_seller(self):
        token = create_token({"email": self.settings.SELLER_EMAIL}, self.settings.SECRET_KEY, 60)
        self.client.cookies.set(SELLER_COOKIE, token)

    # ---------- webhook ----------

    def post_webhook(self, payload: bytes, signature: str = None, sign_it: bool = True):
        headers = {"Content-Type": "application/json"}
        if signature is not None:
            headers["stripe-signature"] = signature
        elif sign_it:
            headers["stripe-signature"] = sign(payload)
        return self.client.post("/order/webhook", content=payload, headers=headers)
