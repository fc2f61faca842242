import unittest

from modules.order.service import order_service
from tests.support import StorefrontTestCase


class OrderRoutesTestCase(StorefrontTestCase):

    def setUp(self):
        super().setUp()
        self.user = self.make_user("Alice")
        self.address = self.make_address(self.user)
        self.apple = self.make_product("Apple", offer_price="100", price="120")
        self.login_as(self.user)

    def body(self, quantity=2, **extra):
        line = {"product": self.apple.id, "quantity": quantity}
        line.update(extra)
        return {"items": [line], "address": self.address.id}


class TestPlaceOrderRoutes(OrderRoutesTestCase):

    def test_cod_order(self):
        self.fill_cart(self.user, {self.apple.id: 2})

        response = self.client.post("/order/cod", json=self.body())

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data["success"])
        self.assertEqual(data["message"], "Order placed successfully")
        self.assertEqual(data["order"]["amount"], 204)
        self.assertEqual(data["order"]["paymentType"], "cash-on-delivery")
        self.assertFalse(data["order"]["isPaid"])
        self.assertEqual(self.cart_of(self.user), {})

    def test_client_price_is_ignored(self):
        response = self.client.post("/order/cod", json=self.body(quantity=1, price=1, offerPrice=1))
        self.assertEqual(response.json()["order"]["amount"], 102)

    def test_cod_validation_failure(self):
        response = self.client.post("/order/cod", json={"items": [], "address": self.address.id})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            "success": False, "message": "Please add address and items", "error": "validation_error",
        })

    def test_malformed_items_return_failure_result(self):
        for path in ("/order/cod", "/order/stripe"):
            for items in ("abc", [1], ["x"], {"product": self.apple.id}, [[self.apple.id, 1]]):
                response = self.client.post(path, json={"items": items, "address": self.address.id})

                self.assertEqual(response.status_code, 200)
                data = response.json()
                self.assertFalse(data["success"])
                self.assertEqual(data["error"], "validation_error")
                self.assertTrue(data["message"])
        self.assertEqual(self.stripe.sessions.calls, [])
        self.assertEqual(self.client.get("/order/user").json()["orders"], [])

    def test_online_order_uses_origin_header(self):
        response = self.client.post(
            "/order/stripe", json=self.body(), headers={"Origin": "https://front.example"},
        )

        data = response.json()
        self.assertTrue(data["success"])
        self.assertEqual(data["url"], "https://checkout.stripe.test/c/pay/cs_test_1")
        self.assertFalse(data["order"]["isPaid"])
        self.assertEqual(self.stripe.sessions.calls[0]["success_url"], "https://front.example/loader?next=my-orders")

    def test_online_order_falls_back_to_frontend_url(self):
        self.client.post("/order/stripe", json=self.body())
        self.assertEqual(self.stripe.sessions.calls[0]["cancel_url"], "http://shop.test/cart")

    def test_requires_login(self):
        self.client.cookies.clear()
        for path in ("/order/cod", "/order/stripe"):
            self.assertEqual(self.client.post(path, json=self.body()).status_code, 401)
        self.assertEqual(self.client.get("/order/user").status_code, 401)


class TestListOrderRoutes(OrderRoutesTestCase):

    def setUp(self):
        super().setUp()
        line = [{"product": self.apple.id, "quantity": 1}]
        self.cod = order_service.place_cod_order(self.db, self.user.id, line, self.address.id)["order"]
        self.unpaid = order_service.place_online_order(
            self.db, self.gateway, self.user.id, line, self.address.id, origin="http://shop.test",
        )["order"]
        self.paid = order_service.place_online_order(
            self.db, self.gateway, self.user.id, line, self.address.id, origin="http://shop.test",
        )["order"]
        order_service.confirm_payment(self.db, self.paid.id)
        self.db.commit()

    def test_user_orders_hide_unpaid_online(self):
        response = self.client.get("/order/user")

        self.assertEqual(response.status_code, 200)
        orders = response.json()["orders"]
        self.assertEqual([o["id"] for o in orders], [self.paid.id, self.cod.id])

        first = orders[0]
        self.assertEqual(first["address"]["firstName"], "Alice")
        self.assertEqual(first["items"][0]["product"]["name"], "Apple")
        self.assertEqual(first["items"][0]["product"]["offerPrice"], 100)
        self.assertEqual(first["items"][0]["quantity"], 1)

    def test_user_sees_only_own_orders(self):
        bob = self.make_user("Bob")
        self.login_as(bob)

        response = self.client.get("/order/user")
        self.assertEqual(response.json()["orders"], [])

    def test_seller_orders(self):
        self.assertEqual(self.client.get("/order/seller").status_code, 401)

        self.login_as_seller()
        response = self.client.get("/order/seller")

        self.assertEqual(response.status_code, 200)
        ids = [o["id"] for o in response.json()["orders"]]
        self.assertEqual(ids, [self.paid.id, self.cod.id])


if __name__ == "__main__":
    unittest.main()
