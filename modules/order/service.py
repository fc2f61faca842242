"""
Order Module - Service Layer
===============================
Order placement (cash-on-delivery / online), payment-state mutations,
stale order cleanup and order queries.

place_cod_order() and place_online_order() are the workflow boundary: they
never raise business errors, they return {"success": False, "message", "error"}.
"""

import logging
from datetime import timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import desc, or_

from common.exceptions import (
    StorefrontError, ValidationError, NotFoundError, OutOfStockError,
    PaymentGatewayError, PersistenceError,
)
from common.helpers import now_utc, safe_int, to_minor_units
from modules.cart.service import cart_service
from modules.catalog.service import catalog_service
from modules.customer.address_models import Address
from modules.order.models import Order, OrderItem, OrderStatus, PaymentType
from modules.order.pricing import calculate_order_total, TAX_LABEL
from modules.payment.gateways import BaseGateway, CheckoutLineItem, CheckoutSessionRequest

logger = logging.getLogger("storefront.order")


def _line_fields(item) -> Tuple[Optional[int], Optional[int]]:
    """(product_id, quantity) from one {"product", "quantity"} entry."""
    if not isinstance(item, dict):
        raise ValidationError("Each item must be an object with product and quantity")
    return safe_int(item.get("product")), safe_int(item.get("quantity"))


class OrderService:

    # ==========================================
    # Checkout: Cash on Delivery
    # ==========================================

    def place_cod_order(self, db: Session, user_id: int, items: Iterable, address_id) -> Dict:
        """
        1. Validate address + items against the current catalog
        2. Price server-side (offer price × qty + 2% tax)
        3. Persist the order (committed)
        4. Clear the cart (best-effort, failure does not undo the order)
        """
        try:
            lines, pricing = self._validate_and_price(db, user_id, items, address_id)
            order = self._create_order(db, user_id, address_id, lines, pricing, PaymentType.COD)
            db.commit()
        except StorefrontError as e:
            db.rollback()
            return self._failure(e)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"COD order for user #{user_id} failed to persist: {e}")
            return self._failure(PersistenceError("Could not save the order"))

        logger.info(f"Order #{order.id} placed (COD) by user #{user_id}: {order.amount}")
        self.clear_cart_quietly(db, user_id)
        return {
            "success": True,
            "message": "Order placed successfully",
            "order": order,
        }

    # ==========================================
    # Checkout: Online (hosted checkout)
    # ==========================================

    def place_online_order(
        self, db: Session, gateway: BaseGateway, user_id: int, items: Iterable, address_id,
        origin: str, currency: str = "usd",
    ) -> Dict:
        """
        Persist an unpaid online order, then open a checkout session for it.
        The cart is left alone until the gateway confirms payment.
        If the gateway fails the unpaid order stays for reconciliation.
        """
        try:
            lines, pricing = self._validate_and_price(db, user_id, items, address_id)
            order = self._create_order(db, user_id, address_id, lines, pricing, PaymentType.ONLINE)
            db.commit()
        except StorefrontError as e:
            db.rollback()
            return self._failure(e)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Online order for user #{user_id} failed to persist: {e}")
            return self._failure(PersistenceError("Could not save the order"))

        logger.info(f"Order #{order.id} created (online, unpaid) by user #{user_id}: {order.amount}")

        line_items = [
            CheckoutLineItem(
                name=product.name,
                unit_amount=to_minor_units(product.offer_price),
                quantity=quantity,
            )
            for product, quantity in lines
        ]
        line_items.append(CheckoutLineItem(name=TAX_LABEL, unit_amount=to_minor_units(pricing["tax"]), quantity=1))

        origin = origin.rstrip("/")
        result = gateway.create_checkout_session(CheckoutSessionRequest(
            line_items=line_items,
            success_url=f"{origin}/loader?next=my-orders",
            cancel_url=f"{origin}/cart",
            metadata={"orderId": str(order.id), "userId": str(user_id)},
            currency=currency,
        ))

        if not result.success:
            logger.warning(f"Order #{order.id}: checkout session not created, order kept unpaid")
            failure = self._failure(PaymentGatewayError(result.error_message or "Payment gateway error"))
            failure["orderId"] = order.id
            return failure

        try:
            order.checkout_session_id = result.session_id
            db.commit()
        except SQLAlchemyError as e:
            # Session exists; metadata still correlates the webhook to the order
            db.rollback()
            logger.error(f"Order #{order.id}: could not store session id {result.session_id}: {e}")

        return {
            "success": True,
            "message": "Redirecting to payment...",
            "url": result.redirect_url,
            "order": order,
        }

    # ==========================================
    # Payment state (called by the webhook workflow)
    # ==========================================

    def confirm_payment(self, db: Session, order_id: int, session_id: Optional[str] = None) -> bool:
        """
        Atomically flip is_paid False→True for an online order.
        Returns True only for the call that performed the flip.
        """
        values = {Order.is_paid: True, Order.updated_at: now_utc()}
        if session_id:
            values[Order.checkout_session_id] = session_id
        rows = (
            db.query(Order)
            .filter(
                Order.id == order_id,
                Order.payment_type == PaymentType.ONLINE.value,
                Order.is_paid.is_(False),
            )
            .update(values, synchronize_session=False)
        )
        db.flush()
        return rows == 1

    def delete_unpaid_online_order(self, db: Session, order_id: int) -> bool:
        """Atomically delete an unpaid online order. Paid or COD orders are never deleted."""
        rows = (
            db.query(Order)
            .filter(
                Order.id == order_id,
                Order.payment_type == PaymentType.ONLINE.value,
                Order.is_paid.is_(False),
            )
            .delete(synchronize_session=False)
        )
        db.flush()
        return rows == 1

    def clear_cart_quietly(self, db: Session, user_id: int) -> bool:
        """Empty the user's cart; log and swallow failures."""
        try:
            cart_service.clear_cart(db, user_id)
            db.commit()
            return True
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"Failed to clear cart for user #{user_id}: {e}")
            return False

    # ==========================================
    # Stale online orders
    # ==========================================

    def release_stale_online_orders(self, db: Session, gateway: BaseGateway, older_than: timedelta) -> int:
        """
        Delete unpaid online orders created before now - older_than whose
        checkout session the gateway no longer considers payable.

        Orders whose session is complete are kept for the (late) completion
        webhook; orders whose session cannot be looked up are kept too.
        Orders that never got a session are deleted.
        """
        limit_time = now_utc() - older_than
        candidates = (
            db.query(Order.id, Order.checkout_session_id)
            .filter(
                Order.payment_type == PaymentType.ONLINE.value,
                Order.is_paid.is_(False),
                Order.created_at < limit_time,
            )
            .order_by(Order.id)
            .all()
        )

        count = 0
        for order_id, session_id in candidates:
            if session_id:
                session = gateway.retrieve_checkout_session(session_id)
                if not session.success:
                    logger.warning(f"Order #{order_id}: session {session_id} lookup failed, kept")
                    continue
                if session.status == "complete":
                    logger.warning(f"Order #{order_id}: session {session_id} is complete, awaiting webhook")
                    continue
            if self.delete_unpaid_online_order(db, order_id):
                count += 1

        if count:
            db.commit()
            logger.info(f"Released {count} stale unpaid online orders")
        return count

    # ==========================================
    # Query
    # ==========================================

    def get_order(self, db: Session, order_id: int) -> Optional[Order]:
        return db.query(Order).filter(Order.id == order_id).first()

    def get_user_orders(self, db: Session, user_id: int) -> List[Order]:
        return self._visible_orders(db).filter(Order.user_id == user_id).all()

    def get_all_orders(self, db: Session) -> List[Order]:
        return self._visible_orders(db).all()

    # ==========================================
    # Private Helpers
    # ==========================================

    def _visible_orders(self, db: Session):
        """COD orders in any state + paid online orders, newest first, expanded."""
        return (
            db.query(Order)
            .filter(or_(
                Order.payment_type == PaymentType.COD.value,
                Order.is_paid.is_(True),
            ))
            .options(
                selectinload(Order.items).selectinload(OrderItem.product),
                selectinload(Order.address),
            )
            .order_by(desc(Order.created_at), desc(Order.id))
        )

    def _validate_and_price(self, db: Session, user_id: int, items, address_id):
        """
        Returns ([(Product, quantity), ...], pricing). Raises on the first bad
        input so no partial order is ever written.
        """
        if items is not None and not isinstance(items, (list, tuple)):
            raise ValidationError("Items must be a list")
        items = list(items or [])
        if address_id in (None, "") or not items:
            raise ValidationError("Please add address and items")

        address_pk = safe_int(address_id)
        if address_pk is None:
            raise ValidationError("Invalid address")

        requested = []
        for item in items:
            product_id, quantity = _line_fields(item)
            if product_id is None:
                raise ValidationError("Each item needs a product")
            if quantity is None or quantity < 1:
                raise ValidationError(f"Invalid quantity for product {product_id}")
            requested.append((product_id, quantity))

        products = catalog_service.get_products_map(db, [pid for pid, _ in requested])
        lines = []
        for product_id, quantity in requested:
            product = products.get(product_id)
            if not product:
                raise NotFoundError(f"Product with ID {product_id} not found")
            if not product.in_stock:
                raise OutOfStockError(product.name)
            lines.append((product, quantity))

        address = (
            db.query(Address)
            .filter(Address.id == address_pk, Address.user_id == user_id)
            .first()
        )
        if not address:
            raise NotFoundError("Address not found")

        pricing = calculate_order_total((p.offer_price, qty) for p, qty in lines)
        return lines, pricing

    def _create_order(self, db: Session, user_id: int, address_id, lines, pricing: dict, payment_type: PaymentType) -> Order:
        new_order = Order(
            user_id=user_id,
            address_id=safe_int(address_id),
            amount=pricing["total"],
            status=OrderStatus.PLACED.value,
            payment_type=payment_type.value,
            is_paid=False,
        )
        for product, quantity in lines:
            new_order.items.append(OrderItem(
                product_id=product.id,
                quantity=quantity,
                unit_offer_price=product.offer_price,
            ))
        db.add(new_order)
        db.flush()  # get order.id
        return new_order

    @staticmethod
    def _failure(error: StorefrontError) -> Dict:
        return {"success": False, "message": error.message, "error": error.code}


# Singleton
order_service = OrderService()
