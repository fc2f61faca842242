"""
Cart Module - Service Layer
==============================
Cart management: get/create, replace contents, read as mapping, clear.
"""

from typing import Dict, Tuple

from sqlalchemy.orm import Session

from common.exceptions import ValidationError, NotFoundError
from common.helpers import safe_int
from modules.cart.models import Cart, CartItem
from modules.catalog.models import Product


class CartService:

    def get_or_create_cart(self, db: Session, user_id: int) -> Cart:
        """Get existing cart or create new one for user."""
        cart = db.query(Cart).filter(Cart.user_id == user_id).first()
        if not cart:
            cart = Cart(user_id=user_id)
            db.add(cart)
            db.flush()
        return cart

    def get_cart_map(self, db: Session, user_id: int) -> Tuple[Dict[int, int], int]:
        """Get {product_id: quantity} map and total count."""
        cart = db.query(Cart).filter(Cart.user_id == user_id).first()
        if not cart or not cart.items:
            return {}, 0
        cart_map = {item.product_id: item.quantity for item in cart.items}
        return cart_map, sum(cart_map.values())

    def replace_cart(self, db: Session, user_id: int, cart_items: Dict) -> Dict[int, int]:
        """
        Replace the whole cart with `cart_items` ({product_id: quantity}).
        Entries with quantity <= 0 are dropped. Unknown products raise NotFoundError.
        """
        if cart_items is None or not isinstance(cart_items, dict):
            raise ValidationError("Cart items are required")

        wanted: Dict[int, int] = {}
        for raw_pid, raw_qty in cart_items.items():
            pid = safe_int(raw_pid)
            qty = safe_int(raw_qty)
            if pid is None or qty is None:
                raise ValidationError(f"Invalid cart entry: {raw_pid}")
            if qty > 0:
                wanted[pid] = qty

        if wanted:
            found = {
                pid for (pid,) in db.query(Product.id).filter(Product.id.in_(list(wanted))).all()
            }
            missing = sorted(set(wanted) - found)
            if missing:
                raise NotFoundError(f"Product with ID {missing[0]} not found")

        cart = self.get_or_create_cart(db, user_id)
        existing = {item.product_id: item for item in cart.items}

        for pid, item in existing.items():
            if pid not in wanted:
                db.delete(item)
        for pid, qty in wanted.items():
            if pid in existing:
                existing[pid].quantity = qty
            else:
                db.add(CartItem(cart_id=cart.id, product_id=pid, quantity=qty))

        db.flush()
        db.expire(cart, ["items"])
        return wanted

    def clear_cart(self, db: Session, user_id: int):
        """Remove all items from user's cart."""
        cart = db.query(Cart).filter(Cart.user_id == user_id).first()
        if cart:
            db.query(CartItem).filter(CartItem.cart_id == cart.id).delete(synchronize_session=False)
            db.expire(cart, ["items"])
            db.flush()



# Singleton
cart_service = CartService()
