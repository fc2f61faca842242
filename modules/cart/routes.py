"""
Cart Routes
=============
Read the cart mapping and replace it wholesale.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import require_user
from modules.cart.service import cart_service

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("")
async def view_cart(db: Session = Depends(get_db), me=Depends(require_user)):
    cart_map, count = cart_service.get_cart_map(db, me.id)
    return {
        "success": True,
        "cartItems": {str(pid): qty for pid, qty in cart_map.items()},
        "count": count,
    }


@router.post("/update")
async def update_cart(
    data: Dict[str, Any],
    db: Session = Depends(get_db),
    me=Depends(require_user),
):
    """Body: {"cartItems": {"<productId>": quantity}}; quantity <= 0 removes the entry."""
    cart_service.replace_cart(db, me.id, data.get("cartItems"))
    db.commit()
    return {"success": True, "message": "Cart updated successfully"}
