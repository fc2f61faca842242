"""
Order Routes
==============
Place orders (COD / online checkout) and list them for the user or seller.
"""

from fastapi import APIRouter, Request, Depends
from sqlalchemy.orm import Session

from config.database import get_db
from config.settings import Settings, get_settings
from modules.auth.deps import require_user, require_seller
from modules.order.schemas import PlaceOrderRequest, serialize_order
from modules.order.service import order_service
from modules.payment.gateways import BaseGateway, get_gateway

router = APIRouter(prefix="/order", tags=["order"])


def _with_serialized_order(result: dict) -> dict:
    if result.get("order") is not None:
        result = dict(result, order=serialize_order(result["order"]))
    return result


@router.post("/cod")
async def place_order_cod(
    body: PlaceOrderRequest,
    db: Session = Depends(get_db),
    me=Depends(require_user),
):
    result = order_service.place_cod_order(db, me.id, body.items, body.address)
    return _with_serialized_order(result)


@router.post("/stripe")
async def place_order_stripe(
    request: Request,
    body: PlaceOrderRequest,
    db: Session = Depends(get_db),
    gateway: BaseGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
    me=Depends(require_user),
):
    """Redirect targets are built from the caller's Origin header."""
    origin = request.headers.get("origin") or settings.FRONTEND_URL
    result = order_service.place_online_order(
        db, gateway, me.id, body.items, body.address,
        origin=origin, currency=settings.CURRENCY,
    )
    return _with_serialized_order(result)


@router.get("/user")
async def user_orders(db: Session = Depends(get_db), me=Depends(require_user)):
    orders = order_service.get_user_orders(db, me.id)
    return {"success": True, "orders": [serialize_order(o) for o in orders]}


@router.get("/seller")
async def seller_orders(db: Session = Depends(get_db), seller=Depends(require_seller)):
    orders = order_service.get_all_orders(db)
    return {"success": True, "orders": [serialize_order(o) for o in orders]}
