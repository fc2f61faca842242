"""
Address Routes
================
Address book: add and list the caller's shipping addresses.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from config.database import get_db
from common.exceptions import ValidationError
from modules.auth.deps import require_user
from modules.customer.address_models import Address
from modules.order.schemas import serialize_address

router = APIRouter(prefix="/address", tags=["address"])

# request key -> column
ADDRESS_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "street": "street",
    "city": "city",
    "state": "state",
    "zipcode": "zipcode",
    "country": "country",
    "phone": "phone",
}


@router.post("/add")
async def add_address(
    data: Dict[str, Any],
    db: Session = Depends(get_db),
    me=Depends(require_user),
):
    raw = data.get("address")
    if not isinstance(raw, dict):
        raise ValidationError("Address data is required")

    values = {column: str(raw.get(key) or "").strip() for key, column in ADDRESS_FIELDS.items()}
    missing = [key for key, column in ADDRESS_FIELDS.items() if not values[column]]
    if missing:
        raise ValidationError(f"Missing address fields: {', '.join(missing)}")

    address = Address(user_id=me.id, **values)
    db.add(address)
    db.commit()
    return {"success": True, "message": "Address added successfully", "address": serialize_address(address)}


@router.get("/get")
async def get_addresses(db: Session = Depends(get_db), me=Depends(require_user)):
    addresses = (
        db.query(Address)
        .filter(Address.user_id == me.id)
        .order_by(Address.id)
        .all()
    )
    return {"success": True, "address": [serialize_address(a) for a in addresses]}
