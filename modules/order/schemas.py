"""
Order Module - Schemas
========================
Request bodies for order placement and the JSON shape of orders returned to
clients (camelCase keys, product and address expanded).
"""

from datetime import datetime
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


# ==========================================
# Requests
# ==========================================

class PlaceOrderRequest(BaseModel):
    """
    Client-supplied prices (if any) are ignored; amounts come from the catalog.
    Fields stay untyped so a bad shape reaches the order workflow and comes
    back as a validation_error result instead of a 422.
    """
    model_config = ConfigDict(extra="ignore")

    items: Optional[Any] = None     # [{"product": id, "quantity": n}, ...]
    address: Optional[Any] = None


# ==========================================
# Responses
# ==========================================

# Numeric(…) columns come back as Decimal
Money = Annotated[float, BeforeValidator(lambda v: float(v) if v is not None else 0.0)]


class _Out(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    def dump(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ProductOut(_Out):
    id: int
    name: str
    description: List[str] = Field(default_factory=list)
    price: Money
    offer_price: Money = Field(serialization_alias="offerPrice")
    category: Optional[str] = None
    images: List[str] = Field(default_factory=list, serialization_alias="image")
    in_stock: bool = Field(serialization_alias="inStock")


class AddressOut(_Out):
    id: int
    first_name: str = Field(serialization_alias="firstName")
    last_name: str = Field(serialization_alias="lastName")
    email: str
    street: str
    city: str
    state: str
    zipcode: str
    country: str
    phone: str


class OrderItemOut(_Out):
    product: Optional[ProductOut] = None
    product_id: int = Field(serialization_alias="productId")
    quantity: int
    unit_offer_price: Money = Field(serialization_alias="unitOfferPrice")


class OrderOut(_Out):
    id: int
    user_id: int = Field(serialization_alias="userId")
    items: List[OrderItemOut] = Field(default_factory=list)
    amount: Money
    address: Optional[AddressOut] = None
    status: str
    payment_type: str = Field(serialization_alias="paymentType")
    is_paid: bool = Field(serialization_alias="isPaid")
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")


def serialize_order(order) -> dict:
    return OrderOut.model_validate(order).dump()


def serialize_product(product) -> dict:
    return ProductOut.model_validate(product).dump()


def serialize_address(address) -> dict:
    return AddressOut.model_validate(address).dump()
