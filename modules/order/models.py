"""
Order Module - Models
======================
Order ledger with a unit offer-price snapshot per item for audit trail.
"""

import enum
from sqlalchemy import (
    Column, Integer, String, Numeric, Boolean,
    ForeignKey, DateTime, CheckConstraint, text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from config.database import Base
from common.helpers import now_utc


class PaymentType(str, enum.Enum):
    COD = "cash-on-delivery"
    ONLINE = "online"


class OrderStatus(str, enum.Enum):
    PLACED = "placed"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    address_id = Column(Integer, ForeignKey("addresses.id", ondelete="RESTRICT"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String, default=OrderStatus.PLACED.value, nullable=False)

    # Payment (payment_type never changes after creation)
    payment_type = Column(String, nullable=False, index=True)
    is_paid = Column(Boolean, server_default=text("false"), default=False, nullable=False)
    checkout_session_id = Column(String, unique=True, nullable=True)

    created_at = Column(DateTime(timezone=True), default=now_utc, server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    # Relationships
    user = relationship("User", foreign_keys=[user_id])
    address = relationship("Address", foreign_keys=[address_id])
    items = relationship(
        "OrderItem", back_populates="order",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="OrderItem.id",
    )

    @property
    def is_online(self) -> bool:
        return self.payment_type == PaymentType.ONLINE.value


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    quantity = Column(Integer, nullable=False)

    # Price snapshot at time of purchase
    unit_offer_price = Column(Numeric(10, 2), nullable=False)

    # Relationships
    order = relationship("Order", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_item_qty"),
    )
