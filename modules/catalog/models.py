"""
Catalog Module - Models
========================
Product with list price, offer (billing) price and stock flag.
Images live on the external image host; only their URLs are stored.
"""

from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, JSON
from sqlalchemy.sql import func
from config.database import Base
from common.helpers import now_utc


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(JSON, nullable=False, default=list)      # list of bullet lines
    price = Column(Numeric(10, 2), nullable=False)                 # list price (display)
    offer_price = Column(Numeric(10, 2), nullable=False)           # billed price
    category = Column(String, nullable=True, index=True)
    images = Column(JSON, nullable=False, default=list)            # image URLs
    in_stock = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    def __repr__(self):
        return f"<Product {self.name}>"
