"""
Catalog Module - Service Layer
================================
Product listing, lookup, creation and stock toggling.
"""

import logging
from typing import Dict, Iterable, List

from sqlalchemy.orm import Session
from sqlalchemy import desc

from common.exceptions import ValidationError, NotFoundError
from common.helpers import to_decimal
from modules.catalog.models import Product

logger = logging.getLogger("storefront.catalog")


class CatalogService:

    def list_products(self, db: Session) -> List[Product]:
        return db.query(Product).order_by(desc(Product.created_at), desc(Product.id)).all()

    def get_product(self, db: Session, product_id: int) -> Product:
        product = db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError(f"Product with ID {product_id} not found")
        return product

    def get_products_map(self, db: Session, product_ids: Iterable[int]) -> Dict[int, Product]:
        """Batch lookup: {id: Product} for the ids that exist."""
        ids = list(set(product_ids))
        if not ids:
            return {}
        return {p.id: p for p in db.query(Product).filter(Product.id.in_(ids)).all()}

    def add_product(self, db: Session, data: dict) -> Product:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("Product name is required")

        if data.get("price") is None:
            raise ValidationError("Product price is required")
        try:
            price = to_decimal(data.get("price"))
            offer_price = to_decimal(data.get("offer_price") if data.get("offer_price") is not None else data.get("price"))
        except ArithmeticError:
            raise ValidationError("Prices must be numbers")
        if price < 0 or offer_price < 0:
            raise ValidationError("Prices must not be negative")

        description = data.get("description") or []
        if isinstance(description, str):
            description = [line for line in description.splitlines() if line.strip()]

        product = Product(
            name=name,
            description=description,
            price=price,
            offer_price=offer_price,
            category=data.get("category"),
            images=list(data.get("images") or []),
            in_stock=bool(data.get("in_stock", True)),
        )
        db.add(product)
        db.flush()
        logger.info(f"Product #{product.id} added: {name}")
        return product

    def change_stock(self, db: Session, product_id: int, in_stock: bool) -> Product:
        product = self.get_product(db, product_id)
        product.in_stock = bool(in_stock)
        db.flush()
        return product


# Singleton
catalog_service = CatalogService()
