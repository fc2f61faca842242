"""
Catalog Routes
================
Public product list/detail; seller-only add and stock toggle.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from config.database import get_db
from common.exceptions import ValidationError
from common.helpers import safe_int, to_bool
from modules.auth.deps import require_seller
from modules.catalog.service import catalog_service
from modules.order.schemas import serialize_product

router = APIRouter(prefix="/product", tags=["catalog"])


@router.get("/list")
async def product_list(db: Session = Depends(get_db)):
    products = catalog_service.list_products(db)
    return {"success": True, "products": [serialize_product(p) for p in products]}


@router.post("/add")
async def product_add(
    data: Dict[str, Any],
    db: Session = Depends(get_db),
    seller=Depends(require_seller),
):
    """JSON body; `image` is a list of URLs already stored on the image host."""
    in_stock = to_bool(data.get("inStock", True))
    if in_stock is None:
        raise ValidationError("inStock must be true or false")
    product = catalog_service.add_product(db, {
        "name": data.get("name"),
        "description": data.get("description"),
        "price": data.get("price"),
        "offer_price": data.get("offerPrice", data.get("price")),
        "category": data.get("category"),
        "images": data.get("image") or [],
        "in_stock": in_stock,
    })
    db.commit()
    return {"success": True, "message": "Product added successfully", "product": serialize_product(product)}


@router.post("/stock")
async def product_stock(
    data: Dict[str, Any],
    db: Session = Depends(get_db),
    seller=Depends(require_seller),
):
    product_id = safe_int(data.get("id"))
    in_stock = to_bool(data.get("inStock"))
    if product_id is None or in_stock is None:
        raise ValidationError("Product id and inStock (true/false) are required")
    product = catalog_service.change_stock(db, product_id, in_stock)
    db.commit()
    return {"success": True, "message": "Product stock updated successfully", "product": serialize_product(product)}


@router.get("/{product_id}")
async def product_detail(product_id: int, db: Session = Depends(get_db)):
    product = catalog_service.get_product(db, product_id)
    return {"success": True, "product": serialize_product(product)}
