"""
Storefront - Application Entry Point
======================================
FastAPI app factory, lifespan (database, payment gateway, scheduler),
exception handling and router registration.
"""

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from apscheduler.schedulers.background import BackgroundScheduler

from config.settings import Settings
from config.database import Database
from common.exceptions import StorefrontError
from modules.payment.gateways import BaseGateway
from modules.payment.gateways.stripe_checkout import StripeGateway

# ==========================================
# Import ALL models so Base can see them
# ==========================================
from modules.user.models import User  # noqa: F401
from modules.catalog.models import Product  # noqa: F401
from modules.cart.models import Cart, CartItem  # noqa: F401
from modules.customer.address_models import Address  # noqa: F401
from modules.order.models import Order, OrderItem  # noqa: F401

# ==========================================
# Import routers
# ==========================================
from modules.auth.routes import router as auth_router
from modules.catalog.routes import router as catalog_router
from modules.cart.routes import router as cart_router
from modules.customer.routes import router as address_router
from modules.order.routes import router as order_router
from modules.payment.routes import router as payment_router

logger = logging.getLogger("storefront")
scheduler_logger = logging.getLogger("storefront.scheduler")


# ==========================================
# Background Scheduler: Stale Online Order Cleanup
# ==========================================
def _cleanup_stale_orders(database: Database, gateway: BaseGateway, stale_after: timedelta):
    """Background job: drop unpaid online orders whose checkout session is no longer payable."""
    db = database.session()
    try:
        from modules.order.service import order_service
        count = order_service.release_stale_online_orders(db, gateway, stale_after)
        if count:
            scheduler_logger.info(f"Released {count} stale online orders")
    except Exception as e:
        db.rollback()
        scheduler_logger.error(f"Cleanup error: {e}")
    finally:
        db.close()


# ==========================================
# Exception handler: business errors → JSON
# ==========================================
async def storefront_exception_handler(request: Request, exc: StorefrontError):
    return JSONResponse(
        {"success": False, "message": exc.message, "error": exc.code},
        status_code=exc.status_code,
    )


# ==========================================
# Create App
# ==========================================
def create_app(settings: Optional[Settings] = None, gateway: Optional[BaseGateway] = None) -> FastAPI:
    """
    Build the app. Every connection-holding object (database, gateway,
    scheduler) is created here and released on shutdown; nothing is global.
    """
    settings = (settings or Settings.from_env()).validate()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(settings.DATABASE_URL).init()
        app.state.database = database
        app.state.gateway = gateway or StripeGateway(
            api_key=settings.STRIPE_SECRET_KEY,
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        )

        scheduler = None
        if settings.ORDER_SWEEP_ENABLED:
            scheduler = BackgroundScheduler()
            scheduler.add_job(
                _cleanup_stale_orders, "interval", minutes=30, id="stale_orders",
                args=[database, app.state.gateway, timedelta(hours=settings.STALE_ORDER_HOURS)],
            )
            scheduler.start()
            scheduler_logger.info(f"Background scheduler started (stale orders: 30m, >{settings.STALE_ORDER_HOURS}h)")

        yield

        if scheduler is not None:
            scheduler.shutdown()
            scheduler_logger.info("Background scheduler stopped")
        database.dispose()

    app = FastAPI(
        title="Storefront",
        description="Storefront orders and payments API",
        version=settings.VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_exception_handler(StorefrontError, storefront_exception_handler)

    # ==========================================
    # Register Routers
    # ==========================================
    app.include_router(auth_router)
    app.include_router(catalog_router)
    app.include_router(cart_router)
    app.include_router(address_router)
    app.include_router(order_router)
    app.include_router(payment_router)

    # ==========================================
    # Health check
    # ==========================================
    @app.get("/health")
    async def health():
        return {"status": "ok", "version": settings.VERSION}

    return app
