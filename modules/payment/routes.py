"""
Payment Routes
================
Gateway webhook. Unauthenticated: trust comes from the signature header.
"""

import logging

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.database import get_db
from config.settings import Settings, get_settings
from common.exceptions import (
    SignatureVerificationError, MalformedNotificationError, NotFoundError,
)
from modules.payment.gateways import BaseGateway, get_gateway
from modules.payment.service import payment_service

logger = logging.getLogger("storefront.payment")

router = APIRouter(prefix="/order", tags=["payment"])


@router.post("/webhook")
async def payment_webhook(
    request: Request,
    db: Session = Depends(get_db),
    gateway: BaseGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    """Raw body + stripe-signature header. 400 bad signature / metadata, 404 unknown order, 500 otherwise."""
    payload = await request.body()
    signature = request.headers.get("stripe-signature")

    try:
        result = payment_service.handle_notification(db, gateway, payload, signature)
    except SignatureVerificationError as e:
        logger.warning(f"Webhook rejected: {e.message}")
        return JSONResponse({"received": False, "error": e.message}, status_code=400)
    except MalformedNotificationError as e:
        db.rollback()
        return JSONResponse({"received": False, "error": e.message}, status_code=400)
    except NotFoundError as e:
        db.rollback()
        logger.warning(f"Webhook for unknown order: {e.message}")
        return JSONResponse({"received": False, "error": e.message}, status_code=404)
    except Exception as e:
        db.rollback()
        logger.exception("Webhook processing failed")
        body = {"received": False, "error": "Webhook processing failed"}
        if settings.DEBUG:
            body["message"] = str(e)
        return JSONResponse(body, status_code=500)

    return result
