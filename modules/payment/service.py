"""
Payment Service
=================
Applies verified gateway notifications to the order ledger.

Signature verification happens before anything is read from the payload.
Every transition is replay-safe: the gateway may redeliver a notification
any number of times, concurrently or not.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from common.exceptions import MalformedNotificationError, PersistenceError
from common.helpers import safe_int
from modules.order.service import order_service
from modules.payment.gateways import BaseGateway
from modules.payment.schemas import WebhookNotification
from modules.payment.state_machine import NotificationKind, classify, state_of, transition

logger = logging.getLogger("storefront.payment")


class PaymentService:

    def handle_notification(
        self, db: Session, gateway: BaseGateway, payload: bytes, signature: Optional[str]
    ) -> Dict[str, Any]:
        """
        Verify and apply one webhook notification.

        Raises SignatureVerificationError (nothing was read or written),
        MalformedNotificationError, NotFoundError or PersistenceError.
        """
        notification = gateway.parse_notification(payload, signature)
        kind = classify(notification.type)
        logger.info(f"Webhook received: {notification.type} ({notification.id or 'no id'})")

        try:
            if kind == NotificationKind.COMPLETED:
                return self._on_completed(db, notification)
            if kind == NotificationKind.EXPIRED:
                return self._on_expired(db, notification)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Webhook {notification.type} ({notification.id}) failed to persist: {e}")
            raise PersistenceError("Could not update the order")

        logger.info(f"Unhandled event type: {notification.type}")
        return {"received": True, "processed": False}

    # ==========================================
    # checkout.session.completed
    # ==========================================

    def _on_completed(self, db: Session, notification: WebhookNotification) -> Dict[str, Any]:
        meta = notification.metadata
        order_id = safe_int(meta.order_id)
        user_id = safe_int(meta.user_id)
        if order_id is None or user_id is None:
            logger.warning(f"Completed session {notification.session.id} without orderId/userId metadata")
            raise MalformedNotificationError("Missing required metadata")

        order = order_service.get_order(db, order_id)
        if order is not None:
            if order.user_id != user_id:
                raise MalformedNotificationError("Metadata does not match the order")
            if not order.is_online:
                logger.warning(f"Order #{order_id} is not an online order, completion ignored")
                return {"received": True, "processed": False}

        step = transition(state_of(order), NotificationKind.COMPLETED, order_id)
        if not step.mark_paid:
            logger.info(f"Order #{order_id} already paid, nothing to do")
            return {"received": True, "processed": True}

        newly_paid = order_service.confirm_payment(db, order_id, notification.session.id)
        db.commit()

        if not newly_paid:
            # Another delivery confirmed it between our read and the update
            logger.info(f"Order #{order_id} confirmed by a concurrent delivery")
            return {"received": True, "processed": True}

        logger.info(f"Order #{order_id} paid (session {notification.session.id})")
        if step.clear_cart:
            order_service.clear_cart_quietly(db, user_id)
        return {"received": True, "processed": True}

    # ==========================================
    # checkout.session.expired
    # ==========================================

    def _on_expired(self, db: Session, notification: WebhookNotification) -> Dict[str, Any]:
        order_id = safe_int(notification.metadata.order_id)
        if order_id is None:
            logger.info(f"Expired session {notification.session.id} without orderId, ignored")
            return {"received": True, "processed": False}

        order = order_service.get_order(db, order_id)
        if order is not None and not order.is_online:
            logger.warning(f"Order #{order_id} is not an online order, expiry ignored")
            return {"received": True, "processed": False}

        step = transition(state_of(order), NotificationKind.EXPIRED, order_id)
        if not step.delete_order:
            logger.info(f"Order #{order_id} already {step.state.value}, expiry ignored")
            return {"received": True, "processed": True}

        deleted = order_service.delete_unpaid_online_order(db, order_id)
        db.commit()
        if deleted:
            logger.info(f"Expired order #{order_id} deleted")
        return {"received": True, "processed": True}


payment_service = PaymentService()
