"""
Auth Module - Dependencies
===========================
FastAPI dependencies for user and seller authentication.
These are injected into route handlers via Depends().
"""

from fastapi import Request, Depends, HTTPException, status
from sqlalchemy.orm import Session

from config.database import get_db
from config.settings import Settings, get_settings
from common.helpers import safe_int
from common.security import decode_token, constant_time_equals, USER_COOKIE, SELLER_COOKIE
from modules.user.models import User


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Identify the current user from the auth_token cookie.
    Returns User object or None.
    """
    token = request.cookies.get(USER_COOKIE)
    if not token:
        return None

    payload = decode_token(token, settings.SECRET_KEY, settings.ALGORITHM)
    if not payload:
        return None

    user_id = safe_int(payload.get("sub"))
    if user_id is None:
        return None

    return db.query(User).filter(User.id == user_id).first()


def require_user(user=Depends(get_current_user)):
    """Require an authenticated user. Raises 401 if not logged in."""
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user


def get_current_seller(request: Request, settings: Settings = Depends(get_settings)):
    """Seller email from the seller_token cookie, or None."""
    token = request.cookies.get(SELLER_COOKIE)
    if not token:
        return None
    payload = decode_token(token, settings.SECRET_KEY, settings.ALGORITHM)
    if not payload:
        return None
    email = payload.get("email")
    if not email or not constant_time_equals(email, settings.SELLER_EMAIL):
        return None
    return email


def require_seller(seller=Depends(get_current_seller)):
    """Only allow the configured seller. Raises 401 otherwise."""
    if not seller:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return seller
