"""
Auth Routes
=============
Customer register/login/logout and seller login/logout (JWT cookies).
Business errors propagate to the app-level StorefrontError handler.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.database import get_db
from config.settings import Settings, get_settings
from common.exceptions import AuthenticationError
from common.security import create_token, get_cookie_kwargs, USER_COOKIE, SELLER_COOKIE
from modules.auth.deps import require_user, require_seller
from modules.auth.service import auth_service
from modules.cart.service import cart_service

router = APIRouter(tags=["auth"])


def _user_payload(db: Session, user) -> dict:
    cart_map, _ = cart_service.get_cart_map(db, user.id)
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "cartItems": {str(pid): qty for pid, qty in cart_map.items()},
    }


def _login_response(db: Session, user, settings: Settings, message: str) -> JSONResponse:
    token = create_token(
        {"sub": str(user.id)}, settings.SECRET_KEY,
        settings.ACCESS_TOKEN_EXPIRE_MINUTES, settings.ALGORITHM,
    )
    response = JSONResponse({"success": True, "message": message, "user": _user_payload(db, user)})
    response.set_cookie(USER_COOKIE, token, **get_cookie_kwargs(settings))
    return response


# ==========================================
# 👤 Customer
# ==========================================

@router.post("/user/register")
async def register(
    data: Dict[str, Any],
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = auth_service.register(db, data.get("name"), data.get("email"), data.get("password"))
    db.commit()
    return _login_response(db, user, settings, "Account created")


@router.post("/user/login")
async def login(
    data: Dict[str, Any],
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = auth_service.login(db, data.get("email"), data.get("password"))
    return _login_response(db, user, settings, "Logged in")


@router.get("/user/is-auth")
async def user_is_auth(db: Session = Depends(get_db), me=Depends(require_user)):
    return {"success": True, "user": _user_payload(db, me)}


@router.get("/user/logout")
async def user_logout(settings: Settings = Depends(get_settings)):
    response = JSONResponse({"success": True, "message": "Logged out"})
    response.delete_cookie(USER_COOKIE, httponly=True, secure=settings.COOKIE_SECURE, samesite=settings.COOKIE_SAMESITE)
    return response


# ==========================================
# 🏪 Seller
# ==========================================

@router.post("/seller/login")
async def seller_login(data: Dict[str, Any], settings: Settings = Depends(get_settings)):
    email, password = data.get("email"), data.get("password")
    if not isinstance(email, str) or not isinstance(password, str):
        raise AuthenticationError("Invalid credentials")
    email = email.strip()
    if not auth_service.check_seller(settings, email, password):
        raise AuthenticationError("Invalid credentials")

    token = create_token(
        {"email": email}, settings.SECRET_KEY,
        settings.ACCESS_TOKEN_EXPIRE_MINUTES, settings.ALGORITHM,
    )
    response = JSONResponse({"success": True, "message": "Logged in"})
    response.set_cookie(SELLER_COOKIE, token, **get_cookie_kwargs(settings))
    return response


@router.get("/seller/is-auth")
async def seller_is_auth(seller=Depends(require_seller)):
    return {"success": True}


@router.get("/seller/logout")
async def seller_logout(settings: Settings = Depends(get_settings)):
    response = JSONResponse({"success": True, "message": "Logged out"})
    response.delete_cookie(SELLER_COOKIE, httponly=True, secure=settings.COOKIE_SECURE, samesite=settings.COOKIE_SAMESITE)
    return response
