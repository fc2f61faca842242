"""
Storefront - Security Utilities
=================================
JWT tokens, password hashing and cookie settings.

NOTE: Customers and the seller use separate cookies (auth_token / seller_token)
signed with the same SECRET_KEY.
"""

import hmac
import logging
from datetime import timedelta
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from common.helpers import now_utc

logger = logging.getLogger("storefront.security")

USER_COOKIE = "auth_token"
SELLER_COOKIE = "seller_token"

password_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


# ==========================================
# Passwords
# ==========================================

def hash_password(password: str) -> str:
    return password_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not plain or not hashed:
        return False
    return password_context.verify(plain, hashed)


def constant_time_equals(a: str, b: str) -> bool:
    """Compare two secrets without leaking timing information."""
    return hmac.compare_digest((a or "").encode("utf-8"), (b or "").encode("utf-8"))


# ==========================================
# JWT Tokens
# ==========================================

def create_token(data: dict, secret_key: str, expire_minutes: int, algorithm: str = "HS256") -> str:
    """Create a signed JWT carrying `data` plus an expiry."""
    to_encode = data.copy()
    to_encode["exp"] = now_utc() + timedelta(minutes=expire_minutes)
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_token(token: str, secret_key: str, algorithm: str = "HS256") -> Optional[dict]:
    """Decode a JWT token. Returns payload or None."""
    try:
        return jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError:
        return None


# ==========================================
# Cookie Helpers
# ==========================================

def get_cookie_kwargs(settings) -> dict:
    """Standard cookie settings for auth tokens."""
    return dict(
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
