"""
Auth Module - Service Layer
=============================
Registration, login and seller credential checks.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from common.exceptions import ValidationError, AuthenticationError
from common.security import hash_password, verify_password, constant_time_equals
from modules.user.models import User

logger = logging.getLogger("storefront.auth")


def _require_strings(*values):
    """JSON bodies may carry numbers or objects where text is expected."""
    if any(value is not None and not isinstance(value, str) for value in values):
        raise ValidationError("Name, email and password must be text")


class AuthService:

    def register(self, db: Session, name: str, email: str, password: str) -> User:
        _require_strings(name, email, password)
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name or not email or not password:
            raise ValidationError("Missing details")
        if "@" not in email:
            raise ValidationError("Please enter a valid email")
        if len(password) < 8:
            raise ValidationError("Password must be at least 8 characters")

        if db.query(User.id).filter(User.email == email).first():
            raise ValidationError("User already exists")

        user = User(name=name, email=email, password_hash=hash_password(password))
        db.add(user)
        db.flush()
        logger.info(f"User #{user.id} registered")
        return user

    def login(self, db: Session, email: str, password: str) -> User:
        _require_strings(email, password)
        email = (email or "").strip().lower()
        if not email or not password:
            raise ValidationError("Email and password are required")

        user: Optional[User] = db.query(User).filter(User.email == email).first()
        if not user or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid email or password")
        return user

    def check_seller(self, settings, email: str, password: str) -> bool:
        email_ok = constant_time_equals((email or "").strip(), settings.SELLER_EMAIL)
        password_ok = constant_time_equals(password or "", settings.SELLER_PASSWORD)
        return email_ok and password_ok


auth_service = AuthService()
