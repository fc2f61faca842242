"""
Storefront - Centralized Configuration
========================================
All environment variables and constants are loaded here.
No other module should call os.getenv() directly.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv
from fastapi import Request

load_dotenv()

REQUIRED_KEYS = (
    "SECRET_KEY", "STRIPE_SECRET_KEY", "STRIPE_WEBHOOK_SECRET",
    "SELLER_EMAIL", "SELLER_PASSWORD",
)


def _env_bool(key: str, default: str = "false") -> bool:
    return os.getenv(key, default).lower() == "true"


@dataclass(frozen=True)
class Settings:
    # ==========================================
    # 🗄️ Database
    # ==========================================
    DATABASE_URL: str = "sqlite:///./storefront.db"

    # ==========================================
    # 🔐 Security
    # ==========================================
    SECRET_KEY: str = ""
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days
    COOKIE_SECURE: bool = False
    COOKIE_SAMESITE: str = "lax"

    # Seller (operator) credentials
    SELLER_EMAIL: str = ""
    SELLER_PASSWORD: str = ""

    # ==========================================
    # 💳 Payment Gateway (Stripe)
    # ==========================================
    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    CURRENCY: str = "usd"

    # Fallback redirect origin when the request has no Origin header
    FRONTEND_URL: str = "http://localhost:5173"

    # ==========================================
    # 🔧 App
    # ==========================================
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    VERSION: str = "1.0.0"

    # Stale unpaid online orders (hosted sessions live at most 24h)
    ORDER_SWEEP_ENABLED: bool = True
    STALE_ORDER_HOURS: int = 24

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///./storefront.db"),
            SECRET_KEY=os.getenv("SECRET_KEY", ""),
            ACCESS_TOKEN_EXPIRE_MINUTES=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES") or 60 * 24 * 7),
            COOKIE_SECURE=_env_bool("COOKIE_SECURE"),
            COOKIE_SAMESITE=os.getenv("COOKIE_SAMESITE", "lax"),
            SELLER_EMAIL=os.getenv("SELLER_EMAIL", ""),
            SELLER_PASSWORD=os.getenv("SELLER_PASSWORD", ""),
            STRIPE_SECRET_KEY=os.getenv("STRIPE_SECRET_KEY", ""),
            STRIPE_WEBHOOK_SECRET=os.getenv("STRIPE_WEBHOOK_SECRET", ""),
            CURRENCY=os.getenv("CURRENCY", "usd").lower(),
            FRONTEND_URL=os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/"),
            DEBUG=_env_bool("DEBUG"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
            ORDER_SWEEP_ENABLED=_env_bool("ORDER_SWEEP_ENABLED", "true"),
            STALE_ORDER_HOURS=int(os.getenv("STALE_ORDER_HOURS") or 24),
        )

    def validate(self) -> "Settings":
        """Raise RuntimeError listing every critical key that is empty."""
        missing = [key for key in REQUIRED_KEYS if not getattr(self, key)]
        if missing:
            raise RuntimeError(f"Critical config missing in .env: {', '.join(missing)}")
        return self


def get_settings(request: Request) -> Settings:
    """FastAPI dependency: the Settings the running app was built with."""
    return request.app.state.settings
