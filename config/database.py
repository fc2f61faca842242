"""
Storefront - Database Configuration
=====================================
Database handle (engine + session factory), Base, and get_db dependency.
All models across all modules inherit from this Base.
"""

import logging

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from sqlalchemy.pool import StaticPool

logger = logging.getLogger("storefront.database")

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the engine for one application instance. init() before use, dispose() on shutdown."""

    def __init__(self, url: str):
        self.url = url
        self.engine = None
        self._session_factory = None

    def init(self) -> "Database":
        if self.url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if ":memory:" in self.url or self.url in ("sqlite://", "sqlite:///"):
                kwargs["poolclass"] = StaticPool
            self.engine = create_engine(self.url, **kwargs)
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        else:
            self.engine = create_engine(
                self.url,
                pool_size=20,
                max_overflow=40,
                pool_timeout=30,
                pool_recycle=1800,  # Refresh connections every 30 minutes
            )

        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        # Auto-create any missing tables (safe for existing tables)
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database ready")
        return self

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database.init() has not been called")
        return self._session_factory()

    def dispose(self):
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            self._session_factory = None
            logger.info("Database disposed")


def get_db(request: Request):
    """FastAPI dependency: yields a database session, auto-closes after request."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
