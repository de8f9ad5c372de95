"""Database configuration and helpers for the aircraft tracker."""

from __future__ import annotations

import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from aircraft_tracker.config import settings

DATABASE_URL = settings.db_url

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

logger = logging.getLogger("aircraft_tracker.db")


def get_db() -> Generator:
    """Yield a SQLAlchemy session and ensure it is closed."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create database tables and indexes if they do not exist."""

    import aircraft_tracker.db_models  # noqa: F401 - models are imported for side effects

    Base.metadata.create_all(bind=engine)
    logger.debug("Tables ensured on %s", engine.url.render_as_string(hide_password=True))
