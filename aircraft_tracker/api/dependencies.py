"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from aircraft_tracker.db import get_db
from aircraft_tracker.services.store import TrackingStore


def get_store(db: Session = Depends(get_db)) -> TrackingStore:
    """Wrap the request-scoped session in the persistence adapter."""

    return TrackingStore(db)
