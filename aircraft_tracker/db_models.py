"""SQLAlchemy ORM models for tracked aircraft, positions and daily statistics."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from aircraft_tracker.db import Base


def _decimal(precision: int, scale: int) -> Numeric:
    return Numeric(precision, scale, asdecimal=False)


class Aircraft(Base):
    """One row per ICAO24 address ever classified as of interest."""

    __tablename__ = "aircraft"
    __table_args__ = (Index("idx_aircraft_last_seen", "last_seen"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    icao24: Mapped[str] = mapped_column(String(6), unique=True, nullable=False)
    callsign: Mapped[str | None] = mapped_column(String(20), nullable=True)
    origin_country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    registration: Mapped[str | None] = mapped_column(String(20), nullable=True)
    aircraft_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    first_seen: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    last_seen: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    total_sightings: Mapped[int] = mapped_column(Integer, default=1, nullable=False)


class Position(Base):
    """Append-only position sample for a tracked aircraft."""

    __tablename__ = "positions"
    __table_args__ = (
        Index("idx_positions_icao24", "icao24"),
        Index("idx_positions_timestamp", "timestamp"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    icao24: Mapped[str] = mapped_column(
        String(6), ForeignKey("aircraft.icao24", ondelete="CASCADE"), nullable=False
    )
    callsign: Mapped[str | None] = mapped_column(String(20), nullable=True)
    latitude: Mapped[float | None] = mapped_column(_decimal(10, 6), nullable=True)
    longitude: Mapped[float | None] = mapped_column(_decimal(10, 6), nullable=True)
    altitude: Mapped[float | None] = mapped_column(_decimal(10, 2), nullable=True)
    velocity: Mapped[float | None] = mapped_column(_decimal(10, 2), nullable=True)
    heading: Mapped[float | None] = mapped_column(_decimal(10, 2), nullable=True)
    vertical_rate: Mapped[float | None] = mapped_column(_decimal(10, 2), nullable=True)
    on_ground: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class DailyStats(Base):
    """Per-day aggregate recomputed on every ingestion cycle."""

    __tablename__ = "daily_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    day: Mapped[date] = mapped_column("date", Date, unique=True, nullable=False)
    unique_aircraft: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_positions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    military_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    civilian_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
