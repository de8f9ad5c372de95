"""Persistence adapter over the aircraft, positions and daily_stats tables."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
import logging
from typing import Callable, Optional

from sqlalchemy import and_, func, text
from sqlalchemy.orm import Session

from aircraft_tracker import db_models
from aircraft_tracker.config import settings

logger = logging.getLogger("aircraft_tracker.store")

Clock = Callable[[], datetime]


@dataclass
class IdentifierSummary:
    """Aircraft seen in a window with its latest callsign and known type."""

    icao24: str
    callsign: Optional[str]
    aircraft_type: Optional[str]


@dataclass
class DayCounts:
    icao24s: list[str]
    total_positions: int

    @property
    def unique_aircraft(self) -> int:
        return len(self.icao24s)


@dataclass
class HourBucket:
    hour: datetime
    unique_aircraft: int
    positions: int


@dataclass
class HeatCell:
    lat: float
    lng: float
    intensity: int


class TrackingStore:
    """Keyed upsert, append, range query and retention delete over a session.

    Write methods do not commit; callers decide the transaction boundary so
    one aircraft's upsert and position insert succeed or fail together.
    """

    def __init__(
        self,
        db: Session,
        *,
        origin_country: str | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.db = db
        self.origin_country = origin_country or settings.origin_country
        self._clock = clock or datetime.utcnow

    def now(self) -> datetime:
        return self._clock()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    # ----- Write side -----

    def upsert_aircraft(
        self,
        icao24: str,
        callsign: str | None = None,
        aircraft_type: str | None = None,
        registration: str | None = None,
    ) -> db_models.Aircraft:
        icao24 = icao24.lower()
        now = self.now()
        record = self.db.query(db_models.Aircraft).filter_by(icao24=icao24).one_or_none()
        if record is None:
            record = db_models.Aircraft(
                icao24=icao24,
                callsign=callsign,
                origin_country=self.origin_country,
                registration=registration,
                aircraft_type=aircraft_type,
                first_seen=now,
                last_seen=now,
                total_sightings=1,
            )
            self.db.add(record)
        else:
            if callsign is not None:
                record.callsign = callsign
            if aircraft_type is not None:
                record.aircraft_type = aircraft_type
            if registration is not None:
                record.registration = registration
            record.last_seen = max(record.last_seen, now)
            record.total_sightings = (record.total_sightings or 0) + 1
        self.db.flush()
        return record

    def insert_position(
        self,
        icao24: str,
        callsign: str | None,
        latitude: float,
        longitude: float,
        altitude: float | None = None,
        velocity: float | None = None,
        heading: float | None = None,
        vertical_rate: float | None = None,
        on_ground: bool = False,
    ) -> db_models.Position:
        if latitude is None or longitude is None:
            raise ValueError("positions require both latitude and longitude")

        position = db_models.Position(
            icao24=icao24.lower(),
            callsign=callsign,
            latitude=latitude,
            longitude=longitude,
            altitude=altitude,
            velocity=velocity,
            heading=heading,
            vertical_rate=vertical_rate,
            on_ground=on_ground,
            timestamp=self.now(),
        )
        self.db.add(position)
        self.db.flush()
        return position

    def delete_older_than(self, window: timedelta) -> int:
        cutoff = self.now() - window
        deleted = (
            self.db.query(db_models.Position)
            .filter(db_models.Position.timestamp < cutoff)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted or 0

    def delete_all(self) -> tuple[int, int]:
        """Remove every position and aircraft row; returns both counts."""

        positions = self.db.query(db_models.Position).delete(synchronize_session=False)
        aircraft = self.db.query(db_models.Aircraft).delete(synchronize_session=False)
        self.db.commit()
        return positions or 0, aircraft or 0

    def upsert_daily_aggregate(
        self,
        day: date,
        unique_aircraft: int,
        total_positions: int,
        military_count: int = 0,
        civilian_count: int = 0,
    ) -> db_models.DailyStats:
        row = self.db.query(db_models.DailyStats).filter_by(day=day).one_or_none()
        if row is None:
            row = db_models.DailyStats(day=day, created_at=self.now())
            self.db.add(row)
        row.unique_aircraft = unique_aircraft
        row.total_positions = total_positions
        row.military_count = military_count
        row.civilian_count = civilian_count
        self.db.commit()
        return row

    # ----- Range queries -----

    def _latest_per_aircraft(self, cutoff: datetime):
        latest = (
            self.db.query(
                db_models.Position.icao24.label("icao24"),
                func.max(db_models.Position.timestamp).label("latest"),
            )
            .filter(db_models.Position.timestamp > cutoff)
            .group_by(db_models.Position.icao24)
            .subquery()
        )
        return and_(
            db_models.Position.icao24 == latest.c.icao24,
            db_models.Position.timestamp == latest.c.latest,
        ), latest

    def distinct_identifiers_since(self, window: timedelta) -> list[IdentifierSummary]:
        condition, latest = self._latest_per_aircraft(self.now() - window)
        rows = (
            self.db.query(
                db_models.Position.icao24,
                db_models.Position.callsign,
                db_models.Aircraft.aircraft_type,
            )
            .join(latest, condition)
            .outerjoin(db_models.Aircraft, db_models.Aircraft.icao24 == db_models.Position.icao24)
            .order_by(db_models.Position.icao24, db_models.Position.id.desc())
            .all()
        )

        summaries: list[IdentifierSummary] = []
        seen: set[str] = set()
        for icao24, callsign, aircraft_type in rows:
            if icao24 in seen:
                continue
            seen.add(icao24)
            summaries.append(IdentifierSummary(icao24, callsign, aircraft_type))
        return summaries

    def positions_since(self, icao24: str, window: timedelta) -> list[db_models.Position]:
        cutoff = self.now() - window
        return (
            self.db.query(db_models.Position)
            .filter(
                db_models.Position.icao24 == icao24.lower(),
                db_models.Position.timestamp > cutoff,
            )
            .order_by(db_models.Position.timestamp.asc(), db_models.Position.id.asc())
            .all()
        )

    def live_aircraft(
        self, window: timedelta
    ) -> list[tuple[db_models.Position, db_models.Aircraft]]:
        condition, latest = self._latest_per_aircraft(self.now() - window)
        rows = (
            self.db.query(db_models.Position, db_models.Aircraft)
            .join(latest, condition)
            .join(db_models.Aircraft, db_models.Aircraft.icao24 == db_models.Position.icao24)
            .order_by(db_models.Position.icao24, db_models.Position.id.desc())
            .all()
        )
        unique: dict[str, tuple[db_models.Position, db_models.Aircraft]] = {}
        for position, aircraft in rows:
            unique.setdefault(position.icao24, (position, aircraft))
        return list(unique.values())

    def count_day(self, day: date) -> DayCounts:
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)
        in_day = and_(
            db_models.Position.timestamp >= start, db_models.Position.timestamp < end
        )
        icao24s = [
            row[0]
            for row in self.db.query(db_models.Position.icao24).filter(in_day).distinct().all()
        ]
        total = self.db.query(func.count(db_models.Position.id)).filter(in_day).scalar() or 0
        return DayCounts(icao24s=icao24s, total_positions=int(total))

    # ----- Reporting -----

    def list_aircraft(self, limit: int = 100, offset: int = 0) -> list[db_models.Aircraft]:
        return (
            self.db.query(db_models.Aircraft)
            .order_by(db_models.Aircraft.last_seen.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )

    def get_aircraft(self, icao24: str) -> db_models.Aircraft | None:
        return self.db.query(db_models.Aircraft).filter_by(icao24=icao24.lower()).one_or_none()

    def count_aircraft(self) -> int:
        return self.db.query(func.count(db_models.Aircraft.id)).scalar() or 0

    def count_positions(self) -> int:
        return self.db.query(func.count(db_models.Position.id)).scalar() or 0

    def count_distinct_since(self, window: timedelta) -> int:
        cutoff = self.now() - window
        return (
            self.db.query(func.count(func.distinct(db_models.Position.icao24)))
            .filter(db_models.Position.timestamp > cutoff)
            .scalar()
            or 0
        )

    def top_aircraft(self, limit: int = 10) -> list[db_models.Aircraft]:
        return (
            self.db.query(db_models.Aircraft)
            .order_by(db_models.Aircraft.total_sightings.desc())
            .limit(limit)
            .all()
        )

    def daily_stats(self, days: int) -> list[db_models.DailyStats]:
        since = self.now().date() - timedelta(days=days)
        return (
            self.db.query(db_models.DailyStats)
            .filter(db_models.DailyStats.day > since)
            .order_by(db_models.DailyStats.day.desc())
            .all()
        )

    def hourly_activity(self, day: date) -> list[HourBucket]:
        start = datetime.combine(day, time.min)
        if self.db.get_bind().dialect.name == "postgresql":
            bucket = func.date_trunc("hour", db_models.Position.timestamp)
        else:
            bucket = func.strftime("%Y-%m-%d %H:00:00", db_models.Position.timestamp)
        bucket = bucket.label("hour")

        rows = (
            self.db.query(
                bucket,
                func.count(func.distinct(db_models.Position.icao24)),
                func.count(db_models.Position.id),
            )
            .filter(db_models.Position.timestamp >= start)
            .group_by(bucket)
            .order_by(bucket.asc())
            .all()
        )
        return [
            HourBucket(
                hour=hour if isinstance(hour, datetime) else datetime.fromisoformat(hour),
                unique_aircraft=int(unique),
                positions=int(count),
            )
            for hour, unique, count in rows
        ]

    def heatmap(self, window: timedelta, limit: int = 500) -> list[HeatCell]:
        cutoff = self.now() - window
        lat = func.round(db_models.Position.latitude, 1).label("lat")
        lng = func.round(db_models.Position.longitude, 1).label("lng")
        intensity = func.count(db_models.Position.id).label("intensity")
        rows = (
            self.db.query(lat, lng, intensity)
            .filter(
                db_models.Position.timestamp > cutoff,
                db_models.Position.latitude.isnot(None),
                db_models.Position.longitude.isnot(None),
            )
            .group_by(lat, lng)
            .order_by(intensity.desc())
            .limit(limit)
            .all()
        )
        return [HeatCell(lat=float(r[0]), lng=float(r[1]), intensity=int(r[2])) for r in rows]

    def database_size(self) -> str | None:
        if self.db.get_bind().dialect.name != "postgresql":
            return None
        return self.db.execute(
            text("SELECT pg_size_pretty(pg_database_size(current_database()))")
        ).scalar()


__all__ = [
    "DayCounts",
    "HeatCell",
    "HourBucket",
    "IdentifierSummary",
    "TrackingStore",
]
