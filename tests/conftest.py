from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import aircraft_tracker.db_models  # noqa: F401 - register tables
from aircraft_tracker.db import Base


class ManualClock:
    """Callable clock that tests advance explicitly."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 5, 3, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path}/tracker.db", connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def anyio_backend():
    return "asyncio"
