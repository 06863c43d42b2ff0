"""Shared fixtures: an in-memory SQLite engine, a seeding helper and an event bus."""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine, delete, event
from sqlalchemy.orm import Session

from nplusone_control.config import ControlConfig
from nplusone_control.sources import EventBus

from .orm_models import Base, Order, User

CHANNEL = "sql.query"


@pytest.fixture
def engine():
    """Function-scoped :memory: SQLite engine with FK enforcement."""
    eng = create_engine("sqlite:///:memory:")

    @event.listens_for(eng, "connect")
    def _set_fk_pragma(dbapi_conn, _):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def seed_orders(engine):
    """Replace the dataset with ``scale`` users, each owning one order."""

    def _seed(scale: int) -> None:
        with Session(engine) as sess:
            sess.execute(delete(Order))
            sess.execute(delete(User))
            for i in range(scale):
                user = User(name=f"user-{i}")
                sess.add(user)
                sess.add(Order(user=user, total=i * 10))
            sess.commit()

    return _seed


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def bus_config() -> ControlConfig:
    """Explicit defaults on the test channel, independent of NPLUSONE_* env vars."""
    return ControlConfig(event=CHANNEL)
