import os

# keep the module-level engine off postgres during tests
os.environ.setdefault("DB_URL", "sqlite://")

import pytest
from sqlalchemy.orm import sessionmaker

from fnstats import models
from fnstats.crud import SqlStatsStore
from fnstats.database import init_db, make_engine
from tests.helpers import add_player


@pytest.fixture
def session_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'stats.db'}")
    init_db(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(session_factory):
    return SqlStatsStore(session_factory)


@pytest.fixture
def tournament(db):
    """One tournament, two matches; Alice and bob play both under per-match raw keys."""
    db.add(models.EventWindow(event_window_id="cup-1", total_matches=2, processed_matches=2))
    db.add(models.Match(match_id="m1", event_window_id="cup-1"))
    db.add(models.Match(match_id="m2", event_window_id="cup-1"))
    db.add(models.Weapon(event_window_id="cup-1", weapon_id="w-ar", weapon_type="AR"))
    db.add(models.Weapon(event_window_id="cup-1", weapon_id="w-sg", weapon_type="Shotgun"))
    db.flush()
    add_player(db, "X", "m1", "p1", "Alice")
    add_player(db, "B1", "m1", "p2", "bob")
    add_player(db, "Y", "m2", "p1", "Alice")
    add_player(db, "B2", "m2", "p2", "bob")
    db.commit()
    return "cup-1"
