"""Shared fixtures: a throwaway SQLite database and an Adapter on it."""
import pytest
from sqlalchemy import create_engine, text

from sqlrepository.db.adapter import Adapter

SCHEMA = [
    """
    CREATE TABLE baz (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      label TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE foo (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      name TEXT NOT NULL,
      status TEXT,
      baz_id INTEGER REFERENCES baz(id)
    )
    """,
]


@pytest.fixture()
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'repository_test.db'}")
    with engine.begin() as conn:
        for ddl in SCHEMA:
            conn.execute(text(ddl))
    yield engine
    engine.dispose()


@pytest.fixture()
def adapter(engine):
    adapter = Adapter(engine)
    yield adapter
    adapter.close()


@pytest.fixture()
def fetch_all(engine):
    """Read rows through a separate connection, bypassing the adapter."""

    def _fetch(sql, params=None):
        with engine.connect() as conn:
            return [dict(r) for r in conn.execute(text(sql), params or {}).mappings()]

    return _fetch
