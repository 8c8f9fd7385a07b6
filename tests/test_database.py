"""
Tests for the SQL layer with a recording stand-in for a psycopg connection.
"""

import datetime

import pytest
from psycopg.rows import dict_row

from station.constants import WEEKDAYS
from station.database import DatabaseManager, SCHEMA_STATEMENTS, episode_key
from station.errors import DatabaseUnavailable


class FakeCursor:
    def __init__(self, rows):
        self.rows = rows

    def fetchall(self):
        return list(self.rows)

    def fetchone(self):
        return self.rows[0] if self.rows else None


class FakeConnection:
    """Records every execute() and answers with the next queued result."""

    def __init__(self, results=None):
        self.results = list(results or [])
        self.executed = []
        self.connect_args = None

    def __call__(self, dsn, **kwargs):
        self.connect_args = (dsn, kwargs)
        return self

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, query, params=None):
        self.executed.append((" ".join(query.split()), params))
        return FakeCursor(self.results.pop(0) if self.results else [])


@pytest.fixture
def conn():
    return FakeConnection()


@pytest.fixture
def db(conn):
    return DatabaseManager("postgresql://indigo@localhost/indigo", connect=conn)


def test_missing_dsn_raises():
    with pytest.raises(DatabaseUnavailable):
        DatabaseManager(None).list_shows()


def test_connects_with_dict_rows(db, conn):
    db.list_shows()
    assert conn.connect_args == ("postgresql://indigo@localhost/indigo", {"row_factory": dict_row})


def test_init_schema_runs_every_statement(db, conn):
    db.init_schema()
    assert len(conn.executed) == len(SCHEMA_STATEMENTS)
    assert any("CREATE TABLE IF NOT EXISTS station_settings" in q for q, _ in conn.executed)


def test_list_shows(db, conn):
    conn.results = [[{"id": 2, "name": "Drive", "description": "Arvo"}]]
    shows = db.list_shows()
    assert shows[0].id == 2
    assert shows[0].name == "Drive"
    assert "ORDER BY name ASC" in conn.executed[0][0]


def test_create_show_trims(db, conn):
    conn.results = [[{"id": 5, "name": "Jazz", "description": ""}]]
    show = db.create_show("  Jazz ", None)
    assert show.id == 5
    assert conn.executed[0][1] == ("Jazz", "")


def test_update_show_missing_returns_none(db, conn):
    assert db.update_show(9, "x", None) is None
    assert conn.executed[0][1] == ("x", "", 9)


def test_delete_show(db, conn):
    conn.results = [[{"id": 3}]]
    assert db.delete_show(3) is True
    assert db.delete_show(3) is False


def test_directory_filters(db, conn):
    conn.results = [[{
        "show_id": "morning-glory", "name": "Morning Glory", "frequency": "Weekly",
        "hosts": ["Ann"], "genres": ["jazz"], "themes": [], "features": [],
        "featured_artists": [], "segments": [{"name": "News", "description": "Headlines"}],
    }]]
    shows = db.search_show_directory(genre="jazz", search="glory", offset=10, limit=5)
    query, params = conn.executed[0]
    assert params == {"frequency": None, "genre": "%jazz%", "search": "%glory%", "offset": 10, "limit": 5}
    assert "OFFSET %(offset)s" in query
    assert shows[0].hosts == ["Ann"]
    assert shows[0].segments[0].name == "News"


def test_episode_id_compared_as_text(db, conn):
    db.delete_episode(" 0042 ")
    query, params = conn.executed[0]
    assert "id::text = %s OR id::text = %s" in query
    assert params == ("0042", "42")


def test_leading_zero_episode_id_round_trips(db, conn):
    conn.results = [[{"id": "007", "url": "u", "title": "t", "show": "s", "description": ""}]]
    created = db.create_episode("007", "u", "t", "s")
    stored_id = conn.executed[0][1][0]
    assert created.id == "007"

    db.update_episode("007", "u2", "t", "s", "")
    db.delete_episode("007")
    assert stored_id in conn.executed[1][1][-2:]
    assert stored_id in conn.executed[2][1]


def test_episode_key():
    assert episode_key(7) == "7"
    assert episode_key("007") == "7"
    assert episode_key(" ep-1 ") == "ep-1"


def test_list_episodes_converts_timestamps(db, conn):
    conn.results = [[{"id": "ep1", "url": "u", "title": "t", "show": "s", "description": None,
                      "created_at": datetime.datetime(2024, 5, 1, 8, 30)}]]
    episode = db.list_episodes()[0]
    assert episode.description == ""
    assert episode.created_at == "2024-05-01T08:30:00"


def test_list_programme_orders_by_weekday(db, conn):
    conn.results = [[{"id": 1, "name": "Breakfast", "day": "monday",
                      "start_time": "06:00", "end_time": "09:00"}]]
    entries = db.list_programme()
    query, params = conn.executed[0]
    assert "array_position(%s::text[], day)" in query
    assert params == (WEEKDAYS,)
    assert entries[0].start_time == "06:00"


def test_update_programme_defaults(db, conn):
    db.update_programme(4, None, None, None, None)
    assert conn.executed[0][1] == ("", "", "00:00", "00:00", 4)


def test_settings(db, conn):
    conn.results = [[{"value": "https://radio.example/stream"}]]
    assert db.get_setting("radio_address") == "https://radio.example/stream"
    assert db.get_setting("radio_address") is None

    db.set_setting("radio_address", "https://other.example/stream")
    query, params = conn.executed[-1]
    assert "ON CONFLICT (key) DO UPDATE" in query
    assert params == ("radio_address", "https://other.example/stream")
