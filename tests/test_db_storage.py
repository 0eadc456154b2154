"""Tests for database schema creation and LocalStorage."""

import pytest

from sehati.db import LocalStorage
from sehati.db.schema import _SCHEMA_VERSION, ensure_schema


def test_ensure_schema_creates_tables(tmp_path):
    conn = ensure_schema(tmp_path / "test.db")

    tables = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
    ).fetchall()
    table_names = {row["name"] for row in tables}

    assert table_names == {"local_storage"}
    conn.close()


def test_ensure_schema_creates_parent_dirs(tmp_path):
    db_path = tmp_path / "sub" / "dir" / "test.db"
    conn = ensure_schema(db_path)
    assert db_path.exists()
    conn.close()


def test_ensure_schema_idempotent(tmp_path):
    db_path = tmp_path / "test.db"
    ensure_schema(db_path).close()

    conn = ensure_schema(db_path)
    conn.execute("INSERT INTO local_storage (key, value) VALUES ('k', 'v')")
    conn.commit()
    conn.close()

    conn = ensure_schema(db_path)
    (version,) = conn.execute("PRAGMA user_version").fetchone()
    assert version == _SCHEMA_VERSION
    assert conn.execute("SELECT value FROM local_storage").fetchone()["value"] == "v"
    conn.close()


def test_ensure_schema_wal_mode(tmp_path):
    conn = ensure_schema(tmp_path / "test.db")
    mode = conn.execute("PRAGMA journal_mode").fetchone()
    assert mode[0] == "wal"
    conn.close()


@pytest.fixture
def storage(tmp_path):
    s = LocalStorage(db_path=tmp_path / "storage.db")
    yield s
    s.close()


def test_get_missing_item(storage):
    assert storage.get_item("nothing") is None


def test_set_and_get_item(storage):
    storage.set_item("sehati_history", "[]")
    assert storage.get_item("sehati_history") == "[]"


def test_set_item_overwrites(storage):
    storage.set_item("k", "first")
    storage.set_item("k", "second")
    assert storage.get_item("k") == "second"


def test_value_survives_reopen(tmp_path):
    db_path = tmp_path / "storage.db"
    first = LocalStorage(db_path)
    first.set_item("k", "صحتي")
    first.close()

    second = LocalStorage(db_path)
    assert second.get_item("k") == "صحتي"
    second.close()
