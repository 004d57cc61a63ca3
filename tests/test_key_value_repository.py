"""
Unit tests for the key-value storage layer.
Tests get/set on the SQLite backend and error wrapping.
"""
import sqlite3
from unittest.mock import patch

import pytest

from nutricare.core.exceptions import PersistenceReadError, PersistenceWriteError
from nutricare.repositories import Database, KeyValueRepository


def test_get_absent_key_returns_none(kv_repo):
    """Test reading an absent key returns None."""
    assert kv_repo.get("patients") is None


def test_set_then_get(kv_repo):
    """Test a stored value can be read back."""
    kv_repo.set("patients", "[]")
    assert kv_repo.get("patients") == "[]"


def test_set_replaces_prior_value(kv_repo):
    """Test writing a key replaces its previous value."""
    kv_repo.set("patients", "first")
    kv_repo.set("patients", "second")

    assert kv_repo.get("patients") == "second"


def test_keys_are_independent(kv_repo):
    """Test different keys hold different values."""
    kv_repo.set("a", "1")
    kv_repo.set("b", "2")

    assert kv_repo.get("a") == "1"
    assert kv_repo.get("b") == "2"


def test_unicode_round_trip(kv_repo):
    """Test non-ASCII text is stored unchanged."""
    text = '[{"name": "Márcia Conceição"}]'
    kv_repo.set("patients", text)
    assert kv_repo.get("patients") == text


def test_value_survives_new_database_instance(temp_db):
    """Test values persist across database instances."""
    KeyValueRepository(db=temp_db).set("patients", "persisted")

    reopened = Database(db_path=temp_db.db_path)

    assert KeyValueRepository(db=reopened).get("patients") == "persisted"


def test_set_records_update_time(kv_repo, temp_db):
    """Test writes record a UTC update time."""
    kv_repo.set("patients", "[]")

    conn = temp_db.get_connection()
    row = conn.execute("SELECT updated_at FROM key_value WHERE key = ?", ("patients",)).fetchone()
    conn.close()

    assert row[0].endswith("Z")


def test_database_uses_configured_busy_timeout(temp_db):
    """Test connections use the configured busy timeout."""
    db = Database(db_path=temp_db.db_path, busy_timeout=1234)

    conn = db.get_connection()
    timeout = conn.execute("PRAGMA busy_timeout").fetchone()[0]
    conn.close()

    assert timeout == 1234


def test_database_enables_wal(temp_db):
    """Test the database uses WAL journal mode."""
    conn = temp_db.get_connection()
    mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
    conn.close()

    assert mode.lower() == "wal"


def test_get_wraps_sqlite_errors(kv_repo, temp_db):
    """Test sqlite errors on read become read errors."""
    with patch.object(temp_db, "get_connection", side_effect=sqlite3.OperationalError("disk I/O error")):
        with pytest.raises(PersistenceReadError) as exc_info:
            kv_repo.get("patients")

    assert exc_info.value.key == "patients"
    assert "disk I/O error" in exc_info.value.context["reason"]


def test_set_wraps_sqlite_errors(kv_repo, temp_db):
    """Test sqlite errors on write become write errors."""
    conn = temp_db.get_connection()
    conn.execute("DROP TABLE key_value")
    conn.commit()
    conn.close()

    with pytest.raises(PersistenceWriteError) as exc_info:
        kv_repo.set("patients", "[]")

    assert exc_info.value.key == "patients"


def test_get_on_missing_table_raises_read_error(kv_repo, temp_db):
    """Test reading without the table raises a read error."""
    conn = temp_db.get_connection()
    conn.execute("DROP TABLE key_value")
    conn.commit()
    conn.close()

    with pytest.raises(PersistenceReadError):
        kv_repo.get("patients")
