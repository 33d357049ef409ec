from __future__ import annotations

import pytest

from medtracker.errors import PersistenceError
from medtracker.medications.store import MedicationStore
from medtracker.storage import db
from medtracker.storage.kv import SqliteKeyValueStorage

from conftest import ASPIRIN, MORNING


@pytest.fixture
def sqlite_db(tmp_path):
    db.init_storage_db(tmp_path / "data" / "medtracker.db")
    yield tmp_path / "data" / "medtracker.db"
    db.dispose_storage_db()


def test_init_creates_database_file(sqlite_db):
    assert sqlite_db.exists()


def test_get_missing_key(sqlite_db):
    assert SqliteKeyValueStorage().get_item("absent") is None


def test_set_item_upserts(sqlite_db):
    storage = SqliteKeyValueStorage()
    storage.set_item("k", "first")
    storage.set_item("k", "second")
    assert storage.get_item("k") == "second"


def test_quota_rejects_write_and_keeps_previous_value(sqlite_db):
    storage = SqliteKeyValueStorage(quota_bytes=16)
    storage.set_item("k", "small")

    with pytest.raises(PersistenceError):
        storage.set_item("k", "x" * 64)

    assert storage.get_item("k") == "small"


def test_store_survives_reinitialization(sqlite_db):
    store = MedicationStore(SqliteKeyValueStorage())
    record = store.add(ASPIRIN, now=MORNING)
    store.toggle_taken(record.id, MORNING)

    db.init_storage_db(sqlite_db)

    assert MedicationStore(SqliteKeyValueStorage()).load() == store.list()


def test_session_scope_requires_init():
    db.dispose_storage_db()
    with pytest.raises(RuntimeError):
        with db.storage_session_scope():
            pass
