from __future__ import annotations

import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta

import pytest

from medtracker.errors import NotFoundError, ValidationError
from medtracker.medications.store import MedicationStore

from conftest import ASPIRIN, MORNING


def test_aspirin_scenario(store):
    assert store.completion_ratio(MORNING) == 0

    record = store.add(ASPIRIN, now=MORNING - timedelta(hours=1))
    assert len(store.list()) == 1
    assert record.taken_at is None
    assert record.name == "Aspirin"
    assert record.time == "08:00"

    taken = store.toggle_taken(record.id, MORNING)
    assert taken.taken_at == MORNING
    assert store.completion_ratio(MORNING) == 1.0

    untaken = store.toggle_taken(record.id, MORNING + timedelta(minutes=30))
    assert untaken.taken_at is None
    assert store.completion_ratio(MORNING) == 0


def test_add_assigns_unique_ids_with_default_factory(storage):
    store = MedicationStore(storage)
    ids = {store.add(ASPIRIN, now=MORNING).id for _ in range(50)}
    assert len(ids) == 50


def test_add_retries_colliding_id(storage):
    generated = iter(["dup", "dup", "other"])
    store = MedicationStore(storage, id_factory=lambda: next(generated))

    first = store.add(ASPIRIN, now=MORNING)
    second = store.add(ASPIRIN, now=MORNING)

    assert first.id == "dup"
    assert second.id == "other"


def test_add_without_now_uses_current_time(store):
    before = datetime.now().astimezone()
    record = store.add(ASPIRIN)
    assert record.created_at >= before


def test_add_trims_fields(store):
    record = store.add({"name": "  Aspirin ", "dosage": " 100mg", "time": "08:00", "frequency": "daily "}, now=MORNING)
    assert record.name == "Aspirin"
    assert record.dosage == "100mg"
    assert record.frequency == "daily"


@pytest.mark.parametrize("missing", ["name", "dosage", "time", "frequency"])
def test_add_rejects_empty_required_field(store, storage, missing):
    fields = dict(ASPIRIN, **{missing: "   "})

    with pytest.raises(ValidationError) as excinfo:
        store.add(fields, now=MORNING)

    assert excinfo.value.fields == (missing,)
    assert store.list() == []
    assert storage.get_item("medtracker-medications") is None


def test_add_rejects_malformed_time(store):
    with pytest.raises(ValidationError) as excinfo:
        store.add(dict(ASPIRIN, time="8am"), now=MORNING)
    assert excinfo.value.fields == ("time",)


def test_update_replaces_fields_and_keeps_identity(store):
    record = store.add(ASPIRIN, now=MORNING - timedelta(days=1))
    store.toggle_taken(record.id, MORNING)

    updated = store.update(record.id, {"name": "Ibuprofen", "dosage": "200mg", "time": "21:30", "frequency": "weekly"})

    assert updated.id == record.id
    assert updated.created_at == record.created_at
    assert updated.taken_at == MORNING
    assert (updated.name, updated.dosage, updated.time, updated.frequency) == ("Ibuprofen", "200mg", "21:30", "weekly")
    assert store.get(record.id) == updated


def test_update_unknown_id_leaves_store_unchanged(store, storage):
    store.add(ASPIRIN, now=MORNING)
    before = store.list()
    persisted = storage.get_item("medtracker-medications")

    with pytest.raises(NotFoundError):
        store.update("missing", dict(ASPIRIN, name="Other"))

    assert store.list() == before
    assert storage.get_item("medtracker-medications") == persisted


def test_update_validates_fields(store):
    record = store.add(ASPIRIN, now=MORNING)
    with pytest.raises(ValidationError):
        store.update(record.id, dict(ASPIRIN, dosage=""))
    assert store.get(record.id).dosage == "100mg"


def test_remove(store):
    first = store.add(ASPIRIN, now=MORNING)
    second = store.add(dict(ASPIRIN, name="Vitamin D"), now=MORNING)

    removed = store.remove(first.id)

    assert removed == first
    assert [r.id for r in store.list()] == [second.id]
    with pytest.raises(NotFoundError):
        store.remove(first.id)


def test_toggle_unknown_id(store):
    with pytest.raises(NotFoundError):
        store.toggle_taken("missing", MORNING)


def test_toggle_twice_same_day_restores_state(store):
    record = store.add(ASPIRIN, now=MORNING)

    # 未服用 -> 服用 -> 未服用
    store.toggle_taken(record.id, MORNING)
    store.toggle_taken(record.id, MORNING + timedelta(hours=2))
    assert store.get(record.id).taken_at is None

    # 服用 -> 未服用 -> 服用
    store.toggle_taken(record.id, MORNING)
    store.toggle_taken(record.id, MORNING + timedelta(hours=1))
    store.toggle_taken(record.id, MORNING + timedelta(hours=3))
    assert store.is_taken_today(store.get(record.id), MORNING + timedelta(hours=3))


def test_toggle_after_prior_day_marks_taken_again(store):
    record = store.add(ASPIRIN, now=MORNING - timedelta(days=2))
    yesterday = MORNING - timedelta(days=1)
    store.toggle_taken(record.id, yesterday)

    assert not store.is_taken_today(store.get(record.id), MORNING)
    toggled = store.toggle_taken(record.id, MORNING)

    assert toggled.taken_at == MORNING


def test_taken_today_uses_calendar_day_not_24_hours(store):
    record = store.add(ASPIRIN, now=MORNING)
    store.toggle_taken(record.id, datetime(2026, 10, 19, 0, 1))

    assert store.is_taken_today(store.get(record.id), datetime(2026, 10, 19, 23, 59))
    assert not store.is_taken_today(store.get(record.id), datetime(2026, 10, 20, 0, 0))


def test_list_returns_insertion_order_copy(store):
    names = ["A", "B", "C"]
    for name in names:
        store.add(dict(ASPIRIN, name=name), now=MORNING)

    listed = store.list()
    listed.clear()

    assert [r.name for r in store.list()] == names


def test_completion_ratio_partial(store):
    a = store.add(ASPIRIN, now=MORNING)
    store.add(dict(ASPIRIN, name="B"), now=MORNING)
    store.add(dict(ASPIRIN, name="C"), now=MORNING)
    store.toggle_taken(a.id, MORNING)

    assert store.completion_ratio(MORNING) == pytest.approx(1 / 3)


def test_progress_summary(store):
    assert store.progress(MORNING).percentage == 0
    assert store.progress(MORNING).streak == 0

    a = store.add(ASPIRIN, now=MORNING)
    b = store.add(dict(ASPIRIN, name="B"), now=MORNING)
    store.add(dict(ASPIRIN, name="C"), now=MORNING)
    store.toggle_taken(a.id, MORNING)
    store.toggle_taken(b.id, MORNING)

    summary = store.progress(MORNING)
    assert (summary.taken, summary.total, summary.percentage, summary.streak) == (2, 3, 67, 0)


def test_progress_streak_when_all_taken(store):
    record = store.add(ASPIRIN, now=MORNING)
    store.toggle_taken(record.id, MORNING)

    summary = store.progress(MORNING)
    assert summary.percentage == 100
    assert summary.streak == 1


def test_progress_rounds_half_up(storage):
    store = MedicationStore(storage, id_factory=lambda: uuid.uuid4().hex)
    records = [store.add(dict(ASPIRIN, name=str(i)), now=MORNING) for i in range(8)]
    # 1/8 = 12.5% -> 13
    store.toggle_taken(records[0].id, MORNING)
    assert store.progress(MORNING).percentage == 13


def test_taken_at_in_the_future_is_not_taken_today(store):
    record = store.add(ASPIRIN, now=MORNING)
    # domain 時刻を進めて服用 -> 時刻を戻した状態
    store.toggle_taken(record.id, MORNING + timedelta(hours=1))

    assert not store.is_taken_today(store.get(record.id), MORNING)
    assert store.progress(MORNING).taken == 0


def test_toggle_overwrites_future_taken_at_with_now(store):
    record = store.add(ASPIRIN, now=MORNING)
    store.toggle_taken(record.id, MORNING + timedelta(days=1))

    toggled = store.toggle_taken(record.id, MORNING)

    assert toggled.taken_at == MORNING
    assert store.is_taken_today(toggled, MORNING)


def test_removed_id_is_never_reissued(storage):
    generated = iter(["a", "a", "b"])
    store = MedicationStore(storage, id_factory=lambda: next(generated))

    first = store.add(ASPIRIN, now=MORNING)
    store.remove(first.id)
    second = store.add(ASPIRIN, now=MORNING)

    assert second.id == "b"


def test_loaded_ids_are_not_reissued(store, storage):
    store.add(ASPIRIN, now=MORNING)

    generated = iter(["med-1", "fresh"])
    reloaded = MedicationStore(storage, id_factory=lambda: next(generated))
    reloaded.load()

    assert reloaded.add(ASPIRIN, now=MORNING).id == "fresh"


def test_concurrent_adds_keep_every_record(storage):
    store = MedicationStore(storage)

    def _add(i: int) -> None:
        store.add(dict(ASPIRIN, name=f"Medication {i}"), now=MORNING)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(_add, range(40)))

    assert len(store.list()) == 40
    assert len({r.id for r in store.list()}) == 40
    assert MedicationStore(storage).load() == store.list()
