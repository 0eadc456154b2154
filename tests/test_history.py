"""Tests for HistoryStore."""

import json

import pytest

from conftest import MemoryStorage, make_result
from sehati.db import LocalStorage
from sehati.history import HistoryStore


def test_load_absent_slot(memory_storage):
    store = HistoryStore(memory_storage)
    assert store.load() == []
    assert len(store) == 0


def test_load_corrupt_snapshot_degrades_to_empty(caplog):
    storage = MemoryStorage({"sehati_history": "{not json"})
    store = HistoryStore(storage)

    assert store.load() == []
    assert "failed to parse stored history" in caplog.text


def test_load_wrong_shape_degrades_to_empty():
    storage = MemoryStorage({"sehati_history": json.dumps({"a": 1})})
    assert HistoryStore(storage).load() == []


def test_load_browser_snapshot_with_epoch_ms():
    snapshot = [
        {
            "product_name": "لبن",
            "ingredients": ["حليب"],
            "nutrition": {"calories": 60, "protein": 3, "carbohydrates": 5,
                          "sugar": 5, "fat": 3},
            "allergens": ["حليب"],
            "health_grade": "A",
            "health_summary": "جيد",
            "timestamp": 1735689600000,
        }
    ]
    storage = MemoryStorage({"sehati_history": json.dumps(snapshot)})
    entries = HistoryStore(storage).load()

    assert entries[0].product_name == "لبن"
    assert entries[0].timestamp == "2025-01-01T00:00:00+00:00"


@pytest.mark.parametrize(
    "raw",
    [
        '[{"product_name": "x", "timestamp": 1e20}]',
        '[{"product_name": "x", "timestamp": -1e20}]',
        '[{"product_name": "x", "timestamp": Infinity}]',
        '[{"product_name": "x", "timestamp": NaN}]',
    ],
)
def test_load_out_of_range_epoch_keeps_entry(raw):
    storage = MemoryStorage({"sehati_history": raw})
    entries = HistoryStore(storage).load()

    assert [e.product_name for e in entries] == ["x"]
    assert entries[0].timestamp == ""


def test_load_scalar_list_fields_are_wrapped():
    snapshot = [{"product_name": "لبن", "ingredients": "حليب",
                 "allergens": "حليب", "nutrition": "n/a"}]
    storage = MemoryStorage({"sehati_history": json.dumps(snapshot)})
    entry = HistoryStore(storage).load()[0]

    assert entry.ingredients == ["حليب"]
    assert entry.allergens == ["حليب"]
    assert entry.nutrition.calories == ""


def test_append_prepends(memory_storage):
    store = HistoryStore(memory_storage)
    store.append(make_result("first"))
    store.append(make_result("second"))

    assert [e.product_name for e in store] == ["second", "first"]


def test_append_caps_at_ten_dropping_oldest(memory_storage):
    store = HistoryStore(memory_storage)
    for i in range(10):
        store.append(make_result(f"p{i}"))
    assert len(store) == 10

    store.append(make_result("newest"))

    assert len(store) == 10
    assert store[0].product_name == "newest"
    assert "p0" not in [e.product_name for e in store]
    assert store[9].product_name == "p1"


def test_custom_limit(memory_storage):
    store = HistoryStore(memory_storage, limit=2)
    for name in ("a", "b", "c"):
        store.append(make_result(name))
    assert [e.product_name for e in store] == ["c", "b"]


def test_remove_preserves_order(memory_storage):
    store = HistoryStore(memory_storage)
    for name in ("a", "b", "c", "d"):
        store.append(make_result(name))

    removed = store.remove(1)

    assert removed.product_name == "c"
    assert [e.product_name for e in store] == ["d", "b", "a"]


def test_remove_out_of_range(memory_storage):
    store = HistoryStore(memory_storage)
    store.append(make_result("a"))
    with pytest.raises(IndexError):
        store.remove(1)
    with pytest.raises(IndexError):
        store.remove(-1)
    assert len(store) == 1


def test_clear_requires_confirmation(memory_storage):
    store = HistoryStore(memory_storage)
    store.append(make_result("a"))

    assert store.clear(lambda: False) is False
    assert len(store) == 1

    assert store.clear(lambda: True) is True
    assert len(store) == 0
    assert json.loads(memory_storage.items["sehati_history"]) == []


def test_every_mutation_rewrites_snapshot(memory_storage):
    store = HistoryStore(memory_storage)
    store.append(make_result("a"))
    store.append(make_result("b"))
    store.remove(0)
    store.clear(lambda: True)

    assert memory_storage.writes == 4


def test_entries_is_a_copy(memory_storage):
    store = HistoryStore(memory_storage)
    store.append(make_result("a"))
    store.entries.clear()
    assert len(store) == 1


def test_persisted_across_restarts(tmp_path):
    storage = LocalStorage(tmp_path / "storage.db")
    store = HistoryStore(storage)
    store.append(make_result("شوكولاتة", grade="E"))
    storage.close()

    reopened = LocalStorage(tmp_path / "storage.db")
    restored = HistoryStore(reopened)
    restored.load()
    reopened.close()

    assert len(restored) == 1
    assert restored[0].product_name == "شوكولاتة"
    assert restored[0].health_grade == "E"
    assert restored[0].nutrition.calories == 120
