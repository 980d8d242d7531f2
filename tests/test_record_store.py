"""Tests for the JSON-file record store."""

import json

import pytest

from attendance.records import create_record
from pipeline.record_store import RecordStore, RecordStoreError


def test_missing_file_loads_empty(tmp_path):
    assert RecordStore(tmp_path / "none.json").load() == []


def test_add_then_load_preserves_insertion_order(tmp_path):
    store = RecordStore(tmp_path / "data" / "records.json")
    a = create_record("2024-03-15", "09:00", "19:00")
    b = create_record("2024-03-01", "09:00", "18:00")
    store.add(a)
    store.add(b)
    assert store.load() == [a, b]
    assert not (tmp_path / "data" / "records.json.tmp").exists()


def test_save_keeps_other_keys(tmp_path):
    path = tmp_path / "records.json"
    path.write_text(json.dumps({"settings": {"theme": "dark"}}), encoding="utf-8")
    store = RecordStore(path)
    store.save([create_record("2024-03-15", "09:00", "19:00")])
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["settings"] == {"theme": "dark"}
    assert len(data["timeRecords"]) == 1
    assert data["timeRecords"][0]["dayType"] == "workday"


def test_delete(tmp_path):
    store = RecordStore(tmp_path / "records.json")
    rec = create_record("2024-03-15", "09:00", "19:00")
    store.add(rec)
    assert store.delete("not-there") is False
    assert store.delete(rec.id) is True
    assert store.load() == []


def test_loads_legacy_weekend_records(tmp_path):
    path = tmp_path / "records.json"
    path.write_text(json.dumps({"timeRecords": [{
        "id": "old", "date": "2024-03-16", "startTime": "10:00", "endTime": "12:00",
        "type": "weekend", "workedMinutes": 120, "overtimeMinutes": 120,
    }]}), encoding="utf-8")
    (rec,) = RecordStore(path).load()
    assert rec.day_type == "restDay"


@pytest.mark.parametrize("content", [
    "{not json",
    "[1, 2]",
    json.dumps({"timeRecords": {"id": "x"}}),
    json.dumps({"timeRecords": [{"id": "x"}]}),
])
def test_corrupt_store_raises(tmp_path, content):
    path = tmp_path / "records.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(RecordStoreError):
        RecordStore(path).load()


def test_custom_key(tmp_path):
    path = tmp_path / "records.json"
    store = RecordStore(path, key="other")
    store.add(create_record("2024-03-15", "09:00", "19:00"))
    assert "other" in json.loads(path.read_text(encoding="utf-8"))
    assert RecordStore(path).load() == []
