"""
RecordStore: JSON-file persistence for the list of confirmed TimeRecords.

The file holds a single mapping ``{key: [record, ...]}``.  Reads of a
missing file or key return an empty list; writes replace the whole
collection.  Record order is insertion order.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, List

from attendance.records import RecordValidationError, TimeRecord

logger = logging.getLogger(__name__)

DEFAULT_KEY = "timeRecords"


class RecordStoreError(Exception):
    """The store file exists but cannot be read as a record collection."""


class RecordStore:
    """
    Usage:
        store = RecordStore("data/time_records.json")
        records = store.load()
        store.add(create_record("2024-03-15", "09:00", "18:30"))
        store.delete(record_id)
    """

    def __init__(self, path: str | Path, key: str = DEFAULT_KEY):
        self.path = Path(path)
        self.key = key

    def _read_raw(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise RecordStoreError(f"Corrupt record store {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise RecordStoreError(f"Record store {self.path} must hold a JSON object")
        return data

    def load(self) -> List[TimeRecord]:
        items = self._read_raw().get(self.key) or []
        if not isinstance(items, list):
            raise RecordStoreError(f"Key '{self.key}' in {self.path} is not a list")
        try:
            records = [TimeRecord.from_dict(item) for item in items]
        except (KeyError, TypeError, ValueError, RecordValidationError) as exc:
            raise RecordStoreError(f"Malformed record in {self.path}: {exc}") from exc
        logger.debug("Loaded %d records from %s", len(records), self.path)
        return records

    def save(self, records: List[TimeRecord]) -> Path:
        """Replace the stored collection with *records*."""
        data = self._read_raw()
        data[self.key] = [r.to_dict() for r in records]

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp, self.path)
        logger.info("Saved %d records to %s", len(records), self.path)
        return self.path

    def add(self, record: TimeRecord) -> List[TimeRecord]:
        records = self.load()
        records.append(record)
        self.save(records)
        return records

    def delete(self, record_id: str) -> bool:
        """Remove the record with *record_id*; ``False`` if it was not stored."""
        records = self.load()
        kept = [r for r in records if r.id != record_id]
        if len(kept) == len(records):
            return False
        self.save(kept)
        return True
