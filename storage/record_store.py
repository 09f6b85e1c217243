"""
TransientDB Record Store
========================
Append-only slot array holding every inserted record.

Identifiers:
  A record's id is its slot index, assigned at append time.
  Removing a record leaves an empty slot (None) behind; slots are never
  reused, so ids strictly increase and double as insertion order.

Snapshots:
  Each record is stored as a read-only view over a shallow copy of the
  caller's mapping. Top-level fields cannot change after insertion.
  Nested values are shared with the caller and are not protected.

Concurrency: single-writer assumed.
"""

from types import MappingProxyType
from typing import Any, Iterator, List, Mapping, Optional, Tuple


Record = Mapping[str, Any]


class RecordStore:
    """
    Slot array of read-only record snapshots.

    Provides:
    - append(): Store a snapshot, returns its id
    - get(): Fetch a record by id (None for gaps and unknown ids)
    - remove(): Empty a slot (idempotent)
    - items(): Iterate live (id, record) pairs in id order
    """

    def __init__(self):
        self._slots: List[Optional[Record]] = []
        self._live: int = 0

    def append(self, record: Record) -> int:
        """Store a read-only snapshot of `record` and return its id."""
        record_id = len(self._slots)
        self._slots.append(MappingProxyType(dict(record)))
        self._live += 1
        return record_id

    def get(self, record_id: int) -> Optional[Record]:
        """
        Return the record at `record_id`, or None if the slot is empty,
        unassigned, or `record_id` is not an int (bools are not ids).
        """
        if not isinstance(record_id, int) or isinstance(record_id, bool):
            return None
        if record_id < 0 or record_id >= len(self._slots):
            return None
        return self._slots[record_id]

    def remove(self, record_id: int) -> None:
        """Empty the slot. Removing a gap or an unknown id does nothing."""
        if self.get(record_id) is None:
            return
        self._slots[record_id] = None
        self._live -= 1

    def items(self) -> Iterator[Tuple[int, Record]]:
        """Yield (id, record) for every live record, ascending id."""
        for record_id, record in enumerate(self._slots):
            if record is not None:
                yield record_id, record

    @property
    def slot_count(self) -> int:
        """Number of ids ever assigned, gaps included."""
        return len(self._slots)

    def __len__(self) -> int:
        return self._live

    def __contains__(self, record_id: object) -> bool:
        return isinstance(record_id, int) and self.get(record_id) is not None
