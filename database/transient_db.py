"""
TransientDB
===========
In-memory document store with automatic equality indexing.

Records are mappings of field name to value. Every scalar field in a
record's leading scalar run is indexed, so equality queries never scan
the full store:

    db = TransientDB()
    db.insert({"name": "a", "type": "x"}).insert({"name": "b", "type": "x"})
    db.where({"type": "x"})        # both records, in insertion order
    db.remove_where({"name": "b"})

Queries are conjunctions of equality predicates. An empty query matches
nothing. Composite query values match nothing.

Concurrency: none. Callers sharing an instance across threads must
serialize every call.
"""

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional

from execution.query import match_ids
from indexing.inverted_index import InvertedIndex
from storage.record_store import Record, RecordStore


logger = logging.getLogger(__name__)


def _check_mapping(value: Any, what: str) -> None:
    """Reject non-mapping arguments and non-string field names."""
    if not isinstance(value, Mapping):
        raise TypeError(f"{what} must be a mapping, got {type(value).__name__}")
    for field in value:
        if not isinstance(field, str):
            raise TypeError(
                f"{what} field names must be str, got {type(field).__name__}"
            )


class TransientDB:
    """
    Single-table in-memory document store.

    Provides:
    - insert(): Store a record (chainable)
    - where(): Records matching a query, in insertion order
    - remove_where(): Delete records matching a query
    - ids_where(): Ids of records matching a query
    - get(): Fetch a record by id
    """

    def __init__(self):
        self._records = RecordStore()
        self._index = InvertedIndex()

    # ─── Writes ─────────────────────────────────────────────────────

    def insert(self, record: Mapping[str, Any]) -> "TransientDB":
        """Store `record` and index its scalar leading run. Returns self."""
        _check_mapping(record, "record")
        record_id = self._records.append(record)
        self._index.insert(record_id, self._records.get(record_id))
        logger.debug("Inserted record %d (%d fields)", record_id, len(record))
        return self

    def remove_where(self, query: Mapping[str, Any]) -> None:
        """Delete every record matching `query`. No match is a no-op."""
        _check_mapping(query, "query")
        removed = 0
        for record_id in match_ids(self._index, query):
            record = self._records.get(record_id)
            if record is None:
                continue
            self._index.remove(record_id, record)
            self._records.remove(record_id)
            removed += 1
        if removed:
            logger.debug("Removed %d record(s) matching %r", removed, dict(query))

    # ─── Reads ──────────────────────────────────────────────────────

    def ids_where(self, query: Mapping[str, Any]) -> List[int]:
        """Ids of live records matching every pair of `query`, ascending."""
        _check_mapping(query, "query")
        return match_ids(self._index, query)

    def where(self, query: Mapping[str, Any]) -> List[Record]:
        """Records matching every pair of `query`, in insertion order."""
        results = []
        for record_id in self.ids_where(query):
            record = self._records.get(record_id)
            if record is not None:
                results.append(record)
        return results

    def get(self, record_id: int) -> Optional[Record]:
        """Record with the given id, or None if removed or never assigned."""
        return self._records.get(record_id)

    def stats(self) -> Dict[str, int]:
        """Counters describing the store and its index."""
        return {
            "records": len(self._records),
            "slots": self._records.slot_count,
            "gaps": self._records.slot_count - len(self._records),
            "indexed_fields": len(list(self._index.fields())),
            "index_entries": self._index.entry_count(),
        }

    def fields(self) -> List[str]:
        """Field names currently present in the index."""
        return list(self._index.fields())

    # ─── Container protocol ─────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        for _, record in self._records.items():
            yield record

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def __repr__(self) -> str:
        return f"TransientDB(records={len(self._records)})"
