"""
TransientDB Inverted Index
==========================
field name → tagged value key → ordered set of record ids.

Id-sets are dicts with None values: insertion-ordered with O(1)
membership. Ids are added in increasing order, so each set iterates
in insertion order of the records.

Maintenance:
  insert() and remove() are the only mutators. Both walk the record's
  scalar leading run, so a record is indexed under exactly the fields
  it is removed from. Empty entries and columns are pruned on removal.

Concurrency: single-writer assumed.
"""

import logging
from typing import Any, Dict, Iterator, Mapping

from indexing.key_encoding import IndexKey, encode_key
from storage.types import is_scalar, scalar_leading_run


logger = logging.getLogger(__name__)

IdSet = Dict[int, None]


class InvertedIndex:
    """Equality index over the scalar leading run of every live record."""

    def __init__(self):
        self._columns: Dict[str, Dict[IndexKey, IdSet]] = {}

    # ─── Maintenance ────────────────────────────────────────────────

    def insert(self, record_id: int, record: Mapping[str, Any]) -> None:
        """Add `record_id` under every (field, value) of the record's scalar leading run."""
        for field, value in scalar_leading_run(record):
            column = self._columns.setdefault(field, {})
            entry = column.setdefault(encode_key(value), {})
            entry[record_id] = None

    def remove(self, record_id: int, record: Mapping[str, Any]) -> None:
        """
        Remove `record_id` from every entry the record was indexed under.
        Missing columns, entries or ids are skipped.
        """
        for field, value in scalar_leading_run(record):
            column = self._columns.get(field)
            if column is None:
                continue
            key = encode_key(value)
            entry = column.get(key)
            if entry is None:
                continue
            entry.pop(record_id, None)
            if not entry:
                del column[key]
            if not column:
                del self._columns[field]
                logger.debug("Dropped empty index column %r", field)

    # ─── Lookup ─────────────────────────────────────────────────────

    def lookup(self, field: str, value: Any) -> IdSet:
        """
        Return a copy of the id-set for (field, value).

        Unknown fields, unknown values and composite values yield an
        empty set.
        """
        if not is_scalar(value):
            return {}
        column = self._columns.get(field)
        if column is None:
            return {}
        entry = column.get(encode_key(value))
        if entry is None:
            return {}
        return dict(entry)

    # ─── Introspection ──────────────────────────────────────────────

    def fields(self) -> Iterator[str]:
        """Indexed field names, in order of first appearance."""
        return iter(list(self._columns))

    def entry_count(self) -> int:
        """Total number of (field, value) entries."""
        return sum(len(column) for column in self._columns.values())

    def __contains__(self, field: object) -> bool:
        return field in self._columns
