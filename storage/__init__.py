"""
TransientDB Storage
===================
Public API for the storage layer.

Usage:
    from storage import RecordStore, ValueKind, is_scalar
"""

from storage.types import ValueKind, kind_of, is_scalar, scalar_leading_run
from storage.record_store import Record, RecordStore

__all__ = [
    "ValueKind", "kind_of", "is_scalar", "scalar_leading_run",
    "Record", "RecordStore",
]
