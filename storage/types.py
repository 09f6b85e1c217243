"""
TransientDB Value Kinds
=======================
Classifies field values into the kinds the index understands.

Scalar kinds: NULL, BOOLEAN, NUMBER, STRING, BYTES.
Everything else (mappings, sequences, sets, arbitrary objects) is COMPOSITE
and is never indexed.

Field order:
  Only the leading contiguous run of scalar fields of a record is indexed.
  The first composite value ends the run, even if scalar fields follow it.
"""

from enum import Enum
from typing import Any, Iterator, Mapping, Tuple


class ValueKind(Enum):
    """Kinds of field values."""
    NULL = "NULL"
    BOOLEAN = "BOOLEAN"
    NUMBER = "NUMBER"
    STRING = "STRING"
    BYTES = "BYTES"
    COMPOSITE = "COMPOSITE"


def kind_of(value: Any) -> ValueKind:
    """Return the ValueKind of a Python value."""
    if value is None:
        return ValueKind.NULL
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, bytes):
        return ValueKind.BYTES
    return ValueKind.COMPOSITE


def is_scalar(value: Any) -> bool:
    """True if the value can be indexed and queried."""
    return kind_of(value) is not ValueKind.COMPOSITE


def scalar_leading_run(record: Mapping[str, Any]) -> Iterator[Tuple[str, Any]]:
    """
    Yield (field, value) pairs of the record in field order, stopping
    at the first composite value.

        {"a": 1, "b": {"x": 1}, "c": 2}  ->  ("a", 1)
    """
    for field, value in record.items():
        if not is_scalar(value):
            break
        yield field, value
