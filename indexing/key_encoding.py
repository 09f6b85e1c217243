"""
TransientDB Key Encoding
========================
Tagged keys for inverted index entries.

A key is (ValueKind, normalized value). Tagging keeps values of different
kinds apart even when Python would call them equal or they print alike:

  1      → (NUMBER, 1)
  "1"    → (STRING, "1")
  True   → (BOOLEAN, True)     distinct from (NUMBER, 1)
  1.0    → (NUMBER, 1.0)       same entry as 1
  -0.0   → (NUMBER, 0.0)       same entry as 0.0
  NaN    → (NUMBER, NAN_KEY)   every NaN shares one entry
  None   → (NULL, None)

Composite values have no key.
"""

import math
from typing import Any, Hashable, Tuple

from storage.types import ValueKind, kind_of


# NaN != NaN, so all NaNs map to this placeholder instead
NAN_KEY = "NaN"

IndexKey = Tuple[ValueKind, Hashable]


def encode_key(value: Any) -> IndexKey:
    """
    Encode a scalar value as a tagged index key.

    Raises ValueError if value is composite (composites are not indexed).
    """
    kind = kind_of(value)

    if kind is ValueKind.COMPOSITE:
        raise ValueError(
            f"Composite values cannot be indexed: {type(value).__name__}"
        )

    if kind is ValueKind.NUMBER and isinstance(value, float):
        if math.isnan(value):
            return (kind, NAN_KEY)
        if value == 0.0:
            value = 0.0

    return (kind, value)


def decode_key(key: IndexKey) -> Any:
    """Inverse of encode_key (NaN comes back as float('nan'))."""
    kind, value = key
    if kind is ValueKind.NUMBER and value == NAN_KEY:
        return math.nan
    return value
