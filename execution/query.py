"""
TransientDB Query Engine
========================
Multi-predicate equality queries by id-set intersection.

Algorithm:
  1. An empty query matches nothing (there is no implicit match-all).
  2. The first field in query order seeds the candidate set.
  3. Each later field drops candidates missing from its own lookup.
     Candidates only shrink, so the first field's entry size bounds
     the work. Putting the most selective field first is faster;
     field order never changes the result.
  4. Candidates come back in id-set order (record insertion order).
"""

from typing import Any, List, Mapping

from indexing.inverted_index import IdSet, InvertedIndex


def match_ids(index: InvertedIndex, query: Mapping[str, Any]) -> List[int]:
    """Return ids of live records matching every (field, value) pair of `query`."""
    candidates: IdSet = {}
    seeded = False

    for field, value in query.items():
        found = index.lookup(field, value)

        if not seeded:
            # lookup() hands back a copy, safe to filter in place
            candidates = found
            seeded = True
        else:
            for record_id in list(candidates):
                if record_id not in found:
                    del candidates[record_id]

        if not candidates:
            break

    return list(candidates)
