"""
TransientDB Indexing Module
===========================
In-memory inverted index for equality queries.

Components:
  - key_encoding: Tagged (kind, value) keys for index entries
  - inverted_index: field → value → ordered id-set maintenance and lookup
"""
