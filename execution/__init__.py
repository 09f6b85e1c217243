"""
TransientDB Execution Module
============================
Equality query evaluation against the inverted index.
"""
