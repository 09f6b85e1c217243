"""
TransientDB Public API
======================

Usage:
    from database import TransientDB
"""

from database.transient_db import TransientDB

__all__ = ["TransientDB"]
