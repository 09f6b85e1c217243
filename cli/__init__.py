"""
TransientDB CLI
===============
Interactive shell, script runner and result rendering.
"""
