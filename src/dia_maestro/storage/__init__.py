"""
Local persistence.

Components:
- kv_store.py: key-value storage port implementations (SQLite, in-memory)
- record_store.py: JSON collections on top of a key-value store, with error reporting
"""
