"""
Worker roster.

Components:
- worker_registry.py: worker collection, department grouping, assignee lookup
"""
