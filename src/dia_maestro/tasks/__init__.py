"""
Task subsystem.

Components:
- task_registry.py: in-memory task collection mirrored into the record store
  (add / toggle / edit / delete / manual reorder)
"""
