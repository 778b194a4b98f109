"""
AI tag suggestions.

Components:
- gateway.py: one LLM call per task name -> list of suggested tags (never raises)
- debounce.py: cancellable delayed call on the asyncio loop
- draft.py: task-creation form state (debounced suggestions, draft tags, submit)
"""
