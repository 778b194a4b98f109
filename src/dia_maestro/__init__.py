"""Dia Maestro: a personal task organizer with workers, due dates and AI tag suggestions."""

__version__ = "0.1.0"
