# src/dia_maestro/core/models.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


def _str_or_none(raw: Any) -> str | None:
    if raw is None:
        return None
    s = str(raw)
    return s if s else None


def _str_or_keep(raw: Any) -> str | None:
    """Like _str_or_none, but an empty string stays (it clears a stored field)."""
    return None if raw is None else str(raw)


def _to_int(raw: Any, default: int = 0) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True, slots=True)
class Task:
    """
    A single task.

    Records are immutable: every mutation replaces the record inside its
    collection (dataclasses.replace).

    Notes:
    - `order` is the manual display position; it is not guaranteed to match
      the position inside the stored sequence.
    - `assigned_to_id` is a weak reference to Worker.id and may dangle.
    - `due_date` is an ISO calendar date (YYYY-MM-DD), no time, no zone.
    """

    id: str
    name: str
    tags: list[str] = field(default_factory=list)
    completed: bool = False
    order: int = 0
    assigned_to_id: str | None = None
    due_date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "tags": list(self.tags),
            "completed": self.completed,
            "order": self.order,
        }
        if self.assigned_to_id:
            out["assignedToId"] = self.assigned_to_id
        if self.due_date:
            out["dueDate"] = self.due_date
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        tags_raw = raw.get("tags") or []
        tags = [str(t) for t in tags_raw] if isinstance(tags_raw, list) else []
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("name", "")),
            tags=tags,
            completed=bool(raw.get("completed", False)),
            order=_to_int(raw.get("order")),
            assigned_to_id=_str_or_none(raw.get("assignedToId")),
            due_date=_str_or_none(raw.get("dueDate")),
        )


@dataclass(frozen=True, slots=True)
class Worker:
    id: str
    name: str
    department: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "department": self.department}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Worker:
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("name", "")),
            department=str(raw.get("department", "")),
        )


@dataclass(frozen=True, slots=True)
class ProfileData:
    """User profile; every field is optional. None means never set, "" means cleared."""

    name: str | None = None
    email: str | None = None
    bio: str | None = None
    avatar_data_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.name is not None:
            out["name"] = self.name
        if self.email is not None:
            out["email"] = self.email
        if self.bio is not None:
            out["bio"] = self.bio
        if self.avatar_data_url is not None:
            out["avatarDataUrl"] = self.avatar_data_url
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ProfileData:
        return cls(
            name=_str_or_keep(raw.get("name")),
            email=_str_or_keep(raw.get("email")),
            bio=_str_or_keep(raw.get("bio")),
            avatar_data_url=_str_or_keep(raw.get("avatarDataUrl")),
        )


def records_from_dicts(raw_items: list[Any], factory: Any) -> list[Any]:
    """
    Convert stored JSON objects into records, skipping the broken ones.

    `factory` is a record class with a `from_dict` classmethod.
    """
    out: list[Any] = []
    for idx, raw in enumerate(raw_items):
        if not isinstance(raw, dict) or "id" not in raw:
            logger.warning("Skipping stored %s #%d: not a record (%r)", factory.__name__, idx, raw)
            continue
        out.append(factory.from_dict(raw))
    return out
